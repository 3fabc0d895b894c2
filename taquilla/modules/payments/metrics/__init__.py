# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/metrics/__init__.py

Métricas del módulo Payments.
"""
