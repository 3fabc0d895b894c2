# -*- coding: utf-8 -*-
"""
taquilla/shared/__init__.py

Infraestructura compartida (configuración, logging, utilidades HTTP).
"""
