# -*- coding: utf-8 -*-
"""
taquilla/modules/__init__.py

Módulos de dominio de Taquilla.
"""
