# -*- coding: utf-8 -*-
"""
taquilla/__init__.py

Backend de venta de boletos: núcleo de integración con la pasarela
de pago móvil P2C (débito bancario por teléfono).

Autor: Taquilla
Fecha: 2026-10-17
"""

__version__ = "0.1.0"

# Fin del archivo taquilla/__init__.py
