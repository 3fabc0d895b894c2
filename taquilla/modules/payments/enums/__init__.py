# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/enums/__init__.py

Superficie de exportación de enums del módulo Payments.

Incluye:
- GatewayEnvironment
- P2CState

Autor: Taquilla
Fecha: 2026-10-17
"""

from .gateway_environment_enum import GatewayEnvironment
from .p2c_state_enum import P2CState

__all__ = [
    "GatewayEnvironment",
    "P2CState",
]

# Fin del archivo taquilla/modules/payments/enums/__init__.py
