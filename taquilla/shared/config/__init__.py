# -*- coding: utf-8 -*-
"""
taquilla/shared/config/__init__.py

Entry-point ligero para configuración.

Expone imports estables:
    from taquilla.shared.config import get_gateway_settings, setup_logging_from_settings

No inicializa settings en import-time para evitar efectos colaterales
durante la recolección de tests.
"""

from taquilla.shared.config.logging_config import setup_logging, setup_logging_from_settings
from taquilla.shared.config.settings_gateway import GatewaySettings, get_gateway_settings

__all__ = [
    "GatewaySettings",
    "get_gateway_settings",
    "setup_logging",
    "setup_logging_from_settings",
]
# fin del archivo
