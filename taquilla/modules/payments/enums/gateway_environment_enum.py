# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/enums/gateway_environment_enum.py

Ambiente de la pasarela P2C (producción o pruebas).

Autor: Taquilla
Fecha: 2026-10-17
"""

from enum import StrEnum


class GatewayEnvironment(StrEnum):
    """Ambiente contra el que opera el cliente de la pasarela."""

    PRODUCTION = "production"
    TEST = "test"

    @property
    def is_production(self) -> bool:
        return self is GatewayEnvironment.PRODUCTION

    @property
    def label(self) -> str:
        """Etiqueta legible usada en logs y errores enriquecidos."""
        return "PRODUCCIÓN" if self.is_production else "PRUEBAS"


__all__ = ["GatewayEnvironment"]

# Fin del archivo taquilla/modules/payments/enums/gateway_environment_enum.py
