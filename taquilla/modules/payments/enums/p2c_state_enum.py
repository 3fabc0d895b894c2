# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/enums/p2c_state_enum.py

Estados del protocolo P2C para un intento de transacción:

    IDLE -> PRE_REGISTERED -> AUTHORIZED | DECLINED -> (opcional) QUERIED

UNRESOLVED: la compra quedó sin respuesta; sólo una consulta de estado
la resuelve (A -> AUTHORIZED, R -> PRE_REGISTERED para reenviar).

Autor: Taquilla
Fecha: 2026-10-17
"""

from enum import StrEnum


class P2CState(StrEnum):
    """Estado de un intento de transacción P2C."""

    IDLE = "idle"
    PRE_REGISTERED = "pre_registered"
    AUTHORIZED = "authorized"
    DECLINED = "declined"
    QUERIED = "queried"
    UNRESOLVED = "unresolved"

    @property
    def is_terminal(self) -> bool:
        return self in (P2CState.AUTHORIZED, P2CState.DECLINED)


__all__ = ["P2CState"]

# Fin del archivo taquilla/modules/payments/enums/p2c_state_enum.py
