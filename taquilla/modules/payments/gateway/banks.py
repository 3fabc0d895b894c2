# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/banks.py

Catálogo de bancos aceptados por la pasarela P2C (código SUDEBAN de 4 dígitos).

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Dict, List

from .errors import InvalidBankCode

UNKNOWN_BANK_NAME = "Banco Desconocido"

# El orden se conserva al listar bancos soportados
BANKS: Dict[str, str] = {
    "0102": "Banco de Venezuela",
    "0104": "Banco Venezolano de Crédito",
    "0105": "Banco Mercantil",
    "0108": "Banco Provincial",
    "0114": "Bancaribe",
    "0115": "Banco Exterior",
    "0116": "Banco Occidental de Descuento",
    "0128": "Banco Caroní",
    "0134": "Banesco",
    "0137": "Banco Sofitasa",
    "0138": "Banco Plaza",
    "0151": "BFC Banco Fondo Común",
    "0156": "100% Banco",
    "0157": "DelSur",
    "0163": "Banco del Tesoro",
    "0166": "Banco Agrícola de Venezuela",
    "0168": "Bancrecer",
    "0169": "Mi Banco",
    "0171": "Banco Activo",
    "0172": "Bancamiga",
    "0173": "Banco Internacional de Desarrollo",
    "0174": "Banplus",
    "0175": "Banco Bicentenario",
    "0177": "Banco de la Fuerza Armada Nacional Bolivariana",
    "0191": "Banco Nacional de Crédito",
}


def get_bank_name(code: Any) -> str:
    """Nombre del banco para diagnósticos; UNKNOWN_BANK_NAME si no existe."""
    return BANKS.get(str(code).strip() if code is not None else "", UNKNOWN_BANK_NAME)


def is_supported_bank(code: Any) -> bool:
    return code is not None and str(code).strip() in BANKS


def validate_bank_code(code: Any) -> str:
    """
    Valida el código de banco contra el catálogo.

    Returns:
        El código limpio (sin espacios)

    Raises:
        InvalidBankCode: si el código no está en el catálogo
    """
    if not is_supported_bank(code):
        raise InvalidBankCode(
            f"Código de banco inválido: {code} ({get_bank_name(code)}). "
            "Verifica que el banco esté soportado.",
            raw_value=code,
        )
    return str(code).strip()


def supported_banks() -> List[Dict[str, str]]:
    """Lista de bancos soportados como [{code, name}, ...]."""
    return [{"code": code, "name": name} for code, name in BANKS.items()]


__all__ = [
    "BANKS",
    "UNKNOWN_BANK_NAME",
    "get_bank_name",
    "is_supported_bank",
    "validate_bank_code",
    "supported_banks",
]

# Fin del archivo taquilla/modules/payments/gateway/banks.py
