# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/formatters.py

Normalización y validación de los datos del comprador al formato exacto
que exige la pasarela P2C:

- Cédula / RIF (CID): prefijo de tipo + 7 a 9 dígitos (V12345678)
- Teléfono móvil: 11 dígitos con prefijo 0412/0414/0416/0424/0426
- Monto: decimal positivo con exactamente 2 decimales ("11.99")
- Referencia y número de factura generados

Todas las funciones son idempotentes sobre valores ya normalizados.

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import random
import re
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from .banks import get_bank_name, validate_bank_code
from .errors import InvalidAmount, InvalidIdentifier, InvalidPhone

logger = logging.getLogger(__name__)

DEFAULT_CID_PREFIX = "V"
CID_PREFIXES = ("V", "E", "J", "G")
MOBILE_PREFIXES = ("0412", "0414", "0416", "0424", "0426")

_PREFIXED_CID_RE = re.compile(r"[VEJG][0-9]{7,9}", re.IGNORECASE)
_BARE_CID_RE = re.compile(r"[0-9]{7,9}")
_PHONE_RE = re.compile(r"(?:%s)[0-9]{7}" % "|".join(MOBILE_PREFIXES))
_NON_DIGITS_RE = re.compile(r"[^0-9]")

_CENTS = Decimal("0.01")


def format_cid(cid: Any) -> str:
    """
    Normaliza una cédula / RIF al formato de la pasarela.

    - "v12345678" -> "V12345678" (ya tiene prefijo válido)
    - "12345678"  -> "V12345678" (se aplica el prefijo por defecto)
    - "V-12.345.678" -> "V12345678" (se extraen dígitos; ver nota)

    Nota: la recuperación por extracción de dígitos siempre asume el prefijo
    por defecto, aunque el valor original trajera otro (E, J, G). Se deja
    registrado en WARNING para revisión humana.

    Raises:
        InvalidIdentifier: si no se pueden recuperar entre 7 y 9 dígitos
    """
    if cid is None or str(cid).strip() == "":
        raise InvalidIdentifier("CID no puede estar vacío", raw_value=cid)

    cid_str = str(cid).strip()

    if _PREFIXED_CID_RE.fullmatch(cid_str):
        return cid_str.upper()

    if _BARE_CID_RE.fullmatch(cid_str):
        return f"{DEFAULT_CID_PREFIX}{cid_str}"

    digits = _NON_DIGITS_RE.sub("", cid_str)
    if 7 <= len(digits) <= 9:
        formatted = f"{DEFAULT_CID_PREFIX}{digits}"
        logger.warning(
            "CID recuperado por extracción de dígitos: %r -> %s "
            "(se asumió prefijo %s, revisar tipo de documento)",
            cid_str, formatted, DEFAULT_CID_PREFIX,
        )
        return formatted

    raise InvalidIdentifier(
        f"Formato de cédula inválido: {cid_str}. Debe ser V12345678",
        raw_value=cid,
    )


def format_phone(phone: Any) -> str:
    """
    Normaliza un teléfono móvil a 11 dígitos (04XXXXXXXXX).

    Elimina todo lo que no sea dígito y antepone un 0 si falta.

    Raises:
        InvalidPhone: si el resultado no tiene un prefijo móvil válido + 7 dígitos
    """
    if phone is None or str(phone).strip() == "":
        raise InvalidPhone("Número de teléfono es requerido", raw_value=phone)

    cleaned = _NON_DIGITS_RE.sub("", str(phone))
    formatted = cleaned if cleaned.startswith("0") else f"0{cleaned}"

    if not _PHONE_RE.fullmatch(formatted):
        raise InvalidPhone(
            f"Formato de teléfono inválido: {phone}. "
            "Debe ser 04XXXXXXXXX (ej: 04121234567)",
            raw_value=phone,
        )
    return formatted


def format_amount(amount: Any) -> str:
    """
    Formatea un monto con exactamente 2 decimales (redondeo half-up).

    La pasarela rechaza cualquier otra precisión.

    Raises:
        InvalidAmount: si el monto no es numérico, no es finito o es <= 0
    """
    if amount is None or isinstance(amount, bool):
        raise InvalidAmount(f"Monto inválido: {amount}", raw_value=amount)

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidAmount(f"Monto inválido: {amount}", raw_value=amount) from None

    if not value.is_finite():
        raise InvalidAmount(f"Monto inválido: {amount}", raw_value=amount)

    if value <= 0:
        raise InvalidAmount(
            f"El monto debe ser mayor a 0. Recibido: {amount}",
            raw_value=amount,
        )

    try:
        quantized = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Monto fuera de rango: {amount}", raw_value=amount) from None

    return format(quantized, "f")


def format_purchase_amount(amount: Any) -> str:
    """
    format_amount() para un cobro: además rechaza montos que redondean a 0.00.

    Raises:
        InvalidAmount
    """
    formatted = format_amount(amount)
    if Decimal(formatted) == 0:
        raise InvalidAmount(
            f"El monto a cobrar redondea a {formatted}. Recibido: {amount}",
            raw_value=amount,
        )
    return formatted


def generate_reference() -> str:
    """
    Referencia única: últimos 8 dígitos del timestamp en milisegundos.

    Dos llamadas en el mismo milisegundo colisionan; el llamador puede
    proveer su propia referencia.
    """
    return str(time.time_ns() // 1_000_000)[-8:]


def generate_invoice_number() -> str:
    """Número de factura: YYYYMMDDHHMMSS + 3 dígitos aleatorios."""
    now = datetime.now()
    return f"{now:%Y%m%d%H%M%S}{random.randint(0, 999):03d}"


__all__ = [
    "DEFAULT_CID_PREFIX",
    "CID_PREFIXES",
    "MOBILE_PREFIXES",
    "format_cid",
    "format_phone",
    "format_amount",
    "format_purchase_amount",
    "validate_bank_code",
    "get_bank_name",
    "generate_reference",
    "generate_invoice_number",
]

# Fin del archivo taquilla/modules/payments/gateway/formatters.py
