# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/codec.py

Codec del formato de cable de la pasarela P2C.

Formato:
    <request><cod_afiliacion>20250325</cod_afiliacion><control>...</control></request>

- Una sola raíz (request / response), hijos planos, sin atributos.
- El orden de los campos es el del mapping de entrada.
- Los nombres de campo (y su capitalización) son parte del contrato.

Además normaliza el voucher (recibo imprimible), que la pasarela envía en
tres formas distintas según el tamaño de la respuesta:

    LINE_SEQUENCE     <voucher><linea>A</linea><linea>B</linea></voucher>
    SINGLE_LINE       <voucher><linea>A</linea></voucher>
    DELIMITED_STRING  <voucher>A\nB</voucher>

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from enum import StrEnum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .errors import MalformedResponse

REQUEST_ROOT = "request"
RESPONSE_ROOT = "response"

# Marcadores con los que la pasarela señala errores dentro del voucher
VOUCHER_ERROR_MARKERS: Tuple[str, ...] = (
    "ERROR_DE_TRANSACCION",
    "COMMUNICATION_ERROR",
    "TIMEOUT_ERROR",
    "INVALID_REQUEST",
    "SERVICE_UNAVAILABLE",
)
VOUCHER_DUPLICATE_MARKER = "DUPLICADO"

# Claves en las que viaja el texto de una línea representada como objeto
_LINE_TEXT_KEYS = ("_", "UT")


# ---------------------------------------------------------------------------
# Mapping <-> XML
# ---------------------------------------------------------------------------


def encode(fields: Mapping[str, Any], root: str = REQUEST_ROOT) -> bytes:
    """
    Serializa un mapping plano a XML de la pasarela.

    Los valores None se omiten; el resto se serializa con str().
    No incluye declaración XML.
    """
    envelope = ET.Element(root)
    for name, value in fields.items():
        if value is None:
            continue
        child = ET.SubElement(envelope, name)
        child.text = str(value)
    return ET.tostring(envelope, encoding="utf-8")


def decode(payload: bytes | str, expected_root: Optional[str] = None) -> Dict[str, Any]:
    """
    Parsea XML de la pasarela a un dict.

    - Elementos hoja -> str ("" si están vacíos)
    - Elementos con hijos -> dict anidado
    - Etiquetas hermanas repetidas -> list

    Raises:
        MalformedResponse: si el XML no está bien formado, o si la raíz no es
            expected_root (cuando se indica)
    """
    if payload is None or (isinstance(payload, (bytes, str)) and not payload.strip()):
        raise MalformedResponse("Respuesta vacía del gateway", payload=payload)

    try:
        root = ET.fromstring(payload)
    except ET.ParseError as e:
        raise MalformedResponse(
            f"Respuesta XML inválida del gateway: {e}",
            payload=payload,
        ) from e

    if expected_root is not None and root.tag != expected_root:
        raise MalformedResponse(
            f"Raíz XML inesperada: <{root.tag}> (se esperaba <{expected_root}>)",
            payload=payload,
        )

    decoded = _element_value(root)
    # Una raíz sin hijos (<response/>) se representa como mapping vacío
    return decoded if isinstance(decoded, dict) else {}


def _element_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return element.text or ""

    result: Dict[str, Any] = {}
    for child in children:
        value = _element_value(child)
        if child.tag in result:
            existing = result[child.tag]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[child.tag] = [existing, value]
        else:
            result[child.tag] = value
    return result


# ---------------------------------------------------------------------------
# Voucher
# ---------------------------------------------------------------------------


class VoucherShape(StrEnum):
    """Forma en la que el voucher viajó en la respuesta."""

    EMPTY = "empty"
    LINE_SEQUENCE = "line_sequence"
    SINGLE_LINE = "single_line"
    DELIMITED_STRING = "delimited_string"


class Voucher(BaseModel):
    """Recibo imprimible normalizado a una secuencia ordenada de líneas."""

    model_config = ConfigDict(frozen=True)

    lines: Tuple[str, ...] = ()
    shape: VoucherShape = VoucherShape.EMPTY

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def is_duplicate(self) -> bool:
        """La pasarela marca con DUPLICADO las reimpresiones de un voucher."""
        return any(VOUCHER_DUPLICATE_MARKER in line for line in self.lines)

    @property
    def error_marker(self) -> Optional[str]:
        """Primer marcador de error presente en el voucher, si hay alguno."""
        text = self.text
        for marker in VOUCHER_ERROR_MARKERS:
            # Las líneas ya vienen con "_" -> " "
            if marker.replace("_", " ") in text:
                return marker
        return None


def decode_voucher(raw: Any) -> Voucher:
    """
    Normaliza cualquiera de las formas de voucher a un Voucher.

    Una línea puede venir como str, {"_": str} o {"UT": str}.
    Cada línea: "_" -> " ", recortada; las líneas en blanco se descartan.
    """
    if raw is None or raw == "" or raw == {}:
        return Voucher()

    if isinstance(raw, str):
        return _build_voucher(raw.split("\n"), VoucherShape.DELIMITED_STRING)

    if isinstance(raw, list):
        return _build_voucher([_line_text(item) for item in raw], VoucherShape.LINE_SEQUENCE)

    if isinstance(raw, Mapping):
        if "linea" in raw:
            lineas = raw["linea"]
            if isinstance(lineas, list):
                return _build_voucher(
                    [_line_text(item) for item in lineas],
                    VoucherShape.LINE_SEQUENCE,
                )
            return _build_voucher([_line_text(lineas)], VoucherShape.SINGLE_LINE)
        return _build_voucher([_line_text(raw)], VoucherShape.SINGLE_LINE)

    return _build_voucher([str(raw)], VoucherShape.SINGLE_LINE)


def _line_text(item: Any) -> str:
    if item is None:
        return ""
    if isinstance(item, Mapping):
        for key in _LINE_TEXT_KEYS:
            if key in item:
                return str(item[key])
        return json.dumps(item, ensure_ascii=False)
    return str(item)


def _build_voucher(raw_lines: list[str], shape: VoucherShape) -> Voucher:
    lines = tuple(
        normalized
        for normalized in (line.replace("_", " ").strip() for line in raw_lines)
        if normalized
    )
    if not lines:
        return Voucher()
    return Voucher(lines=lines, shape=shape)


__all__ = [
    "REQUEST_ROOT",
    "RESPONSE_ROOT",
    "VOUCHER_ERROR_MARKERS",
    "VOUCHER_DUPLICATE_MARKER",
    "encode",
    "decode",
    "VoucherShape",
    "Voucher",
    "decode_voucher",
]

# Fin del archivo taquilla/modules/payments/gateway/codec.py
