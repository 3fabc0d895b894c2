# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/dto.py

DTOs de la pasarela P2C.

- PurchaseRequest: datos de una compra, normalizados al construirse
- GatewayResult: desenlace interpretado de cualquiera de los tres pasos
- ConnectionReport: resultado de una prueba de conexión

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from taquilla.modules.payments.enums import GatewayEnvironment, P2CState
from .codec import Voucher, decode_voucher
from .errors import Declined, MissingControl
from .formatters import (
    format_cid,
    format_phone,
    format_purchase_amount,
    generate_invoice_number,
    generate_reference,
    validate_bank_code,
)

SUCCESS_CODE = "00"

# Valores de <estado> en la consulta de estado
TX_APPROVED = "A"
TX_REJECTED = "R"
TX_PENDING = "P"


class PurchaseRequest(BaseModel):
    """
    Datos de una compra P2C.

    Cada campo se normaliza al construir el modelo; las excepciones de
    validación de la pasarela (InvalidPhone, InvalidAmount, ...) se
    propagan tal cual.
    """

    model_config = ConfigDict(frozen=True)

    control: str = Field(description="Número de control obtenido en el pre-registro.")
    buyer_phone: str = Field(description="Teléfono móvil del pagador (04XXXXXXXXX).")
    buyer_bank_code: str = Field(description="Código del banco del pagador.")
    amount: str = Field(description="Monto con exactamente 2 decimales.")
    buyer_cid: str = Field(description="Cédula / RIF del titular de la cuenta.")
    invoice: str = Field(default_factory=generate_invoice_number)
    reference: str = Field(default_factory=generate_reference)

    @field_validator("control", mode="before")
    @classmethod
    def _require_control(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            raise MissingControl("Se requiere el número de control del pre-registro")
        # El control se reusa sin modificar
        return str(value)

    @field_validator("buyer_phone", mode="before")
    @classmethod
    def _normalize_phone(cls, value: Any) -> str:
        return format_phone(value)

    @field_validator("buyer_bank_code", mode="before")
    @classmethod
    def _normalize_bank(cls, value: Any) -> str:
        return validate_bank_code(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _normalize_amount(cls, value: Any) -> str:
        return format_purchase_amount(value)

    @field_validator("buyer_cid", mode="before")
    @classmethod
    def _normalize_cid(cls, value: Any) -> str:
        return format_cid(value)

    @field_validator("invoice", mode="before")
    @classmethod
    def _invoice_or_generated(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            return generate_invoice_number()
        return str(value).strip()

    @field_validator("reference", mode="before")
    @classmethod
    def _reference_or_generated(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            return generate_reference()
        return str(value).strip()


class GatewayResult(BaseModel):
    """Desenlace de una operación contra la pasarela."""

    model_config = ConfigDict(frozen=True)

    operation: str
    environment: GatewayEnvironment
    state: P2CState
    result_code: Optional[str] = None
    description: Optional[str] = None
    control: Optional[str] = None
    invoice: Optional[str] = None
    sequence_number: Optional[str] = None
    authorization_id: Optional[str] = None
    authorization_name: Optional[str] = None
    reference: Optional[str] = None
    terminal: Optional[str] = None
    batch: Optional[str] = None
    bank_tax_id: Optional[str] = None
    affiliation: Optional[str] = None
    amount: Optional[str] = None
    status: Optional[str] = None
    voucher: Voucher = Field(default_factory=Voucher)
    decline_reason: Optional[str] = None
    reconciled: bool = False
    raw: Dict[str, Any] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return self.result_code == SUCCESS_CODE

    @property
    def voucher_text(self) -> str:
        return self.voucher.text

    @property
    def transaction_status(self) -> str:
        """
        Estado de la transacción consultada: A (aprobada), R (rechazada) o
        P (pendiente). Sin <estado>, se deriva del código de resultado.
        """
        if self.status:
            return self.status.upper()
        return TX_APPROVED if self.success else TX_REJECTED

    @classmethod
    def from_response(
        cls,
        response: Mapping[str, Any],
        *,
        operation: str,
        environment: GatewayEnvironment,
        state: P2CState,
        fallback: Optional[Mapping[str, Optional[str]]] = None,
        **extra: Any,
    ) -> "GatewayResult":
        """
        Construye el resultado desde la respuesta decodificada.

        fallback aporta valores propios (control, factura, referencia) para
        los campos que la pasarela no devuelve.
        """
        fallback = fallback or {}

        def pick(key: str) -> Optional[str]:
            return _scalar(response.get(key)) or fallback.get(key)

        values: Dict[str, Any] = {
            "operation": operation,
            "environment": environment,
            "state": state,
            "result_code": pick("codigo"),
            "description": pick("descripcion"),
            "control": pick("control"),
            "invoice": pick("factura"),
            "sequence_number": pick("seqnum"),
            "authorization_id": pick("authid"),
            "authorization_name": pick("authname"),
            "reference": pick("referencia"),
            "terminal": pick("terminal"),
            "batch": pick("lote"),
            "bank_tax_id": pick("rifbanco"),
            "affiliation": pick("afiliacion"),
            "amount": pick("monto"),
            "status": pick("estado"),
            "voucher": decode_voucher(response.get("voucher")),
            "raw": dict(response),
        }
        values.update(extra)
        return cls(**values)

    def raise_for_outcome(self) -> "GatewayResult":
        """Lanza Declined si la operación no fue aprobada; si no, devuelve self."""
        if not self.success:
            raise Declined(
                self.decline_reason or self.description or "Operación rechazada por el gateway",
                codigo=self.result_code,
                descripcion=self.description,
                environment=self.environment.label,
                raw=self.raw,
                voucher_lines=self.voucher.lines,
            )
        return self


class ConnectionReport(BaseModel):
    """Resultado de test_connection(); los errores se reportan, no se lanzan."""

    success: bool
    environment: GatewayEnvironment
    message: str
    base_url: str
    affiliation: str
    control: Optional[str] = None
    error: Optional[Dict[str, Any]] = None


def _scalar(value: Any) -> Optional[str]:
    """Valor de texto de un campo hoja; None si viene vacío o anidado."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


__all__ = [
    "SUCCESS_CODE",
    "TX_APPROVED",
    "TX_PENDING",
    "TX_REJECTED",
    "PurchaseRequest",
    "GatewayResult",
    "ConnectionReport",
]

# Fin del archivo taquilla/modules/payments/gateway/dto.py
