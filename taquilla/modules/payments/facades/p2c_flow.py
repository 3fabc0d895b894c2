# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/facades/p2c_flow.py

Fachada de alto nivel para cobrar con pago móvil P2C.

Orquesta:
- Validación de los datos del pagador (PaymentInitiation)
- Pre-registro (número de control)
- Autorización de la compra con el mismo control
- Construcción de PaymentOutcome para la capa de persistencia

La persistencia del resultado (boleto, transacción) y el recibo por correo
los hace el llamador a partir de PaymentOutcome.to_record().

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taquilla.modules.payments.enums import P2CState
from taquilla.modules.payments.gateway import (
    TX_APPROVED,
    TX_REJECTED,
    GatewayError,
    GatewayResult,
    GatewayUnreachable,
    InvalidStateTransition,
    MalformedResponse,
    MissingControl,
    P2CGatewayClient,
    PurchaseRequest,
    format_cid,
    format_phone,
    format_purchase_amount,
    generate_invoice_number,
    validate_bank_code,
)

logger = logging.getLogger(__name__)


class PaymentInitiation(BaseModel):
    """
    Solicitud de cobro recibida del resto del sistema.

    Los datos del pagador se validan aquí, antes de pre-registrar, para no
    consumir un número de control con datos que la pasarela rechazaría.
    """

    model_config = ConfigDict(frozen=True)

    amount: Union[Decimal, str, int, float]
    buyer_phone: str
    buyer_bank_code: str
    buyer_cid: str
    invoice: str = Field(default_factory=generate_invoice_number)
    reference: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _normalize_amount(cls, value: Any) -> str:
        return format_purchase_amount(value)

    @field_validator("buyer_phone", mode="before")
    @classmethod
    def _normalize_phone(cls, value: Any) -> str:
        return format_phone(value)

    @field_validator("buyer_bank_code", mode="before")
    @classmethod
    def _normalize_bank(cls, value: Any) -> str:
        return validate_bank_code(value)

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


class PaymentOutcome(BaseModel):
    """Desenlace de un cobro P2C, indexado por factura y número de control."""

    model_config = ConfigDict(frozen=True)

    invoice: str
    control: str
    authorized: bool
    result: GatewayResult

    @property
    def reconciled(self) -> bool:
        return self.result.reconciled

    def to_record(self) -> Dict[str, Any]:
        """Mapping plano que guarda la capa de persistencia."""
        result = self.result
        return {
            "invoice": self.invoice,
            "control": self.control,
            "authorized": self.authorized,
            "reconciled": self.reconciled,
            "environment": result.environment.value,
            "state": result.state.value,
            "result_code": result.result_code,
            "description": result.description,
            "decline_reason": result.decline_reason,
            "amount": result.amount,
            "reference": result.reference,
            "sequence_number": result.sequence_number,
            "authorization_id": result.authorization_id,
            "authorization_name": result.authorization_name,
            "terminal": result.terminal,
            "batch": result.batch,
            "bank_tax_id": result.bank_tax_id,
            "affiliation": result.affiliation,
            "status": result.status,
            "voucher": list(result.voucher.lines),
            "voucher_text": result.voucher_text,
        }


class P2CTransaction:
    """
    Un intento de transacción P2C ligado a un cliente.

    Hace cumplir el orden de los pasos y conserva el número de control sin
    modificar entre ellos. Si la compra queda sin respuesta, el intento pasa
    a UNRESOLVED y no admite otra autorización hasta que query_status()
    confirme que no hubo cobro.
    """

    def __init__(self, client: P2CGatewayClient):
        self._client = client
        self.state: P2CState = P2CState.IDLE
        self.control: Optional[str] = None
        self.purchase_request: Optional[PurchaseRequest] = None

    @contextmanager
    def _labelled(self) -> Iterator[None]:
        try:
            yield
        except GatewayError as e:
            e.enrich(environment=self._client.profile.label)
            raise

    async def pre_register(self) -> GatewayResult:
        with self._labelled():
            if self.state is not P2CState.IDLE:
                raise InvalidStateTransition(self.state.value, P2CState.PRE_REGISTERED.value)
            result = await self._client.pre_register()
        self.control = result.control
        self.state = P2CState.PRE_REGISTERED
        return result

    async def authorize(
        self,
        *,
        buyer_phone: Any,
        buyer_bank_code: Any,
        amount: Any,
        buyer_cid: Any,
        invoice: Optional[str] = None,
        reference: Optional[str] = None,
        reconcile: bool = True,
    ) -> GatewayResult:
        with self._labelled():
            if self.control is None:
                raise MissingControl("Se requiere pre-registrar la transacción antes de autorizar")
            if self.state is P2CState.UNRESOLVED:
                raise InvalidStateTransition(
                    self.state.value,
                    P2CState.AUTHORIZED.value,
                    f"La compra del control {self.control} quedó sin respuesta; "
                    "consulte el estado antes de reenviarla",
                )
            if self.state is not P2CState.PRE_REGISTERED:
                raise InvalidStateTransition(self.state.value, P2CState.AUTHORIZED.value)

            request = PurchaseRequest(
                control=self.control,
                buyer_phone=buyer_phone,
                buyer_bank_code=buyer_bank_code,
                amount=amount,
                buyer_cid=buyer_cid,
                invoice=invoice,
                reference=reference,
            )
            self.purchase_request = request
            try:
                result = await self._client.authorize_purchase(request, reconcile=reconcile)
            except (GatewayUnreachable, MalformedResponse):
                self.state = P2CState.UNRESOLVED
                raise

        self.state = result.state
        return result

    async def query_status(self, kind: str = "P2C") -> GatewayResult:
        with self._labelled():
            if self.control is None:
                raise MissingControl("Se requiere pre-registrar la transacción antes de consultar")
            result = await self._client.query_status(self.control, kind)

        if self.state is P2CState.UNRESOLVED:
            self._resolve(result)
        elif self.state.is_terminal:
            self.state = P2CState.QUERIED
        return result

    def _resolve(self, status: GatewayResult) -> None:
        tx_status = status.transaction_status
        if tx_status == TX_APPROVED:
            self.state = P2CState.AUTHORIZED
        elif tx_status == TX_REJECTED:
            self.state = P2CState.PRE_REGISTERED
        logger.info(
            "Estado de compra sin respuesta: control=%s estado=%s -> %s",
            self.control, tx_status, self.state.value,
        )


async def process_p2c_payment(
    client: P2CGatewayClient,
    initiation: PaymentInitiation,
    *,
    reconcile: bool = True,
) -> PaymentOutcome:
    """
    Cobra initiation con pre-registro + autorización.

    Un rechazo de la pasarela se devuelve como PaymentOutcome con
    authorized=False. Si la compra queda sin respuesta, GatewayUnreachable se
    propaga con el control en raw["control"] para reconsultar más tarde.
    """
    transaction = P2CTransaction(client)
    await transaction.pre_register()

    try:
        result = await transaction.authorize(
            buyer_phone=initiation.buyer_phone,
            buyer_bank_code=initiation.buyer_bank_code,
            amount=initiation.amount,
            buyer_cid=initiation.buyer_cid,
            invoice=initiation.invoice,
            reference=initiation.reference,
            reconcile=reconcile,
        )
    except GatewayUnreachable as e:
        e.raw.setdefault("control", transaction.control)
        e.raw.setdefault("factura", initiation.invoice)
        logger.error(
            "Cobro P2C sin desenlace: factura=%s control=%s",
            initiation.invoice, transaction.control,
        )
        raise

    outcome = PaymentOutcome(
        invoice=initiation.invoice,
        control=transaction.control,
        authorized=result.success,
        result=result,
    )
    logger.info(
        "Cobro P2C terminado: factura=%s control=%s autorizado=%s conciliado=%s",
        outcome.invoice, outcome.control, outcome.authorized, outcome.reconciled,
    )
    return outcome


__all__ = [
    "PaymentInitiation",
    "PaymentOutcome",
    "P2CTransaction",
    "process_p2c_payment",
]

# Fin del archivo taquilla/modules/payments/facades/p2c_flow.py
