# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/client.py

Cliente de la pasarela de pago móvil P2C.

Protocolo (una transacción):
    1. pre_register()        -> número de control
    2. authorize_purchase()  -> aprobada ("00") o rechazada
    3. query_status()        -> estado de la transacción (opcional)

El cliente sólo guarda su perfil inmutable y su httpx.AsyncClient; puede
usarse concurrentemente desde transacciones independientes.

La compra no se reintenta a ciegas: si un envío queda sin respuesta, se
consulta el estado del mismo control. Estado A se toma como aprobada, R
permite reenviar; pendiente o ilegible deja la compra sin desenlace
(GatewayUnreachable con el control) para reconsultar más tarde.

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

import httpx

from taquilla.modules.payments.enums import P2CState
from taquilla.modules.payments.metrics.collectors.gateway_collectors import (
    gateway_reconciliations_total,
    gateway_request_seconds,
    gateway_requests_total,
)
from . import banks
from .codec import REQUEST_ROOT, RESPONSE_ROOT, decode, encode
from .dto import (
    SUCCESS_CODE,
    TX_APPROVED,
    TX_REJECTED,
    ConnectionReport,
    GatewayResult,
    PurchaseRequest,
)
from .errors import (
    GatewayError,
    GatewayUnreachable,
    MissingControl,
    PreRegistrationFailed,
)
from .profile import EnvironmentProfile
from .transport import RetryingTransport

logger = logging.getLogger(__name__)

PRE_REGISTER_PATH = "/action/v2-preregistro"
PURCHASE_PATH = "/action/v2-procesar-compra-p2c"
QUERY_STATUS_PATH = "/action/v2-querystatus"

ACCOUNT_NOT_REGISTERED_CODE = "AG"
QUERY_STATUS_VERSION = "3"
DEFAULT_TRANSACTION_KIND = "P2C"


class P2CGatewayClient:
    """Cliente asíncrono de la pasarela P2C para un ambiente."""

    def __init__(
        self,
        profile: EnvironmentProfile,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._profile = profile
        self._transport = RetryingTransport(profile, transport=transport)

    @classmethod
    def from_settings(cls, settings=None, **kwargs: Any) -> "P2CGatewayClient":
        """Cliente del ambiente activo según la configuración."""
        return cls(EnvironmentProfile.from_settings(settings), **kwargs)

    @property
    def profile(self) -> EnvironmentProfile:
        return self._profile

    # ------------------------------------------------------------------
    # Paso 1: pre-registro
    # ------------------------------------------------------------------

    async def pre_register(self) -> GatewayResult:
        """
        Solicita un número de control para una nueva transacción.

        Raises:
            PreRegistrationFailed: sin control en la respuesta o código != "00"
            GatewayUnreachable, MalformedResponse
        """
        operation = "pre_register"
        with self._tracked(operation):
            response = await self._exchange(
                PRE_REGISTER_PATH,
                {"cod_afiliacion": self._profile.affiliation_code},
            )
            result = GatewayResult.from_response(
                response,
                operation=operation,
                environment=self._profile.environment,
                state=P2CState.PRE_REGISTERED,
            )
            if not result.control:
                raise PreRegistrationFailed(
                    "Respuesta inválida del gateway: no se recibió número de control",
                    codigo=result.result_code,
                    descripcion=result.description,
                    raw=result.raw,
                )
            if not result.success:
                raise PreRegistrationFailed(
                    f"Pre-registro fallido: {result.description or 'Error desconocido'}",
                    codigo=result.result_code,
                    descripcion=result.description,
                    raw=result.raw,
                )

        self._count(operation, "approved")
        logger.info(
            "Pre-registro exitoso en %s: control=%s",
            self._profile.label, result.control,
        )
        return result

    # ------------------------------------------------------------------
    # Paso 2: compra
    # ------------------------------------------------------------------

    async def authorize_purchase(
        self,
        request: PurchaseRequest,
        *,
        reconcile: bool = True,
    ) -> GatewayResult:
        """
        Procesa la compra P2C del control de request.

        Un rechazo de la pasarela es un desenlace válido: se devuelve con
        success=False y decline_reason. Con reconcile=False los envíos sin
        respuesta se reintentan a ciegas.

        Raises:
            MissingControl: si request no trae control
            GatewayUnreachable: si no hubo respuesta y la consulta de estado
                no confirmó aprobación ni rechazo
            MalformedResponse
        """
        if not request.control:
            raise MissingControl(
                "Se requiere el número de control del pre-registro",
                environment=self._profile.label,
            )

        operation = "authorize_purchase"
        fields = self._purchase_fields(request)
        logger.info(
            "Procesando compra P2C en %s: control=%s factura=%s monto=%s banco=%s (%s)",
            self._profile.label, request.control, request.invoice, request.amount,
            request.buyer_bank_code, banks.get_bank_name(request.buyer_bank_code),
        )

        with self._tracked(operation):
            if reconcile:
                response, reconciled = await self._send_purchase_reconciled(
                    fields, request.control,
                )
                if reconciled is not None:
                    self._count(operation, "approved")
                    return reconciled
            else:
                response = await self._exchange(PURCHASE_PATH, fields)
            result = self._purchase_result(response, request)

        self._count(operation, "approved" if result.success else "declined")
        if result.success:
            logger.info("Compra aprobada: control=%s", result.control)
        else:
            logger.warning(
                "Compra rechazada: control=%s codigo=%s %s",
                result.control, result.result_code, result.decline_reason,
            )
        return result

    def _purchase_fields(self, request: PurchaseRequest) -> Dict[str, Optional[str]]:
        # El orden de los campos es parte del contrato
        return {
            "cod_afiliacion": self._profile.affiliation_code,
            "control": request.control,
            "telefonoCliente": request.buyer_phone,
            "codigobancoCliente": request.buyer_bank_code,
            "telefonoComercio": self._profile.commerce_phone,
            "codigobancoComercio": self._profile.commerce_bank_code,
            "amount": request.amount,
            "factura": request.invoice,
            "referencia": request.reference,
            "cid": request.buyer_cid,
        }

    def _purchase_result(self, response: Dict[str, Any], request: PurchaseRequest) -> GatewayResult:
        result = GatewayResult.from_response(
            response,
            operation="authorize_purchase",
            environment=self._profile.environment,
            state=P2CState.AUTHORIZED,
            fallback={
                "control": request.control,
                "factura": request.invoice,
                "referencia": request.reference,
            },
        )
        if result.success:
            return result
        # El voucher se conserva también en los rechazos
        return result.model_copy(
            update={
                "state": P2CState.DECLINED,
                "decline_reason": self._decline_reason(
                    result.result_code, result.description, request,
                ),
            }
        )

    def _decline_reason(
        self,
        code: Optional[str],
        description: Optional[str],
        request: PurchaseRequest,
    ) -> str:
        if code == ACCOUNT_NOT_REGISTERED_CODE:
            reason = (
                f"La combinación teléfono ({request.buyer_phone}) + banco "
                f"({banks.get_bank_name(request.buyer_bank_code)}) + cédula "
                f"({request.buyer_cid}) no está registrada en el sistema bancario "
                f"(ambiente {self._profile.label})."
            )
            if not self._profile.is_production:
                reason += " Verifica que uses datos de prueba válidos."
            return reason
        if description:
            return description
        return f"Operación rechazada por el gateway (codigo={code})"

    async def _send_purchase_reconciled(
        self,
        fields: Dict[str, Optional[str]],
        control: str,
    ) -> Tuple[Dict[str, Any], Optional[GatewayResult]]:
        """
        Envía la compra un intento a la vez.

        Returns:
            (respuesta, None) si la pasarela respondió;
            ({}, resultado) si la compra quedó aprobada por conciliación
        """
        attempts = self._profile.max_attempts
        delay = self._profile.backoff_base_seconds

        for attempt in range(1, attempts + 1):
            try:
                response = await self._exchange(
                    PURCHASE_PATH, fields, max_attempts=1,
                )
                return response, None
            except GatewayUnreachable as e:
                logger.warning(
                    "Compra sin respuesta (intento %s/%s, control=%s); consultando estado...",
                    attempt, attempts, control,
                )
                e.attempts = attempt
                status = await self._reconcile(control, e)
                if status is not None:
                    return {}, status
                if attempt == attempts:
                    e.attempts = attempts
                    raise
                await asyncio.sleep(delay)
                delay *= 2

        # range(1, attempts + 1) siempre retorna o relanza
        raise RuntimeError("Intentos de compra agotados sin excepción clara")

    async def _reconcile(
        self,
        control: str,
        cause: GatewayUnreachable,
    ) -> Optional[GatewayResult]:
        """
        Estado del control tras una compra sin respuesta.

        Returns:
            El resultado conciliado si la compra quedó aprobada (estado A);
            None si la pasarela confirma que no hubo cobro (estado R) y la
            compra puede reenviarse.

        Raises:
            GatewayUnreachable: la compra original (con el control en raw)
                si el estado no pudo determinarse o sigue pendiente
        """
        try:
            status = await self.query_status(control)
        except GatewayError as e:
            label = "unreachable" if isinstance(e, GatewayUnreachable) else "unknown"
            gateway_reconciliations_total.labels(result=label).inc()
            logger.error(
                "No se pudo conciliar la compra (control=%s): %s; reconsultar más tarde",
                control, e,
            )
            cause.raw.setdefault("control", control)
            raise cause from e

        tx_status = status.transaction_status
        if tx_status == TX_APPROVED:
            gateway_reconciliations_total.labels(result="approved").inc()
            logger.info("Compra conciliada como aprobada: control=%s", control)
            return status.model_copy(
                update={
                    "operation": "authorize_purchase",
                    "state": P2CState.AUTHORIZED,
                    "result_code": status.result_code or SUCCESS_CODE,
                    "reconciled": True,
                }
            )

        if tx_status == TX_REJECTED:
            gateway_reconciliations_total.labels(result="resend").inc()
            logger.warning(
                "Compra sin cobro según la pasarela (control=%s estado=%s codigo=%s); se reenvía",
                control, status.status, status.result_code,
            )
            return None

        # Pendiente o estado desconocido: no se reenvía
        gateway_reconciliations_total.labels(result="pending").inc()
        logger.warning(
            "Compra pendiente en la pasarela (control=%s estado=%s); reconsultar más tarde",
            control, tx_status,
        )
        cause.raw.setdefault("control", control)
        cause.raw["estado"] = tx_status
        raise cause

    # ------------------------------------------------------------------
    # Paso 3: consulta de estado
    # ------------------------------------------------------------------

    async def query_status(
        self,
        control: Optional[str],
        kind: str = DEFAULT_TRANSACTION_KIND,
    ) -> GatewayResult:
        """
        Consulta el estado de la transacción de un control.

        Raises:
            MissingControl: si control está vacío
            GatewayUnreachable, MalformedResponse
        """
        if not control:
            raise MissingControl(
                "Se requiere el número de control para consultar el estado",
                environment=self._profile.label,
            )

        operation = "query_status"
        with self._tracked(operation):
            response = await self._exchange(
                QUERY_STATUS_PATH,
                {
                    "cod_afiliacion": self._profile.affiliation_code,
                    "control": control,
                    "version": QUERY_STATUS_VERSION,
                    "tipotrx": kind,
                },
            )
            result = GatewayResult.from_response(
                response,
                operation=operation,
                environment=self._profile.environment,
                state=P2CState.QUERIED,
                fallback={"control": control},
            )

        self._count(operation, "approved" if result.success else "declined")
        logger.info(
            "Estado consultado en %s: control=%s codigo=%s estado=%s",
            self._profile.label, control, result.result_code, result.status,
        )
        return result

    # ------------------------------------------------------------------
    # Diagnóstico
    # ------------------------------------------------------------------

    async def test_connection(self) -> ConnectionReport:
        """Prueba la conexión con un pre-registro; los errores se reportan."""
        logger.info(
            "Probando conexión al gateway %s (%s)",
            self._profile.label, self._profile.base_url,
        )
        try:
            result = await self.pre_register()
        except GatewayError as e:
            logger.error("Error en test de conexión: %s", e)
            return ConnectionReport(
                success=False,
                environment=self._profile.environment,
                message=e.message,
                base_url=self._profile.base_url,
                affiliation=self._profile.affiliation_code,
                error=e.to_dict(),
            )

        return ConnectionReport(
            success=True,
            environment=self._profile.environment,
            message="Conexión al gateway exitosa",
            base_url=self._profile.base_url,
            affiliation=self._profile.affiliation_code,
            control=result.control,
        )

    def describe_configuration(self) -> Dict[str, Any]:
        return self._profile.describe()

    @staticmethod
    def supported_banks() -> List[Dict[str, str]]:
        return banks.supported_banks()

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    async def _exchange(
        self,
        path: str,
        fields: Dict[str, Optional[str]],
        *,
        max_attempts: Optional[int] = None,
    ) -> Dict[str, Any]:
        body = encode(fields, root=REQUEST_ROOT)
        payload = await self._transport.send(path, body, max_attempts=max_attempts)
        return decode(payload, expected_root=RESPONSE_ROOT)

    @contextmanager
    def _tracked(self, operation: str) -> Iterator[None]:
        """Mide la operación y enriquece/cuenta los errores de la pasarela."""
        start = time.perf_counter()
        try:
            yield
        except GatewayError as e:
            e.enrich(environment=self._profile.label)
            self._count(operation, type(e).__name__)
            logger.error("Gateway %s falló en %s: %s", operation, self._profile.label, e)
            raise
        finally:
            gateway_request_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )

    @staticmethod
    def _count(operation: str, outcome: str) -> None:
        gateway_requests_total.labels(operation=operation, outcome=outcome).inc()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "P2CGatewayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = [
    "PRE_REGISTER_PATH",
    "PURCHASE_PATH",
    "QUERY_STATUS_PATH",
    "ACCOUNT_NOT_REGISTERED_CODE",
    "P2CGatewayClient",
]

# Fin del archivo taquilla/modules/payments/gateway/client.py
