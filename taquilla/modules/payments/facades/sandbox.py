# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/facades/sandbox.py

Prueba de punta a punta contra el ambiente de pruebas de la pasarela:
pre-registro -> compra con datos de prueba conocidos -> consulta de estado.

No disponible en producción.

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from taquilla.modules.payments.gateway import (
    GatewayConfigurationError,
    GatewayResult,
    P2CGatewayClient,
    generate_reference,
)
from .p2c_flow import P2CTransaction

logger = logging.getLogger(__name__)

# Datos de prueba aceptados por el ambiente de pruebas (Banco Plaza)
SANDBOX_BUYER_PHONE = "04121234567"
SANDBOX_BUYER_BANK_CODE = "0138"
SANDBOX_AMOUNT = "11.99"
SANDBOX_BUYER_CID = "V12345678"


class SandboxReport(BaseModel):
    success: bool
    pre_registration: GatewayResult
    payment: GatewayResult
    status: GatewayResult


async def run_sandbox_payment(client: P2CGatewayClient) -> SandboxReport:
    """
    Ejecuta una transacción completa con datos de prueba.

    success indica que los tres pasos respondieron; el desenlace de la
    compra está en payment.

    Raises:
        GatewayConfigurationError: si el cliente apunta a producción
    """
    if client.profile.is_production:
        raise GatewayConfigurationError(
            "Test no disponible en producción",
            environment=client.profile.label,
        )

    logger.info("Iniciando test de pago P2C en %s (%s)", client.profile.label, client.profile.base_url)
    transaction = P2CTransaction(client)

    pre_registration = await transaction.pre_register()
    logger.info("1. Pre-registro exitoso: control=%s", transaction.control)

    payment = await transaction.authorize(
        buyer_phone=SANDBOX_BUYER_PHONE,
        buyer_bank_code=SANDBOX_BUYER_BANK_CODE,
        amount=SANDBOX_AMOUNT,
        buyer_cid=SANDBOX_BUYER_CID,
        reference=generate_reference(),
    )
    logger.info("2. Pago procesado: codigo=%s %s", payment.result_code, payment.description)

    status = await transaction.query_status()
    logger.info("3. Estado consultado: estado=%s codigo=%s", status.status, status.result_code)

    return SandboxReport(
        success=True,
        pre_registration=pre_registration,
        payment=payment,
        status=status,
    )


__all__ = ["SandboxReport", "run_sandbox_payment"]

# Fin del archivo taquilla/modules/payments/facades/sandbox.py
