# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/__init__.py

Integración con la pasarela de pago móvil P2C.

Uso típico:

    from taquilla.modules.payments.gateway import (
        EnvironmentProfile,
        P2CGatewayClient,
        PurchaseRequest,
    )

    profile = EnvironmentProfile.from_settings()
    async with P2CGatewayClient(profile) as client:
        pre = await client.pre_register()
        result = await client.authorize_purchase(
            PurchaseRequest(
                control=pre.control,
                buyer_phone="04121234567",
                buyer_bank_code="0138",
                amount="11.99",
                buyer_cid="V12345678",
            )
        )

Autor: Taquilla
Fecha: 2026-10-17
"""

from .banks import BANKS, get_bank_name, supported_banks, validate_bank_code
from .client import P2CGatewayClient
from .codec import Voucher, VoucherShape, decode, decode_voucher, encode
from .dto import (
    TX_APPROVED,
    TX_PENDING,
    TX_REJECTED,
    ConnectionReport,
    GatewayResult,
    PurchaseRequest,
)
from .errors import (
    Declined,
    GatewayConfigurationError,
    GatewayError,
    GatewayUnreachable,
    InvalidAmount,
    InvalidBankCode,
    InvalidIdentifier,
    InvalidInput,
    InvalidPhone,
    InvalidStateTransition,
    MalformedResponse,
    MissingControl,
    PreRegistrationFailed,
)
from .formatters import (
    format_amount,
    format_cid,
    format_phone,
    format_purchase_amount,
    generate_invoice_number,
    generate_reference,
)
from .profile import EnvironmentProfile
from .transport import RetryingTransport

__all__ = [
    # client / transport / profile
    "P2CGatewayClient",
    "RetryingTransport",
    "EnvironmentProfile",
    # dto
    "TX_APPROVED",
    "TX_PENDING",
    "TX_REJECTED",
    "PurchaseRequest",
    "GatewayResult",
    "ConnectionReport",
    # codec
    "encode",
    "decode",
    "decode_voucher",
    "Voucher",
    "VoucherShape",
    # formatters / banks
    "format_cid",
    "format_phone",
    "format_amount",
    "format_purchase_amount",
    "validate_bank_code",
    "get_bank_name",
    "supported_banks",
    "generate_reference",
    "generate_invoice_number",
    "BANKS",
    # errors
    "GatewayError",
    "GatewayConfigurationError",
    "InvalidInput",
    "InvalidIdentifier",
    "InvalidPhone",
    "InvalidBankCode",
    "InvalidAmount",
    "MalformedResponse",
    "GatewayUnreachable",
    "PreRegistrationFailed",
    "Declined",
    "MissingControl",
    "InvalidStateTransition",
]

# Fin del archivo taquilla/modules/payments/gateway/__init__.py
