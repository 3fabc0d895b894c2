# -*- coding: utf-8 -*-
"""
tests/modules/payments/gateway/test_client.py

Tests del cliente P2C contra un gateway falso (httpx.MockTransport).
"""

import xml.etree.ElementTree as ET

import httpx
import pytest
from pydantic import SecretStr

from taquilla.modules.payments.enums import GatewayEnvironment, P2CState
from taquilla.modules.payments.gateway import (
    GatewayUnreachable,
    MalformedResponse,
    MissingControl,
    P2CGatewayClient,
    PreRegistrationFailed,
    PurchaseRequest,
)
from taquilla.modules.payments.gateway.client import (
    PRE_REGISTER_PATH,
    PURCHASE_PATH,
    QUERY_STATUS_PATH,
)
from taquilla.shared.config.settings_gateway import GatewaySettings

PURCHASE_FIELD_ORDER = [
    "cod_afiliacion",
    "control",
    "telefonoCliente",
    "codigobancoCliente",
    "telefonoComercio",
    "codigobancoComercio",
    "amount",
    "factura",
    "referencia",
    "cid",
]


def _sent_fields(request: httpx.Request):
    root = ET.fromstring(request.content)
    assert root.tag == "request"
    return [(child.tag, child.text) for child in root]


def _purchase(**overrides) -> PurchaseRequest:
    values = dict(
        control="12345678",
        buyer_phone="04121234567",
        buyer_bank_code="0138",
        amount="11.99",
        buyer_cid="V12345678",
        invoice="FAC-001",
        reference="87654321",
    )
    values.update(overrides)
    return PurchaseRequest(**values)


@pytest.fixture
def client(sandbox_profile, fake_gateway):
    return P2CGatewayClient(sandbox_profile, transport=fake_gateway.transport)


# ---------------------------------------------------------------------------
# Pre-registro
# ---------------------------------------------------------------------------

@pytest.mark.anyio
async def test_pre_register_returns_control(client, fake_gateway, make_response):
    fake_gateway.queue(PRE_REGISTER_PATH, make_response({"codigo": "00", "control": "12345678"}))

    async with client:
        result = await client.pre_register()

    assert result.success is True
    assert result.control == "12345678"
    assert result.state is P2CState.PRE_REGISTERED
    (request,) = fake_gateway.requests
    assert _sent_fields(request) == [("cod_afiliacion", "20250325")]


@pytest.mark.anyio
async def test_pre_register_without_control_fails(client, fake_gateway, make_response):
    fake_gateway.queue(PRE_REGISTER_PATH, make_response({"codigo": "00"}))

    with pytest.raises(PreRegistrationFailed) as exc:
        await client.pre_register()
    assert exc.value.environment == "PRUEBAS"


@pytest.mark.anyio
async def test_pre_register_rejected_code_fails(client, fake_gateway, make_response):
    fake_gateway.queue(
        PRE_REGISTER_PATH,
        make_response({"codigo": "99", "descripcion": "AFILIACION INVALIDA", "control": "1"}),
    )

    with pytest.raises(PreRegistrationFailed) as exc:
        await client.pre_register()
    assert exc.value.codigo == "99"
    assert exc.value.descripcion == "AFILIACION INVALIDA"
    assert "AFILIACION INVALIDA" in exc.value.message


@pytest.mark.anyio
async def test_malformed_response_is_enriched(client, fake_gateway, make_response):
    fake_gateway.queue(PRE_REGISTER_PATH, make_response(body="<html>oops</html>"))

    with pytest.raises(MalformedResponse) as exc:
        await client.pre_register()
    assert exc.value.environment == "PRUEBAS"
    assert exc.value.payload == b"<html>oops</html>"


# ---------------------------------------------------------------------------
# Compra
# ---------------------------------------------------------------------------

@pytest.mark.anyio
async def test_purchase_body_field_order(client, fake_gateway, make_response):
    fake_gateway.queue(PURCHASE_PATH, make_response({"codigo": "00", "control": "12345678"}))

    await client.authorize_purchase(_purchase())

    (request,) = fake_gateway.requests
    assert _sent_fields(request) == [
        ("cod_afiliacion", "20250325"),
        ("control", "12345678"),
        ("telefonoCliente", "04121234567"),
        ("codigobancoCliente", "0138"),
        ("telefonoComercio", "04141234567"),
        ("codigobancoComercio", "0138"),
        ("amount", "11.99"),
        ("factura", "FAC-001"),
        ("referencia", "87654321"),
        ("cid", "V12345678"),
    ]
    assert [tag for tag, _ in _sent_fields(request)] == PURCHASE_FIELD_ORDER


@pytest.mark.anyio
async def test_purchase_approved_with_voucher(client, fake_gateway, make_response):
    fake_gateway.queue(
        PURCHASE_PATH,
        make_response(
            body=(
                "<response><codigo>00</codigo><descripcion>APROBADA</descripcion>"
                "<control>12345678</control><authid>A1B2</authid><seqnum>42</seqnum>"
                "<voucher><linea>BANCO_PLAZA</linea><linea>MONTO:_11.99</linea></voucher>"
                "</response>"
            )
        ),
    )

    result = await client.authorize_purchase(_purchase())

    assert result.success is True
    assert result.state is P2CState.AUTHORIZED
    assert result.authorization_id == "A1B2"
    assert result.sequence_number == "42"
    assert result.voucher.lines == ("BANCO PLAZA", "MONTO: 11.99")
    # Campos propios cuando la pasarela no los devuelve
    assert result.invoice == "FAC-001"
    assert result.reference == "87654321"
    assert result.reconciled is False


@pytest.mark.anyio
async def test_purchase_ag_names_phone_bank_and_id(client, fake_gateway, make_response):
    fake_gateway.queue(
        PURCHASE_PATH,
        make_response({"codigo": "AG", "descripcion": "CUENTA NO AFILIADA"}),
    )

    result = await client.authorize_purchase(_purchase())

    assert result.success is False
    assert result.state is P2CState.DECLINED
    assert result.result_code == "AG"
    assert "04121234567" in result.decline_reason
    assert "Banco Plaza" in result.decline_reason
    assert "V12345678" in result.decline_reason
    assert "PRUEBAS" in result.decline_reason


@pytest.mark.anyio
async def test_purchase_ag_in_production(production_profile, fake_gateway, make_response):
    fake_gateway.queue(PURCHASE_PATH, make_response({"codigo": "AG"}))

    async with P2CGatewayClient(production_profile, transport=fake_gateway.transport) as client:
        result = await client.authorize_purchase(_purchase())

    assert "PRODUCCIÓN" in result.decline_reason
    assert "datos de prueba" not in result.decline_reason


@pytest.mark.anyio
async def test_purchase_other_decline_uses_description(client, fake_gateway, make_response):
    fake_gateway.queue(
        PURCHASE_PATH,
        make_response(
            body=(
                "<response><codigo>51</codigo><descripcion>FONDOS INSUFICIENTES</descripcion>"
                "<voucher>RECHAZADA\nFONDOS_INSUFICIENTES</voucher></response>"
            )
        ),
    )

    result = await client.authorize_purchase(_purchase())

    assert result.success is False
    assert result.decline_reason == "FONDOS INSUFICIENTES"
    # El voucher se decodifica también en los rechazos
    assert result.voucher.lines == ("RECHAZADA", "FONDOS INSUFICIENTES")


@pytest.mark.anyio
async def test_purchase_decline_without_description(client, fake_gateway, make_response):
    fake_gateway.queue(PURCHASE_PATH, make_response({"codigo": "05"}))

    result = await client.authorize_purchase(_purchase())
    assert "05" in result.decline_reason


# ---------------------------------------------------------------------------
# Consulta de estado
# ---------------------------------------------------------------------------

@pytest.mark.anyio
async def test_query_status(client, fake_gateway, make_response):
    fake_gateway.queue(
        QUERY_STATUS_PATH,
        make_response({"codigo": "00", "estado": "A", "control": "12345678", "monto": "11.99"}),
    )

    result = await client.query_status("12345678")

    assert result.status == "A"
    assert result.state is P2CState.QUERIED
    assert result.amount == "11.99"
    (request,) = fake_gateway.requests
    assert _sent_fields(request) == [
        ("cod_afiliacion", "20250325"),
        ("control", "12345678"),
        ("version", "3"),
        ("tipotrx", "P2C"),
    ]


@pytest.mark.anyio
async def test_query_status_custom_kind(client, fake_gateway, make_response):
    fake_gateway.queue(QUERY_STATUS_PATH, make_response({"codigo": "00"}))

    result = await client.query_status("777", kind="C2P")

    assert ("tipotrx", "C2P") in _sent_fields(fake_gateway.requests[0])
    assert result.control == "777"


@pytest.mark.anyio
@pytest.mark.parametrize("control", [None, ""])
async def test_query_status_requires_control(client, fake_gateway, control):
    with pytest.raises(MissingControl):
        await client.query_status(control)
    assert fake_gateway.requests == []


# ---------------------------------------------------------------------------
# Conciliación de compras sin respuesta
# ---------------------------------------------------------------------------

@pytest.mark.anyio
async def test_unanswered_purchase_reconciled_as_approved(client, fake_gateway, make_response, sleeps):
    fake_gateway.queue(PURCHASE_PATH, httpx.ReadTimeout("timeout"))
    fake_gateway.queue(
        QUERY_STATUS_PATH,
        make_response({"codigo": "00", "estado": "A", "control": "12345678", "authid": "Z9"}),
    )

    result = await client.authorize_purchase(_purchase())

    assert result.success is True
    assert result.reconciled is True
    assert result.state is P2CState.AUTHORIZED
    assert result.authorization_id == "Z9"
    # No se reenvía una compra que la pasarela ya aprobó
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 1
    assert len(fake_gateway.calls(QUERY_STATUS_PATH)) == 1
    assert sleeps == []


@pytest.mark.anyio
async def test_unanswered_purchase_resent_when_not_approved(client, fake_gateway, make_response, sleeps):
    fake_gateway.queue(
        PURCHASE_PATH,
        httpx.ConnectError("connection reset"),
        make_response({"codigo": "00", "control": "12345678"}),
    )
    fake_gateway.queue(QUERY_STATUS_PATH, make_response({"codigo": "41", "descripcion": "NO EXISTE"}))

    result = await client.authorize_purchase(_purchase())

    assert result.success is True
    assert result.reconciled is False
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 2
    assert len(fake_gateway.calls(QUERY_STATUS_PATH)) == 1
    assert sleeps == [1.0]


@pytest.mark.anyio
async def test_unanswered_purchase_resent_when_status_rejected(client, fake_gateway, make_response, sleeps):
    fake_gateway.queue(
        PURCHASE_PATH,
        httpx.ReadTimeout("timeout"),
        make_response({"codigo": "00", "control": "12345678", "authid": "K2"}),
    )
    # codigo 00 sólo indica que la consulta respondió; estado R = sin cobro
    fake_gateway.queue(QUERY_STATUS_PATH, make_response({"codigo": "00", "estado": "R"}))

    result = await client.authorize_purchase(_purchase())

    assert result.authorization_id == "K2"
    assert result.reconciled is False
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 2
    assert sleeps == [1.0]


@pytest.mark.anyio
@pytest.mark.parametrize("estado", ["P", "X"])
async def test_pending_status_is_not_resent(client, fake_gateway, make_response, sleeps, estado):
    fake_gateway.queue(PURCHASE_PATH, httpx.ReadTimeout("timeout"))
    fake_gateway.queue(QUERY_STATUS_PATH, make_response({"codigo": "00", "estado": estado}))

    with pytest.raises(GatewayUnreachable) as exc:
        await client.authorize_purchase(_purchase())

    assert exc.value.raw["control"] == "12345678"
    assert exc.value.raw["estado"] == estado
    assert exc.value.attempts == 1
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 1
    assert sleeps == []


@pytest.mark.anyio
async def test_malformed_status_answer_is_not_resent(client, fake_gateway, make_response, sleeps):
    fake_gateway.queue(PURCHASE_PATH, httpx.ReadTimeout("timeout"))
    fake_gateway.queue(QUERY_STATUS_PATH, make_response(body="<response><codigo>00"))

    with pytest.raises(GatewayUnreachable) as exc:
        await client.authorize_purchase(_purchase())

    assert isinstance(exc.value.__cause__, MalformedResponse)
    assert exc.value.raw["control"] == "12345678"
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 1
    assert len(fake_gateway.calls(QUERY_STATUS_PATH)) == 1
    assert sleeps == []


@pytest.mark.anyio
async def test_unreachable_status_query_surfaces_unreachable(client, fake_gateway, sleeps):
    fake_gateway.queue(PURCHASE_PATH, httpx.ConnectError("down"))
    fake_gateway.queue(QUERY_STATUS_PATH, httpx.ConnectError("down"))

    with pytest.raises(GatewayUnreachable) as exc:
        await client.authorize_purchase(_purchase())

    assert exc.value.environment == "PRUEBAS"
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 1
    # La consulta de estado sí usa los reintentos del perfil
    assert len(fake_gateway.calls(QUERY_STATUS_PATH)) == 2


@pytest.mark.anyio
async def test_resend_attempts_exhausted(client, fake_gateway, make_response, sleeps):
    fake_gateway.queue(PURCHASE_PATH, httpx.ConnectError("down"))
    fake_gateway.queue(QUERY_STATUS_PATH, make_response({"codigo": "41"}))

    with pytest.raises(GatewayUnreachable) as exc:
        await client.authorize_purchase(_purchase())

    assert exc.value.attempts == 2
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 2
    assert len(fake_gateway.calls(QUERY_STATUS_PATH)) == 2
    assert sleeps == [1.0]


@pytest.mark.anyio
async def test_blind_retry_without_reconcile(client, fake_gateway, make_response, sleeps):
    fake_gateway.queue(
        PURCHASE_PATH,
        httpx.ConnectError("connection reset"),
        make_response({"codigo": "00", "control": "12345678"}),
    )

    result = await client.authorize_purchase(_purchase(), reconcile=False)

    assert result.success is True
    assert len(fake_gateway.calls(PURCHASE_PATH)) == 2
    assert fake_gateway.calls(QUERY_STATUS_PATH) == []
    assert sleeps == [1.0]


# ---------------------------------------------------------------------------
# Diagnóstico
# ---------------------------------------------------------------------------

@pytest.mark.anyio
async def test_test_connection_success(client, fake_gateway, make_response):
    fake_gateway.queue(PRE_REGISTER_PATH, make_response({"codigo": "00", "control": "555"}))

    report = await client.test_connection()

    assert report.success is True
    assert report.control == "555"
    assert report.environment is GatewayEnvironment.TEST
    assert report.base_url == "https://paytest.example.com"
    assert report.affiliation == "20250325"


@pytest.mark.anyio
async def test_test_connection_reports_errors(client, fake_gateway, sleeps):
    fake_gateway.queue(PRE_REGISTER_PATH, httpx.ConnectError("connection refused"))

    report = await client.test_connection()

    assert report.success is False
    assert report.control is None
    assert report.error["error"] == "GatewayUnreachable"
    assert report.error["ambiente"] == "PRUEBAS"


def test_describe_configuration_and_banks(client):
    described = client.describe_configuration()
    assert described["environment"] == "test"
    assert described["usuario_configurado"] is True
    assert "s3cret" not in str(described)
    assert {"code": "0138", "name": "Banco Plaza"} in client.supported_banks()


def test_from_settings():
    settings = GatewaySettings(
        _env_file=None,
        test_username="u",
        test_password=SecretStr("p"),
        test_cod_afiliacion="42",
    )
    client = P2CGatewayClient.from_settings(settings)
    assert client.profile.affiliation_code == "42"
    assert client.profile.environment is GatewayEnvironment.TEST
# Fin del archivo
