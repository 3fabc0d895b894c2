# tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para Taquilla.

- Backend de anyio para tests async (@pytest.mark.anyio)
- Aislamiento de variables de entorno de la pasarela
- Perfiles de ambiente listos para usar
- Gateway falso sobre httpx.MockTransport
- Registro de esperas de backoff (sin dormir de verdad)
"""

import os
import xml.etree.ElementTree as ET
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from taquilla.modules.payments.enums import GatewayEnvironment
from taquilla.modules.payments.gateway.profile import EnvironmentProfile

GATEWAY_ENV_PREFIXES = ("P2C_", "USE_PRODUCTION_GATEWAY", "DEBUG_GATEWAY", "LOG_LEVEL", "LOG_FORMAT")


@pytest.fixture
def anyio_backend():
    # Permite usar @pytest.mark.anyio en tests async
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolate_gateway_env(monkeypatch):
    """No heredar credenciales ni flags de la pasarela del shell del dev."""
    for k in list(os.environ.keys()):
        if k.startswith(GATEWAY_ENV_PREFIXES):
            monkeypatch.delenv(k, raising=False)

    import taquilla.shared.config.settings_gateway as settings_gateway
    settings_gateway._gateway_settings = None
    yield
    settings_gateway._gateway_settings = None


@pytest.fixture
def sleeps(monkeypatch) -> List[float]:
    """
    Sustituye asyncio.sleep por un registro de delays (no duerme).
    """
    recorded: List[float] = []

    async def _record(delay, *args, **kwargs):
        if delay:
            recorded.append(delay)

    monkeypatch.setattr("asyncio.sleep", _record)
    return recorded


@pytest.fixture
def sandbox_profile() -> EnvironmentProfile:
    return EnvironmentProfile.build(
        GatewayEnvironment.TEST,
        base_url="https://paytest.example.com/",
        username="taquilla",
        password="s3cret",
        affiliation_code="20250325",
        commerce_phone="04141234567",
        commerce_bank_code="0138",
    )


@pytest.fixture
def production_profile() -> EnvironmentProfile:
    return EnvironmentProfile.build(
        GatewayEnvironment.PRODUCTION,
        base_url="https://pay.example.com",
        username="taquilla",
        password="pr0d",
        affiliation_code="99887766",
        commerce_phone="04141234567",
        commerce_bank_code="0138",
    )


def gateway_response(
    fields: Optional[Dict[str, str]] = None,
    *,
    status_code: int = 200,
    body: Optional[str] = None,
) -> httpx.Response:
    """Respuesta XML de la pasarela; body crudo tiene prioridad sobre fields."""
    if body is None:
        root = ET.Element("response")
        for name, value in (fields or {}).items():
            ET.SubElement(root, name).text = value
        body = ET.tostring(root, encoding="unicode")
    return httpx.Response(status_code, content=body.encode("utf-8"))


class FakeGateway:
    """
    Gateway falso: una cola de respuestas (o excepciones) por ruta.

    Guarda cada request recibido para inspeccionar cuerpo y headers.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, List[object]] = {}
        self.requests: List[httpx.Request] = []

    def queue(self, path: str, *responses: object) -> "FakeGateway":
        self.routes.setdefault(path, []).extend(responses)
        return self

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        pending = self.routes.get(request.url.path)
        if not pending:
            raise AssertionError(f"Request inesperado a {request.url.path}")
        item = pending.pop(0) if len(pending) > 1 else pending[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        # Copia fresca: una misma respuesta puede servirse varias veces
        return httpx.Response(item.status_code, content=item.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_response() -> Callable[..., httpx.Response]:
    return gateway_response

# Fin del archivo tests/conftest.py
