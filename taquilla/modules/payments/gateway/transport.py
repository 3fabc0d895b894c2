# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/transport.py

Transporte HTTP hacia la pasarela P2C con reintentos.

- POST con Basic auth y Content-Type: text/xml
- Timeout del perfil (60 s producción / 30 s pruebas)
- Errores de red, timeouts y cualquier status no-2xx se reintentan con
  backoff exponencial sin jitter (delay base del perfil, doblando)
- Agotados los intentos -> GatewayUnreachable

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from taquilla.shared.core.http_retry_utils import (
    NON_SUCCESS_STATUSES,
    retry_post_with_backoff,
)
from .errors import GatewayUnreachable
from .profile import EnvironmentProfile

logger = logging.getLogger(__name__)

BACKOFF_FACTOR = 2.0


class RetryingTransport:
    """Envía cuerpos XML a la pasarela del perfil indicado."""

    def __init__(
        self,
        profile: EnvironmentProfile,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._profile = profile
        self._client = httpx.AsyncClient(
            base_url=profile.base_url,
            auth=httpx.BasicAuth(profile.username, profile.password.get_secret_value()),
            headers={"Content-Type": "text/xml"},
            timeout=profile.timeout_seconds,
            transport=transport,
        )

    @property
    def profile(self) -> EnvironmentProfile:
        return self._profile

    async def send(
        self,
        endpoint: str,
        body: bytes,
        *,
        max_attempts: Optional[int] = None,
    ) -> bytes:
        """
        POST de body a endpoint; devuelve el cuerpo crudo de la respuesta 2xx.

        Args:
            endpoint: Ruta bajo la URL base del ambiente
            body: XML ya codificado
            max_attempts: Intentos totales para esta llamada (default: perfil)

        Raises:
            GatewayUnreachable: tras agotar los intentos
        """
        attempts = max_attempts if max_attempts is not None else self._profile.max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts debe ser >= 1, recibido: {attempts}")

        base_delay = self._profile.backoff_base_seconds
        if self._profile.verbose:
            logger.debug("XML enviado a %s: %s", endpoint, body.decode("utf-8", "replace"))

        try:
            response = await retry_post_with_backoff(
                endpoint,
                self._client,
                max_retries=attempts - 1,
                base_delay=base_delay,
                backoff_factor=BACKOFF_FACTOR,
                # Sin tope efectivo: la secuencia es base, 2*base, 4*base...
                max_delay=base_delay * BACKOFF_FACTOR ** attempts,
                jitter_ratio=0.0,
                retry_on_status=NON_SUCCESS_STATUSES,
                content=body,
            )
        except httpx.HTTPError as e:
            logger.error(
                "Gateway %s inalcanzable en %s tras %s intento(s): %s",
                self._profile.label, endpoint, attempts, e,
            )
            raise GatewayUnreachable(
                f"No se pudo contactar al gateway ({endpoint}) tras {attempts} intento(s): {e}",
                cause=e,
                attempts=attempts,
                environment=self._profile.label,
            ) from e

        if self._profile.verbose:
            logger.debug(
                "XML recibido de %s (HTTP %s): %s",
                endpoint, response.status_code, response.text,
            )
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RetryingTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = ["RetryingTransport"]

# Fin del archivo taquilla/modules/payments/gateway/transport.py
