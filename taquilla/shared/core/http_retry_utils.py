# -*- coding: utf-8 -*-
"""
taquilla/shared/core/http_retry_utils.py

Utilidades para reintentos con backoff exponencial en llamadas HTTP críticas.

Uso:
    async with httpx.AsyncClient(base_url=...) as client:
        response = await retry_post_with_backoff(
            "/action/v2-preregistro",
            client,
            max_retries=2,
            base_delay=1.0,
            content=b"<request>...</request>",
        )

La espera antes del reintento n (1-based) es base_delay * backoff_factor**(n-1),
acotada por max_delay, más un jitter opcional proporcional al delay.

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations
import asyncio
import logging
import random
from typing import Awaitable, Callable, Collection, Any, Optional

import httpx

logger = logging.getLogger(__name__)

# Todo lo que no sea 2xx (redirecciones incluidas)
NON_SUCCESS_STATUSES: frozenset[int] = frozenset(range(100, 200)) | frozenset(range(300, 600))

DEFAULT_RETRY_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


async def retry_with_backoff(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter_ratio: float = 0.2,
    retry_on_status: Optional[Collection[int]] = None,
    auto_raise: bool = False,
    **kwargs
) -> httpx.Response:
    """
    Ejecuta una función HTTP con reintentos y backoff exponencial.

    Args:
        func: Función async a ejecutar (ej: client.get, client.post)
        *args: Argumentos posicionales para func
        max_retries: Número máximo de reintentos (intentos totales = max_retries + 1)
        base_delay: Delay inicial en segundos
        max_delay: Delay máximo en segundos
        backoff_factor: Factor de multiplicación del delay
        jitter_ratio: Fracción máxima del delay añadida como jitter (0 = sin jitter)
        retry_on_status: Códigos HTTP que deben reintentarse (default: 429 y 5xx)
        auto_raise: Si True, llama raise_for_status() en respuestas no reintentables
        **kwargs: Argumentos nombrados para func

    Returns:
        Response de httpx si tiene éxito

    Raises:
        httpx.HTTPStatusError: Si el último intento devuelve un status reintentable
        httpx.TransportError: Si el último intento falla a nivel de transporte
    """
    if max_retries < 0:
        raise ValueError(f"max_retries debe ser >= 0, recibido: {max_retries}")
    if base_delay <= 0:
        raise ValueError(f"base_delay debe ser > 0, recibido: {base_delay}")
    if jitter_ratio < 0:
        raise ValueError(f"jitter_ratio debe ser >= 0, recibido: {jitter_ratio}")

    if retry_on_status is None:
        retry_on_status = DEFAULT_RETRY_STATUSES

    total = max_retries + 1
    delay = base_delay

    for attempt in range(total):
        try:
            response = await func(*args, **kwargs)

            if response.status_code in retry_on_status:
                if attempt < max_retries:
                    logger.warning(
                        "HTTP %s en intento %s/%s, reintentando en %.1fs...",
                        response.status_code, attempt + 1, total, delay,
                    )
                    await _sleep_with_jitter(delay, jitter_ratio)
                    delay = min(delay * backoff_factor, max_delay)
                    continue
                logger.error("HTTP %s tras %s intentos", response.status_code, total)
                response.raise_for_status()

            if attempt > 0:
                logger.info("Éxito tras %s intentos", attempt + 1)

            if auto_raise:
                response.raise_for_status()

            return response

        except httpx.TransportError as e:
            # TimeoutException es subclase de TransportError
            if attempt < max_retries:
                logger.warning(
                    "Error de transporte (%s) en intento %s/%s, reintentando en %.1fs...",
                    type(e).__name__, attempt + 1, total, delay,
                )
                await _sleep_with_jitter(delay, jitter_ratio)
                delay = min(delay * backoff_factor, max_delay)
            else:
                logger.error("Error de transporte tras %s intentos: %s", total, e)
                raise

    # range(total) siempre retorna o relanza en el último intento
    raise RuntimeError("Reintentos agotados sin excepción clara")


async def _sleep_with_jitter(delay: float, jitter_ratio: float) -> None:
    """Espera delay (+ jitter aleatorio hasta jitter_ratio * delay)."""
    if jitter_ratio:
        delay = delay + random.uniform(0, jitter_ratio * delay)
    await asyncio.sleep(delay)


async def retry_post_with_backoff(
    url: str,
    client: httpx.AsyncClient,
    max_retries: int = 3,
    **kwargs: Any,
) -> httpx.Response:
    """
    Shortcut para POST con reintentos y backoff.

    Ejemplo:
        response = await retry_post_with_backoff(
            "/action/v2-querystatus",
            client,
            max_retries=2,
            content=xml_bytes,
            retry_on_status=NON_SUCCESS_STATUSES,
        )
    """
    return await retry_with_backoff(
        client.post,
        url,
        max_retries=max_retries,
        **kwargs
    )


__all__ = [
    "NON_SUCCESS_STATUSES",
    "DEFAULT_RETRY_STATUSES",
    "retry_with_backoff",
    "retry_post_with_backoff",
]

# Fin del archivo taquilla/shared/core/http_retry_utils.py
