# -*- coding: utf-8 -*-
"""
taquilla/shared/core/__init__.py

Utilidades core compartidas de Taquilla.

Autor: Taquilla
Fecha: 2026-10-17
"""

from .http_retry_utils import (
    NON_SUCCESS_STATUSES,
    DEFAULT_RETRY_STATUSES,
    retry_with_backoff,
    retry_post_with_backoff,
)

__all__ = [
    "NON_SUCCESS_STATUSES",
    "DEFAULT_RETRY_STATUSES",
    "retry_with_backoff",
    "retry_post_with_backoff",
]
