# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/metrics/collectors/__init__.py

Coleccionistas Prometheus del módulo Payments.
"""

from .gateway_collectors import (
    registry,
    gateway_requests_total,
    gateway_request_seconds,
    gateway_reconciliations_total,
    export_gateway_metrics,
)

__all__ = [
    "registry",
    "gateway_requests_total",
    "gateway_request_seconds",
    "gateway_reconciliations_total",
    "export_gateway_metrics",
]
