# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/metrics/collectors/gateway_collectors.py

Coleccionistas Prometheus para la pasarela P2C.

Define:
- Llamadas a la pasarela por operación y desenlace
- Latencia por operación (incluye reintentos)
- Reconciliaciones de compra tras fallas de transporte

Autor: Taquilla
Fecha: 2026-10-17
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

NAMESPACE = "p2c"
SUBSYSTEM = "gateway"

# Registro propio: no contamina el REGISTRY global del proceso
registry = CollectorRegistry()

gateway_requests_total = Counter(
    f"{NAMESPACE}_{SUBSYSTEM}_requests_total",
    "Llamadas a la pasarela P2C por operación y desenlace",
    labelnames=("operation", "outcome"),  # outcome: approved|declined|<ErrorClass>
    registry=registry,
)

gateway_request_seconds = Histogram(
    f"{NAMESPACE}_{SUBSYSTEM}_request_seconds",
    "Duración de cada operación contra la pasarela (segundos, con reintentos)",
    labelnames=("operation",),
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, 30, 60, 120),
    registry=registry,
)

gateway_reconciliations_total = Counter(
    f"{NAMESPACE}_{SUBSYSTEM}_reconciliations_total",
    "Consultas de estado tras compra sin respuesta",
    labelnames=("result",),  # approved|resend|pending|unreachable|unknown
    registry=registry,
)


def export_gateway_metrics() -> tuple[bytes, str]:
    """Métricas de la pasarela en formato de texto Prometheus."""
    return generate_latest(registry), CONTENT_TYPE_LATEST


__all__ = [
    "registry",
    "gateway_requests_total",
    "gateway_request_seconds",
    "gateway_reconciliations_total",
    "export_gateway_metrics",
]

# Fin del archivo
