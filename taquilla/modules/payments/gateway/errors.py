# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/errors.py

Excepciones de la integración con la pasarela P2C.

Todas heredan de GatewayError y cargan el contexto que operaciones necesita
para distinguir "bug nuestro" de "la pasarela rechazó esta combinación":
código y descripción de la pasarela (si los hay) y el ambiente activo.

Las excepciones de validación NO heredan de ValueError: se construyen dentro
de validadores Pydantic y deben propagarse tal cual, sin convertirse en
ValidationError.

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Error base de la pasarela P2C."""

    def __init__(
        self,
        message: str,
        *,
        codigo: Optional[str] = None,
        descripcion: Optional[str] = None,
        environment: Optional[str] = None,
        raw: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.codigo = codigo
        self.descripcion = descripcion
        self.environment = environment
        self.raw: Dict[str, Any] = raw or {}

    def enrich(
        self,
        *,
        codigo: Optional[str] = None,
        descripcion: Optional[str] = None,
        environment: Optional[str] = None,
    ) -> "GatewayError":
        """Completa el contexto faltante sin sobrescribir el existente."""
        if self.codigo is None:
            self.codigo = codigo
        if self.descripcion is None:
            self.descripcion = descripcion
        if self.environment is None:
            self.environment = environment
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "codigo": self.codigo,
            "descripcion": self.descripcion,
            "ambiente": self.environment,
        }

    def __str__(self) -> str:
        extra = [
            f"{k}={v}"
            for k, v in (
                ("codigo", self.codigo),
                ("ambiente", self.environment),
            )
            if v
        ]
        if extra:
            return f"{self.message} [{', '.join(extra)}]"
        return self.message


class GatewayConfigurationError(GatewayError):
    """Configuración de la pasarela incompleta o inválida."""


# ---------------------------------------------------------------------------
# Validación local (nunca se reintenta)
# ---------------------------------------------------------------------------


class InvalidInput(GatewayError):
    """Dato de entrada inválido; conserva el valor crudo recibido."""

    def __init__(self, message: str, *, raw_value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.raw_value = raw_value


class InvalidIdentifier(InvalidInput):
    """Cédula / RIF con formato irrecuperable."""


class InvalidPhone(InvalidInput):
    """Teléfono que no corresponde a un prefijo móvil válido."""


class InvalidBankCode(InvalidInput):
    """Código de banco fuera del catálogo soportado."""


class InvalidAmount(InvalidInput):
    """Monto no numérico o no positivo."""


# ---------------------------------------------------------------------------
# Wire / transporte
# ---------------------------------------------------------------------------


class MalformedResponse(GatewayError):
    """La respuesta no es XML bien formado o no tiene la raíz esperada."""

    def __init__(self, message: str, *, payload: bytes | str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.payload = payload


class GatewayUnreachable(GatewayError):
    """Falla de transporte tras agotar los reintentos."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        attempts: int = 0,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.cause = cause
        self.attempts = attempts


# ---------------------------------------------------------------------------
# Protocolo
# ---------------------------------------------------------------------------


class PreRegistrationFailed(GatewayError):
    """El pre-registro no devolvió número de control o fue rechazado."""


class Declined(GatewayError):
    """La pasarela rechazó la compra (desenlace de negocio válido)."""

    def __init__(self, message: str, *, voucher_lines: tuple[str, ...] = (), **kwargs: Any):
        super().__init__(message, **kwargs)
        self.voucher_lines = voucher_lines


class MissingControl(GatewayError):
    """Se requiere un número de control y no se proporcionó."""


class InvalidStateTransition(GatewayError):
    """Paso del protocolo invocado fuera de orden."""

    def __init__(self, from_state: str, to_state: str, message: Optional[str] = None):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(message or f"Transición inválida: {from_state} → {to_state}")


__all__ = [
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

# Fin del archivo taquilla/modules/payments/gateway/errors.py
