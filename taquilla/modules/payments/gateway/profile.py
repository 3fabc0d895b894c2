# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/gateway/profile.py

Perfil de ambiente (inmutable) con el que opera un cliente de la pasarela.

Se construye una sola vez a partir de la configuración y se inyecta en el
cliente; no hay estado global de proceso. Dos clientes con perfiles
distintos (producción y pruebas) pueden convivir en el mismo proceso.

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Dict, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from taquilla.modules.payments.enums import GatewayEnvironment
from .errors import GatewayConfigurationError

if TYPE_CHECKING:
    from taquilla.shared.config.settings_gateway import GatewaySettings


# Parámetros de red por ambiente: (timeout s, intentos, delay base s)
_NETWORK_DEFAULTS: Dict[GatewayEnvironment, tuple[float, int, float]] = {
    GatewayEnvironment.PRODUCTION: (60.0, 3, 2.0),
    GatewayEnvironment.TEST: (30.0, 2, 1.0),
}


class EnvironmentProfile(BaseModel):
    """Configuración efectiva de un ambiente de la pasarela."""

    model_config = ConfigDict(frozen=True)

    environment: GatewayEnvironment
    base_url: str
    username: str
    password: SecretStr
    affiliation_code: str
    commerce_phone: Optional[str] = None
    commerce_bank_code: Optional[str] = None
    timeout_seconds: float = Field(gt=0)
    max_attempts: int = Field(ge=1)
    backoff_base_seconds: float = Field(gt=0)
    verbose: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment.is_production

    @property
    def label(self) -> str:
        return self.environment.label

    @classmethod
    def build(
        cls,
        environment: GatewayEnvironment,
        *,
        base_url: str,
        username: str,
        password: str | SecretStr,
        affiliation_code: str,
        commerce_phone: Optional[str] = None,
        commerce_bank_code: Optional[str] = None,
        verbose: bool = False,
        **overrides: Any,
    ) -> "EnvironmentProfile":
        """
        Crea un perfil aplicando los parámetros de red por defecto del ambiente
        (timeout, intentos y delay base), que pueden sobrescribirse.
        """
        timeout, attempts, base_delay = _NETWORK_DEFAULTS[environment]
        if isinstance(password, SecretStr):
            password = password.get_secret_value()
        missing = [
            name
            for name, value in (
                ("username", username),
                ("password", password),
                ("affiliation_code", affiliation_code),
            )
            if not value
        ]
        if missing:
            raise GatewayConfigurationError(
                "Configuración de la pasarela incompleta. "
                f"Faltan: {', '.join(missing)}",
                environment=environment.label,
            )

        values: Dict[str, Any] = {
            "environment": environment,
            "base_url": base_url.rstrip("/"),
            "username": username,
            "password": SecretStr(password),
            "affiliation_code": affiliation_code,
            "commerce_phone": commerce_phone,
            "commerce_bank_code": commerce_bank_code,
            "timeout_seconds": timeout,
            "max_attempts": attempts,
            "backoff_base_seconds": base_delay,
            "verbose": verbose,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def for_environment(
        cls,
        environment: GatewayEnvironment,
        settings: "GatewaySettings",
    ) -> "EnvironmentProfile":
        """Perfil del ambiente indicado, leyendo sus credenciales de settings."""
        if environment.is_production:
            base_url = settings.prod_url
            username = settings.prod_username
            password = settings.prod_password
            affiliation = settings.prod_cod_afiliacion
        else:
            base_url = settings.test_url
            username = settings.test_username
            password = settings.test_password
            affiliation = settings.test_cod_afiliacion

        return cls.build(
            environment,
            base_url=base_url,
            username=username or "",
            password=password.get_secret_value() if password else "",
            affiliation_code=affiliation or "",
            commerce_phone=settings.commerce_phone,
            commerce_bank_code=settings.commerce_bank_code,
            verbose=settings.debug_gateway,
        )

    @classmethod
    def from_settings(cls, settings: Optional["GatewaySettings"] = None) -> "EnvironmentProfile":
        """Perfil del ambiente activo según la configuración."""
        if settings is None:
            from taquilla.shared.config import get_gateway_settings
            settings = get_gateway_settings()
        return cls.for_environment(settings.active_environment, settings)

    def describe(self) -> Dict[str, Any]:
        """Vista enmascarada del perfil para operadores (sin secretos)."""
        return {
            "ambiente": self.label,
            "environment": self.environment.value,
            "base_url": self.base_url,
            "afiliacion": self.affiliation_code,
            "telefono_comercio": self.commerce_phone,
            "banco_comercio": self.commerce_bank_code,
            "usuario_configurado": bool(self.username),
            "password_configurado": bool(self.password.get_secret_value()),
            "timeout_seconds": self.timeout_seconds,
            "max_attempts": self.max_attempts,
            "backoff_base_seconds": self.backoff_base_seconds,
            "verbose": self.verbose,
        }


__all__ = ["EnvironmentProfile"]

# Fin del archivo taquilla/modules/payments/gateway/profile.py
