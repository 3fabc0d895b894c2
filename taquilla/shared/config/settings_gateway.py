# -*- coding: utf-8 -*-
"""
taquilla/shared/config/settings_gateway.py

Configuración de la pasarela de pago móvil P2C.

Descripción:
    Centraliza URLs, credenciales y afiliación por ambiente (producción y
    pruebas), datos del comercio receptor y flags de diagnóstico.
    Esta clase sólo lee configuración; la selección del perfil activo la
    hace EnvironmentProfile.from_settings().

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from taquilla.modules.payments.enums import GatewayEnvironment


class GatewaySettings(BaseSettings):
    """Configuración de la pasarela P2C."""

    # =========================================================================
    # SELECCIÓN DE AMBIENTE
    # =========================================================================

    gateway_env: GatewayEnvironment = Field(
        default=GatewayEnvironment.TEST,
        validation_alias="P2C_GATEWAY_ENV",
        description="Ambiente de la pasarela: 'production' o 'test'",
    )

    use_production_gateway: bool = Field(
        default=False,
        validation_alias="USE_PRODUCTION_GATEWAY",
        description="Fuerza el ambiente de producción sin importar P2C_GATEWAY_ENV",
    )

    # =========================================================================
    # PRODUCCIÓN
    # =========================================================================

    prod_url: str = Field(
        default="https://pay.megasoft.com.ve",
        validation_alias="P2C_PROD_URL",
    )
    prod_username: Optional[str] = Field(default=None, validation_alias="P2C_PROD_USERNAME")
    prod_password: Optional[SecretStr] = Field(default=None, validation_alias="P2C_PROD_PASSWORD")
    prod_cod_afiliacion: Optional[str] = Field(
        default=None,
        validation_alias="P2C_PROD_COD_AFILIACION",
        description="Código de afiliación del comercio en producción",
    )

    # =========================================================================
    # PRUEBAS
    # =========================================================================

    test_url: str = Field(
        default="https://paytest.megasoft.com.ve",
        validation_alias="P2C_TEST_URL",
    )
    test_username: Optional[str] = Field(default=None, validation_alias="P2C_TEST_USERNAME")
    test_password: Optional[SecretStr] = Field(default=None, validation_alias="P2C_TEST_PASSWORD")
    test_cod_afiliacion: Optional[str] = Field(
        default=None,
        validation_alias="P2C_TEST_COD_AFILIACION",
        description="Código de afiliación del comercio en pruebas",
    )

    # =========================================================================
    # COMERCIO (igual para ambos ambientes)
    # =========================================================================

    commerce_phone: Optional[str] = Field(
        default=None,
        validation_alias="P2C_COMMERCE_PHONE",
        description="Teléfono del comercio receptor del pago móvil",
    )
    commerce_bank_code: Optional[str] = Field(
        default=None,
        validation_alias="P2C_COMMERCE_BANK_CODE",
        description="Código del banco del comercio receptor",
    )

    # =========================================================================
    # DIAGNÓSTICO Y LOGGING
    # =========================================================================

    debug_gateway: bool = Field(
        default=False,
        validation_alias="DEBUG_GATEWAY",
        description="Loguea cuerpos XML de request/response (nivel DEBUG)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
    )
    log_format: Literal["plain", "pretty", "json"] = Field(
        default="plain",
        validation_alias="LOG_FORMAT",
    )

    @field_validator("prod_url", "test_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def active_environment(self) -> GatewayEnvironment:
        """Ambiente efectivo (USE_PRODUCTION_GATEWAY tiene prioridad)."""
        if self.use_production_gateway:
            return GatewayEnvironment.PRODUCTION
        return self.gateway_env

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Singleton global
_gateway_settings: Optional[GatewaySettings] = None


def get_gateway_settings() -> GatewaySettings:
    """
    Obtiene la instancia global de configuración de la pasarela.

    Returns:
        GatewaySettings: Configuración de la pasarela
    """
    global _gateway_settings
    if _gateway_settings is None:
        _gateway_settings = GatewaySettings()
    return _gateway_settings


__all__ = [
    "GatewaySettings",
    "get_gateway_settings",
]
# Fin del archivo taquilla/shared/config/settings_gateway.py
