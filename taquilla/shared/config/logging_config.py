# -*- coding: utf-8 -*-
"""
taquilla/shared/config/logging_config.py

Logging de Taquilla vía logging.config.dictConfig.

- Un handler de consola (stdout) en formato plain o json (python-json-logger)
- El logger de la pasarela puede bajar a DEBUG por separado (DEBUG_GATEWAY)
  para ver los cuerpos XML sin inundar el resto de la app
- httpx queda en WARNING: ya logueamos cada intento en el transporte

Autor: Taquilla
Fecha: 2026-10-17
"""

from __future__ import annotations

import importlib
import logging.config
from typing import Any, Dict, Literal, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from taquilla.shared.config.settings_gateway import GatewaySettings

GATEWAY_LOGGER_NAME = "taquilla.modules.payments.gateway"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["plain", "pretty", "json"]

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s]: %(message)s"
JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _json_formatter_path() -> str:
    # python-json-logger 3.x movió jsonlogger -> json
    try:
        importlib.import_module("pythonjsonlogger.json")
    except ImportError:  # pragma: no cover
        return "pythonjsonlogger.jsonlogger.JsonFormatter"
    return "pythonjsonlogger.json.JsonFormatter"


def build_logging_config(
    level: LogLevel = "INFO",
    fmt: LogFormat = "plain",
    debug_gateway: bool = False,
) -> Dict[str, Any]:
    """Diccionario para dictConfig; "pretty" se trata igual que "plain"."""
    root_level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": PLAIN_FORMAT},
            "json": {"()": _json_formatter_path(), "format": JSON_FIELDS},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if fmt == "json" else "plain",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            GATEWAY_LOGGER_NAME: {
                "level": "DEBUG" if debug_gateway else root_level,
                "propagate": True,
            },
            "httpx": {"level": "WARNING", "propagate": True},
        },
        "root": {"handlers": ["console"], "level": root_level},
    }


def setup_logging(
    level: LogLevel = "INFO",
    fmt: LogFormat = "plain",
    debug_gateway: bool = False,
) -> None:
    """
    Configura el logging del proceso.

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json", debug_gateway=True)
    """
    logging.config.dictConfig(build_logging_config(level, fmt, debug_gateway))


def setup_logging_from_settings(settings: Optional["GatewaySettings"] = None) -> None:
    """setup_logging() con LOG_LEVEL, LOG_FORMAT y DEBUG_GATEWAY de la configuración."""
    if settings is None:
        from taquilla.shared.config.settings_gateway import get_gateway_settings
        settings = get_gateway_settings()
    setup_logging(settings.log_level, settings.log_format, settings.debug_gateway)


__all__ = [
    "GATEWAY_LOGGER_NAME",
    "build_logging_config",
    "setup_logging",
    "setup_logging_from_settings",
]

# Fin del archivo taquilla/shared/config/logging_config.py
