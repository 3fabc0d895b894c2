#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scripts/gateway_diagnostics.py

Diagnóstico de la pasarela P2C desde la terminal.

Uso:
    python scripts/gateway_diagnostics.py config            # Perfil activo (sin secretos)
    python scripts/gateway_diagnostics.py banks             # Bancos soportados
    python scripts/gateway_diagnostics.py test-connection   # Pre-registro de prueba
    python scripts/gateway_diagnostics.py status 12345678   # Estado de un control
    python scripts/gateway_diagnostics.py sandbox           # Transacción completa (sólo pruebas)

Toda la salida es JSON en stdout; los logs van según LOG_LEVEL / LOG_FORMAT.

Autor: Taquilla
Fecha: 2026-10-17
"""

import argparse
import asyncio
import json
import sys
from typing import Any, List, Optional

from taquilla.modules.payments.facades.sandbox import run_sandbox_payment
from taquilla.modules.payments.gateway import (
    EnvironmentProfile,
    GatewayError,
    P2CGatewayClient,
    supported_banks,
)
from taquilla.shared.config import get_gateway_settings, setup_logging_from_settings


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


async def _run(args: argparse.Namespace, profile: EnvironmentProfile) -> int:
    async with P2CGatewayClient(profile) as client:
        if args.command == "test-connection":
            report = await client.test_connection()
            _print_json(report.model_dump(mode="json"))
            return 0 if report.success else 1

        if args.command == "status":
            result = await client.query_status(args.control, args.kind)
            _print_json(result.model_dump(mode="json"))
            return 0

        if args.command == "sandbox":
            report = await run_sandbox_payment(client)
            _print_json(report.model_dump(mode="json"))
            return 0 if report.payment.success else 1

    raise ValueError(f"Comando desconocido: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Diagnóstico de la pasarela de pago móvil P2C")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("config", help="Mostrar la configuración activa (sin secretos)")
    sub.add_parser("banks", help="Listar bancos soportados")
    sub.add_parser("test-connection", help="Probar la conexión con un pre-registro")

    status = sub.add_parser("status", help="Consultar el estado de un número de control")
    status.add_argument("control", help="Número de control del pre-registro")
    status.add_argument("--kind", default="P2C", help="Tipo de transacción (default: P2C)")

    sub.add_parser("sandbox", help="Transacción completa con datos de prueba")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "banks":
        _print_json(supported_banks())
        return 0

    settings = get_gateway_settings()
    setup_logging_from_settings(settings)

    try:
        profile = EnvironmentProfile.from_settings(settings)
        if args.command == "config":
            _print_json(profile.describe())
            return 0
        return asyncio.run(_run(args, profile))
    except GatewayError as e:
        _print_json(e.to_dict())
        return 1


if __name__ == "__main__":
    sys.exit(main())
