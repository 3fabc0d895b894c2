# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/facades/__init__.py

Fachadas del módulo Payments.

Este __init__ NO realiza imports automáticos de submódulos; cada facade se
importa explícitamente:

    from taquilla.modules.payments.facades.p2c_flow import process_p2c_payment
    from taquilla.modules.payments.facades.sandbox import run_sandbox_payment

Autor: Taquilla
Fecha: 2026-10-17
"""

__all__: list[str] = []

# Fin del archivo taquilla/modules/payments/facades/__init__.py
