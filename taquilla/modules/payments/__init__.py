# -*- coding: utf-8 -*-
"""
taquilla/modules/payments/__init__.py

Módulo de pagos de Taquilla.

Este módulo gestiona la integración con la pasarela de pago móvil P2C:
- enums: ambiente de la pasarela y estados del protocolo
- gateway: codec XML, validadores, transporte con reintentos y cliente
- facades: flujo completo de una transacción P2C y chequeo de sandbox
- metrics: coleccionistas Prometheus

La persistencia del resultado (boletos, transacciones) y el envío del recibo
por correo quedan fuera de este módulo.

Autor: Taquilla
Fecha: 2026-10-17
"""
