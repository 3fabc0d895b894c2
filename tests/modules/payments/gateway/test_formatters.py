# -*- coding: utf-8 -*-
"""
tests/modules/payments/gateway/test_formatters.py

Tests de normalización de datos del pagador.
"""

import logging
import re
from decimal import Decimal

import pytest

from taquilla.modules.payments.gateway.errors import (
    InvalidAmount,
    InvalidIdentifier,
    InvalidPhone,
)
from taquilla.modules.payments.gateway.formatters import (
    format_amount,
    format_cid,
    format_phone,
    format_purchase_amount,
    generate_invoice_number,
    generate_reference,
)


# ---------------------------------------------------------------------------
# CID
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("V12345678", "V12345678"),
        ("v12345678", "V12345678"),
        ("e1234567", "E1234567"),
        ("J123456789", "J123456789"),
        ("12345678", "V12345678"),
        (1234567, "V1234567"),
        ("  12345678 ", "V12345678"),
    ],
)
def test_format_cid(raw, expected):
    assert format_cid(raw) == expected


@pytest.mark.parametrize("cid", ["V12345678", "12345678", "G123456789"])
def test_format_cid_idempotent(cid):
    once = format_cid(cid)
    assert format_cid(once) == once


def test_format_cid_recovery_logs_warning(caplog):
    with caplog.at_level(logging.WARNING):
        assert format_cid("V-12.345.678") == "V12345678"
    assert any("V-12.345.678" in r.getMessage() for r in caplog.records)


def test_format_cid_recovery_assumes_default_prefix():
    # Se pierde el tipo de documento original
    assert format_cid("E-12.345.678") == "V12345678"


@pytest.mark.parametrize("cid", [None, "", "   ", "V123", "1234567890", "ABC"])
def test_format_cid_invalid(cid):
    with pytest.raises(InvalidIdentifier) as exc:
        format_cid(cid)
    assert exc.value.raw_value == cid


# ---------------------------------------------------------------------------
# Teléfono
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("04121234567", "04121234567"),
        ("4141234567", "04141234567"),
        ("0416-123.45.67", "04161234567"),
        ("(0424) 123 4567", "04241234567"),
        ("04261234567", "04261234567"),
    ],
)
def test_format_phone(raw, expected):
    assert format_phone(raw) == expected
    assert len(format_phone(raw)) == 11


@pytest.mark.parametrize(
    "phone",
    [None, "", "02121234567", "0412123456", "041212345678", "04151234567", "+584121234567"],
)
def test_format_phone_invalid(phone):
    with pytest.raises(InvalidPhone):
        format_phone(phone)


# ---------------------------------------------------------------------------
# Monto
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        (10, "10.00"),
        ("11.99", "11.99"),
        (11.5, "11.50"),
        (Decimal("1.005"), "1.01"),
        ("2.345", "2.35"),
        (" 7 ", "7.00"),
        ("1e3", "1000.00"),
    ],
)
def test_format_amount(raw, expected):
    assert format_amount(raw) == expected


@pytest.mark.parametrize("amount", [0, -1, "0.00", "-5", "abc", "", None, True, "NaN", "Infinity"])
def test_format_amount_invalid(amount):
    with pytest.raises(InvalidAmount):
        format_amount(amount)


def test_format_amount_always_two_decimals():
    for raw in ("1", "1.1", "1.123", 3, 0.5):
        assert re.fullmatch(r"\d+\.\d{2}", format_amount(raw))


def test_format_amount_keeps_sub_cent_positive_amounts():
    assert format_amount("0.001") == "0.00"


@pytest.mark.parametrize("amount", ["0.001", "0.004", 0.0049])
def test_format_purchase_amount_rejects_zero_charge(amount):
    with pytest.raises(InvalidAmount) as exc:
        format_purchase_amount(amount)
    assert exc.value.raw_value == amount


def test_format_purchase_amount():
    assert format_purchase_amount("0.005") == "0.01"
    assert format_purchase_amount(11.5) == "11.50"


# ---------------------------------------------------------------------------
# Generadores
# ---------------------------------------------------------------------------

def test_generate_reference_is_eight_digits():
    ref = generate_reference()
    assert re.fullmatch(r"\d{8}", ref)


def test_generate_invoice_number_format():
    invoice = generate_invoice_number()
    assert re.fullmatch(r"\d{17}", invoice)
# Fin del archivo
