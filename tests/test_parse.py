from decimal import Decimal

from receiptsplit.utils.parse import (
    format_amount,
    format_currency,
    parse_currency_input,
    quantize_cents,
    to_decimal,
    validate_price_input,
)


def test_to_decimal_sanitizes_garbage():
    assert to_decimal(None) == 0
    assert to_decimal(float("nan")) == 0
    assert to_decimal(float("inf")) == 0
    assert to_decimal("abc") == 0
    assert to_decimal(Decimal("NaN")) == 0
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(" 2.50 ") == Decimal("2.50")


def test_huge_amounts_are_zeroed():
    assert to_decimal("1e30") == 0
    assert to_decimal(1e25) == 0
    assert format_currency("1e30") == "$0.00"
    assert quantize_cents(Decimal("-1e26")) == 0


def test_quantize_rounds_half_away_from_zero():
    assert quantize_cents(Decimal("3.335")) == Decimal("3.34")
    assert quantize_cents(Decimal("-3.335")) == Decimal("-3.34")
    assert quantize_cents(Decimal("3.3349")) == Decimal("3.33")


def test_format_amount():
    assert format_amount(Decimal("5")) == "5.00"
    assert format_amount(12.5) == "12.50"


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(Decimal("-1")) == "-$1.00"


def test_parse_currency_input():
    assert parse_currency_input("$1,234.50") == Decimal("1234.50")
    assert parse_currency_input("twelve") == 0
    assert parse_currency_input("") == 0


def test_validate_price_input():
    assert validate_price_input("") == []
    assert validate_price_input("12.99") == []
    assert validate_price_input("abc") == ["Please enter a valid number."]
    assert validate_price_input("-1") == ["Amount cannot be negative."]
    assert validate_price_input("1000000") == ["Amount is too large."]
