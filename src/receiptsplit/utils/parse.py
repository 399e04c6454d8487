from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Amount = Union[Decimal, float, int, str, None]

CENT = Decimal("0.01")
ZERO = Decimal("0")
MAX_PRICE = Decimal("999999.99")
# больше этого quantize до центов не влезает в точность контекста
MAX_AMOUNT = Decimal("1e24")

_CURRENCY_NOISE = re.compile(r"[$,\s]")


def to_decimal(value: Amount) -> Decimal:
    """
    Приводит произвольную сумму к Decimal.

    None, NaN, бесконечности, нечисловые строки и суммы от MAX_AMOUNT по модулю
    превращаются в 0, чтобы одно битое значение не отравило все последующие суммы.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return ZERO
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            value = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
    if not isinstance(value, Decimal) or not value.is_finite():
        return ZERO
    if abs(value) >= MAX_AMOUNT:
        return ZERO
    return value


def quantize_cents(value: Amount) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Amount) -> str:
    """Десятичная строка ровно с двумя знаками: '12.50'."""
    return f"{quantize_cents(value):.2f}"


def format_currency(value: Amount) -> str:
    amount = quantize_cents(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def parse_currency_input(text: str) -> Decimal:
    # "$1,234.50" -> 1234.50, мусор -> 0
    return to_decimal(_CURRENCY_NOISE.sub("", text or ""))


def validate_price_input(text: str) -> list[str]:
    if text == "":
        return []

    cleaned = _CURRENCY_NOISE.sub("", text)
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return ["Please enter a valid number."]
    if not number.is_finite():
        return ["Please enter a valid number."]
    if number < 0:
        return ["Amount cannot be negative."]
    if number > MAX_PRICE:
        return ["Amount is too large."]
    return []
