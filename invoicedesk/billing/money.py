"""Exact decimal arithmetic for currency amounts.

Amounts carry two fractional digits, intermediate rate math carries four.
Every operation rounds half-up to the canonical scale and returns a new value.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from invoicedesk.core.exceptions import ValidationError

CENT = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
# Largest value a Numeric(10, 2) column holds.
MAX_AMOUNT = Decimal("99999999.99")

MoneyLike = Decimal | int | str | float


def to_decimal(value: MoneyLike) -> Decimal:
    """Exact, unrounded parse; rejects non-finite and unparsable input."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"Not a monetary value: {value!r}")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValidationError(f"Not a monetary value: {value!r}") from exc
    elif isinstance(value, float):
        # str() gives the shortest repr, so 0.1 becomes Decimal("0.1") and not the binary expansion.
        result = Decimal(str(value))
    else:
        raise ValidationError(f"Not a monetary value: {value!r}")
    if not result.is_finite():
        raise ValidationError(f"Not a monetary value: {value!r}")
    return result


def to_money(value: MoneyLike) -> Decimal:
    """Quantize to two decimal places."""
    try:
        return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValidationError(f"Monetary value out of range: {value!r}") from exc


def to_rate(value: MoneyLike) -> Decimal:
    """Quantize to the four-digit intermediate scale."""
    return to_decimal(value).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def add(a: MoneyLike, b: MoneyLike) -> Decimal:
    return to_money(to_decimal(a) + to_decimal(b))


def subtract(a: MoneyLike, b: MoneyLike) -> Decimal:
    return to_money(to_decimal(a) - to_decimal(b))


def multiply(a: MoneyLike, b: MoneyLike) -> Decimal:
    """Product rounded to cents, e.g. quantity x unit price."""
    return to_money(to_decimal(a) * to_decimal(b))


def percentage_of(amount: MoneyLike, rate_percent: MoneyLike) -> Decimal:
    """``amount * rate_percent / 100`` with the factor held at four digits."""
    factor = to_rate(to_decimal(rate_percent) / HUNDRED)
    return multiply(amount, factor)


def format_money(value: MoneyLike, currency: str | None = None) -> str:
    """Render ``1234.5`` as ``1,234.50`` (optionally suffixed with the currency)."""
    text = f"{to_money(value):,.2f}"
    return f"{text} {currency}" if currency else text


def check_limit(value: Decimal, label: str) -> Decimal:
    """Reject amounts above :data:`MAX_AMOUNT` instead of letting storage round them."""
    if value > MAX_AMOUNT:
        raise ValidationError(f"{label} exceeds the maximum of {MAX_AMOUNT}.")
    return value
