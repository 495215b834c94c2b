"""Invoice total calculation.

``subtotal = sum(line totals)``, ``tax = subtotal * rate / 100`` when a rate is
set, ``total = subtotal + tax - discount``. Tax stays ``None`` when no rate is
set so "no tax" and "zero tax" remain distinguishable.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from invoicedesk.billing import money
from invoicedesk.core.exceptions import ValidationError


class PricedLine(Protocol):
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_amount: Decimal | None
    discount_amount: Decimal | None
    total_amount: Decimal


def line_total(quantity: int, unit_price: money.MoneyLike) -> Decimal:
    return money.multiply(quantity, unit_price)


def calculate_totals(
    lines: Iterable[PricedLine],
    tax_rate: money.MoneyLike | None = None,
    discount_amount: money.MoneyLike | None = None,
) -> InvoiceTotals:
    """Compute derived totals from priced lines in their stored order."""
    subtotal = money.ZERO
    for line in lines:
        subtotal = money.add(subtotal, line_total(line.quantity, line.unit_price))

    tax_amount = money.percentage_of(subtotal, tax_rate) if tax_rate is not None else None
    discount = money.to_money(discount_amount) if discount_amount is not None else None

    total = subtotal
    if tax_amount is not None:
        total = money.add(total, tax_amount)
    if discount is not None:
        total = money.subtract(total, discount)

    return InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount_amount=discount,
        total_amount=total,
    )


def apply_totals(invoice: Any) -> InvoiceTotals:
    """Recompute every item's line total and the invoice's derived fields."""
    for item in invoice.items:
        item.line_total = line_total(item.quantity, item.unit_price)

    totals = calculate_totals(invoice.items, invoice.tax_rate, invoice.discount_amount)
    invoice.subtotal = totals.subtotal
    invoice.tax_amount = totals.tax_amount
    invoice.discount_amount = totals.discount_amount
    invoice.total_amount = totals.total_amount
    return totals


def assert_valid_totals(totals: InvoiceTotals) -> None:
    """Reject totals the invoice invariants or the storage range do not allow."""
    money.check_limit(totals.subtotal, "Invoice subtotal")
    if totals.tax_amount is not None:
        money.check_limit(totals.tax_amount, "Tax amount")
    if totals.discount_amount is not None:
        money.check_limit(totals.discount_amount, "Discount amount")
    if totals.discount_amount is not None and totals.discount_amount < 0:
        raise ValidationError("Discount amount must not be negative.")
    if totals.total_amount < 0:
        raise ValidationError("Discount amount exceeds the invoice subtotal plus tax.")
    money.check_limit(totals.total_amount, "Invoice total")
