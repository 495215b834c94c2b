from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from invoicedesk.billing.calculator import apply_totals, assert_valid_totals, calculate_totals, line_total
from invoicedesk.core.exceptions import ValidationError
from invoicedesk.models import Invoice, InvoiceItem


def _line(quantity, unit_price):
    return SimpleNamespace(quantity=quantity, unit_price=Decimal(unit_price))


def test_two_item_invoice_with_tax_and_discount():
    totals = calculate_totals([_line(2, "10.00"), _line(1, "5.00")], tax_rate="10", discount_amount="1.00")
    assert totals.subtotal == Decimal("25.00")
    assert totals.tax_amount == Decimal("2.50")
    assert totals.discount_amount == Decimal("1.00")
    assert totals.total_amount == Decimal("26.50")


def test_zero_items_yield_zero_totals_without_tax_or_discount():
    totals = calculate_totals([])
    assert totals.subtotal == Decimal("0.00")
    assert totals.total_amount == Decimal("0.00")
    assert totals.tax_amount is None
    assert totals.discount_amount is None


def test_zero_rate_is_distinct_from_no_rate():
    assert calculate_totals([_line(1, "9.99")], tax_rate="0").tax_amount == Decimal("0.00")
    assert calculate_totals([_line(1, "9.99")]).tax_amount is None


@pytest.mark.parametrize(
    ("quantity", "unit_price", "expected"),
    [
        (1, "0.01", Decimal("0.01")),
        (1, "19.99", Decimal("19.99")),
        (1000000, "0.01", Decimal("10000.00")),
        (1000000, "99.99", Decimal("99990000.00")),
    ],
)
def test_line_total_is_exact(quantity, unit_price, expected):
    assert line_total(quantity, Decimal(unit_price)) == expected


@pytest.mark.parametrize(
    ("tax_rate", "discount"),
    [(None, None), ("0", None), (None, "0.00"), ("19", "3.33"), ("100", "0.01")],
)
def test_total_equals_subtotal_plus_tax_minus_discount(tax_rate, discount):
    totals = calculate_totals([_line(3, "33.33"), _line(7, "0.07")], tax_rate=tax_rate, discount_amount=discount)
    expected = totals.subtotal + (totals.tax_amount or 0) - (totals.discount_amount or 0)
    assert totals.total_amount == expected


def test_apply_totals_is_idempotent():
    invoice = Invoice(tax_rate=Decimal("7.50"), discount_amount=Decimal("2.00"))
    invoice.add_item(InvoiceItem.create("Consulting", 3, "120.00"))
    invoice.add_item(InvoiceItem.create("Travel", 1, "45.10"))

    first = apply_totals(invoice)
    second = apply_totals(invoice)

    assert first == second
    assert invoice.subtotal == Decimal("405.10")
    assert invoice.tax_amount == Decimal("30.38")
    assert invoice.total_amount == Decimal("433.48")


def test_discount_larger_than_subtotal_is_rejected():
    totals = calculate_totals([_line(1, "5.00")], discount_amount="10.00")
    with pytest.raises(ValidationError):
        assert_valid_totals(totals)


def test_item_reprice_recomputes_line_total():
    item = InvoiceItem.create("Widget", 2, "4.50", unit="pcs")
    assert item.line_total == Decimal("9.00")
    item.reprice(quantity=5)
    assert item.line_total == Decimal("22.50")
    item.reprice(unit_price="1.99")
    assert item.line_total == Decimal("9.95")


@pytest.mark.parametrize(
    ("quantity", "unit_price"),
    [
        (0, "1.00"),
        (-1, "1.00"),
        (1, "-0.01"),
        (True, "1.00"),
        (1_000_001, "0.01"),
        (1, "100000000.00"),
        (123456789, "12345678.91"),
        (1_000_000, "100.00"),
    ],
)
def test_item_rejects_invalid_lines(quantity, unit_price):
    with pytest.raises(ValidationError):
        InvoiceItem.create("Bad", quantity, unit_price)


def test_item_at_the_storage_boundary_is_accepted():
    item = InvoiceItem.create("Bulk", 1_000_000, "99.99")
    assert item.line_total == Decimal("99990000.00")
    assert InvoiceItem.create("Big ticket", 1, "99999999.99").line_total == Decimal("99999999.99")


def test_totals_above_the_storage_range_are_rejected():
    lines = [_line(1, "99999999.99"), _line(1, "0.01")]
    with pytest.raises(ValidationError):
        assert_valid_totals(calculate_totals(lines))

    taxed = calculate_totals([_line(1, "60000000.00")], tax_rate="100")
    with pytest.raises(ValidationError):
        assert_valid_totals(taxed)

    assert_valid_totals(calculate_totals([_line(1, "99999999.99")]))


def test_remove_item_renumbers_the_rest():
    invoice = Invoice()
    first = invoice.add_item(InvoiceItem.create("First", 1, "1.00"))
    invoice.add_item(InvoiceItem.create("Second", 1, "2.00"))
    invoice.add_item(InvoiceItem.create("Third", 1, "3.00"))

    invoice.remove_item(first)

    assert [item.description for item in invoice.items] == ["Second", "Third"]
    assert [item.position for item in invoice.items] == [0, 1]
    assert apply_totals(invoice).subtotal == Decimal("5.00")
