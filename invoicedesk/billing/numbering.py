"""Sequential invoice numbers: INV-0001, INV-0002, ... INV-9999, INV-10000."""

from __future__ import annotations

import re

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from invoicedesk.core.exceptions import ValidationError
from invoicedesk.models.invoice import Invoice

PREFIX = "INV-"
MIN_DIGITS = 4
_NUMBER_RE = re.compile(rf"^{re.escape(PREFIX)}(\d+)$")


def format_invoice_number(sequence: int) -> str:
    if sequence < 1:
        raise ValidationError("Invoice sequence must start at 1.")
    return f"{PREFIX}{sequence:0{MIN_DIGITS}d}"


def parse_invoice_number(invoice_number: str) -> int:
    match = _NUMBER_RE.match(invoice_number or "")
    if match is None:
        raise ValidationError(f"Malformed invoice number: {invoice_number!r}")
    return int(match.group(1))


def next_invoice_number(current_max: str | None) -> str:
    if current_max is None:
        return format_invoice_number(1)
    return format_invoice_number(parse_invoice_number(current_max) + 1)


class InvoiceNumberAllocator:
    """Computes the next number from the highest one in storage.

    Allocation alone is a read; it is only safe together with the unique
    constraint on ``invoices.invoice_number`` and the retry loop in
    :class:`~invoicedesk.services.invoice_service.InvoiceService`.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def current_max(self) -> str | None:
        # Zero padding stops at four digits, so a longer string is always a larger number.
        stmt = (
            select(Invoice.invoice_number)
            .where(Invoice.invoice_number.like(f"{PREFIX}%"))
            .order_by(func.length(Invoice.invoice_number).desc(), Invoice.invoice_number.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def allocate(self) -> str:
        return next_invoice_number(self.current_max())
