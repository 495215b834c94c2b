"""Invoice service for creation, updates and overdue tracking."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from invoicedesk.billing.calculator import apply_totals, assert_valid_totals
from invoicedesk.billing.lifecycle import (
    SETTLED_STATUSES,
    check_overdue_consistency,
    check_transition,
    initial_status,
    parse_status,
)
from invoicedesk.billing.money import MoneyLike, to_decimal, to_money
from invoicedesk.billing.numbering import InvoiceNumberAllocator
from invoicedesk.core.clock import Clock, system_clock
from invoicedesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from invoicedesk.models import Customer, Invoice, InvoiceItem, InvoiceStatus
from invoicedesk.services.base_service import BaseService, violates_unique
from invoicedesk.services.customer_service import normalize_email

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5
UPDATABLE_FIELDS = frozenset(
    {"customer_id", "issue_date", "due_date", "status", "currency", "notes", "tax_rate", "discount_amount", "items"}
)


@dataclass(frozen=True)
class ItemInput:
    description: str
    quantity: int
    unit_price: MoneyLike
    unit: str | None = None


def _build_items(items: Iterable[ItemInput | Mapping[str, Any]]) -> list[InvoiceItem]:
    built = []
    for item in items:
        if isinstance(item, Mapping):
            item = ItemInput(**item)
        built.append(InvoiceItem.create(item.description, item.quantity, item.unit_price, unit=item.unit))
    return built


def _check_dates(issue_date: date, due_date: date) -> None:
    if due_date < issue_date:
        raise ValidationError("Due date must not be before the issue date.")


def _optional_money(value: MoneyLike | None, label: str) -> Decimal | None:
    """Exact amount with at most two decimal places, or ``None``."""
    if value is None:
        return None
    amount = to_decimal(value)
    if amount.normalize().as_tuple().exponent < -2:
        raise ValidationError(f"{label} allows at most two decimal places.")
    return to_money(amount)


def _tax_rate(value: MoneyLike | None) -> Decimal | None:
    rate = _optional_money(value, "Tax rate")
    if rate is not None and not (0 <= rate <= 100):
        raise ValidationError("Tax rate must be between 0 and 100.")
    return rate


class InvoiceService(BaseService):
    """Service for invoice CRUD and status transitions."""

    def __init__(
        self,
        db: Session,
        clock: Clock = system_clock,
        max_retries: int = DEFAULT_MAX_RETRIES,
        default_currency: str = "USD",
    ) -> None:
        super().__init__(db, clock=clock)
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.max_retries = max_retries
        self.default_currency = default_currency
        self.allocator = InvoiceNumberAllocator(db)

    def _resolve_customer(self, customer_id: int | None, customer_email: str | None) -> Customer:
        if customer_id is not None:
            customer = self.db.get(Customer, customer_id)
        elif customer_email:
            stmt = select(Customer).where(Customer.email == normalize_email(customer_email))
            customer = self.db.execute(stmt).scalar_one_or_none()
        else:
            raise ValidationError("Either customer id or customer email is required.")
        if customer is None:
            raise NotFoundError("Customer not found.")
        return customer

    def create_invoice(
        self,
        issue_date: date,
        due_date: date,
        items: Iterable[ItemInput | Mapping[str, Any]] = (),
        customer_id: int | None = None,
        customer_email: str | None = None,
        status: str | InvoiceStatus | None = None,
        currency: str | None = None,
        notes: str | None = None,
        tax_rate: MoneyLike | None = None,
        discount_amount: MoneyLike | None = None,
    ) -> Invoice:
        customer = self._resolve_customer(customer_id, customer_email)
        _check_dates(issue_date, due_date)
        resolved_status = initial_status(status)
        check_overdue_consistency(resolved_status, due_date, self.clock.today())

        invoice = Invoice(
            customer=customer,
            issue_date=issue_date,
            due_date=due_date,
            status=resolved_status,
            currency=currency or self.default_currency,
            notes=notes,
            tax_rate=_tax_rate(tax_rate),
            discount_amount=_optional_money(discount_amount, "Discount amount"),
            created_at=self.clock.now(),
        )
        for item in _build_items(items):
            invoice.add_item(item)
        assert_valid_totals(apply_totals(invoice))

        self._insert_with_number(invoice)
        self.db.refresh(invoice)
        logger.info(
            "invoice.created",
            extra={"event": "invoice.created", "invoice_id": invoice.id, "invoice_number": invoice.invoice_number},
        )
        return invoice

    def _insert_with_number(self, invoice: Invoice) -> None:
        """Assign the next number and commit, retrying when another writer took it.

        The unique constraint on ``invoice_number`` decides which concurrent
        writer wins; a loser rolls back and reads the maximum again.
        """
        for attempt in range(1, self.max_retries + 1):
            invoice.invoice_number = self.allocator.allocate()
            self.db.add(invoice)
            try:
                self.commit()
                return
            except IntegrityError as exc:
                if not violates_unique(exc, "invoice_number"):
                    raise
                logger.warning(
                    "invoice.number.collision",
                    extra={
                        "event": "invoice.number.collision",
                        "invoice_number": invoice.invoice_number,
                        "attempt": attempt,
                    },
                )

        logger.error(
            "invoice.number.exhausted",
            extra={"event": "invoice.number.exhausted", "attempts": self.max_retries},
        )
        raise ConflictError("Could not allocate a unique invoice number; please retry.")

    def get_invoice(self, invoice_id: int) -> Invoice | None:
        stmt = select(Invoice).options(selectinload(Invoice.items)).where(Invoice.id == invoice_id)
        return self.db.execute(stmt).unique().scalar_one_or_none()

    def require_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found.")
        return invoice

    def list_invoices(
        self,
        status: str | InvoiceStatus | None = None,
        customer_id: int | None = None,
    ) -> list[Invoice]:
        stmt = select(Invoice).options(selectinload(Invoice.items))
        if status is not None:
            stmt = stmt.where(Invoice.status == parse_status(status))
        if customer_id is not None:
            stmt = stmt.where(Invoice.customer_id == customer_id)
        stmt = stmt.order_by(Invoice.created_at.desc(), Invoice.id.desc())
        return list(self.db.execute(stmt).unique().scalars())

    def list_overdue(self) -> list[Invoice]:
        """Invoices past due and not settled, oldest due date first."""
        stmt = (
            select(Invoice)
            .options(selectinload(Invoice.items))
            .where(Invoice.due_date < self.clock.today(), Invoice.status.not_in(list(SETTLED_STATUSES)))
            .order_by(Invoice.due_date.asc(), Invoice.id.asc())
        )
        return list(self.db.execute(stmt).unique().scalars())

    def update_invoice(self, invoice_id: int, changes: Mapping[str, Any]) -> Invoice:
        """Apply a partial update; only keys present in ``changes`` are touched."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown invoice fields: {', '.join(sorted(unknown))}.")

        invoice = self.require_invoice(invoice_id)
        try:
            self._apply_changes(invoice, changes)
        except (ValidationError, NotFoundError):
            # Nothing half-applied may reach the next flush.
            self.rollback()
            raise

        invoice.updated_at = self.clock.now()
        self.commit()
        self.db.refresh(invoice)
        logger.info(
            "invoice.updated",
            extra={"event": "invoice.updated", "invoice_id": invoice.id, "status": invoice.status.value},
        )
        return invoice

    def _apply_changes(self, invoice: Invoice, changes: Mapping[str, Any]) -> None:
        today = self.clock.today()

        if changes.get("customer_id") is not None:
            invoice.customer = self._resolve_customer(changes["customer_id"], None)

        issue_date = changes.get("issue_date") or invoice.issue_date
        due_date = changes.get("due_date") or invoice.due_date
        _check_dates(issue_date, due_date)

        status = InvoiceStatus(invoice.status)
        if changes.get("status") is not None:
            status = check_transition(status, changes["status"], due_date, today)
        else:
            check_overdue_consistency(status, due_date, today)

        invoice.issue_date = issue_date
        invoice.due_date = due_date
        invoice.status = status
        if changes.get("currency") is not None:
            invoice.currency = changes["currency"]
        if "notes" in changes:
            invoice.notes = changes["notes"]
        if "tax_rate" in changes:
            invoice.tax_rate = _tax_rate(changes["tax_rate"])
        if "discount_amount" in changes:
            invoice.discount_amount = _optional_money(changes["discount_amount"], "Discount amount")
        if changes.get("items") is not None:
            invoice.replace_items(_build_items(changes["items"]))

        assert_valid_totals(apply_totals(invoice))

    def delete_invoice(self, invoice_id: int) -> None:
        invoice = self.require_invoice(invoice_id)
        self.db.delete(invoice)
        self.commit()
        logger.info("invoice.deleted", extra={"event": "invoice.deleted", "invoice_id": invoice_id})
