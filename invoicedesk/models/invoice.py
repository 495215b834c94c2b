"""Invoice and invoice item models.

An invoice exclusively owns an ordered list of items. Items are created and
repriced only through :meth:`InvoiceItem.create` and :meth:`InvoiceItem.reprice`,
which recompute ``line_total`` in the same step.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from invoicedesk.billing.calculator import line_total
from invoicedesk.billing.money import check_limit, to_money
from invoicedesk.core.exceptions import ValidationError
from invoicedesk.models.base import AuditMixin, Base
from invoicedesk.models.customer import Customer
from invoicedesk.models.enums import InvoiceStatus

MAX_QUANTITY = 1_000_000


class Invoice(Base, AuditMixin):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
        Index("idx_invoices_status", "status"),
        Index("idx_invoices_due_date", "due_date"),
        CheckConstraint("due_date >= issue_date", name="ck_invoices_due_after_issue"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_number: Mapped[str] = mapped_column(String(20), nullable=False)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(
            InvoiceStatus,
            native_enum=False,
            length=20,
            values_callable=lambda members: [member.value for member in members],
            validate_strings=True,
        ),
        default=InvoiceStatus.DRAFT,
        nullable=False,
    )
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    tax_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    tax_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    discount_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    customer: Mapped[Customer] = relationship(Customer, lazy="joined")
    items: Mapped[list["InvoiceItem"]] = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position",
    )

    @validates("invoice_number")
    def _guard_invoice_number(self, _key: str, value: str) -> str:
        current = self.__dict__.get("invoice_number")
        if current is not None and current != value and inspect(self).has_identity:
            raise ValidationError("Invoice number cannot change once assigned.")
        return value

    def add_item(self, item: "InvoiceItem") -> "InvoiceItem":
        item.position = len(self.items)
        self.items.append(item)
        return item

    def remove_item(self, item: "InvoiceItem") -> None:
        # delete-orphan cascade removes the row on flush.
        self.items.remove(item)
        for position, remaining in enumerate(self.items):
            remaining.position = position

    def replace_items(self, items: list["InvoiceItem"]) -> None:
        self.items.clear()
        for item in items:
            self.add_item(item)


class InvoiceItem(Base):
    __tablename__ = "invoice_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_invoice_items_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_invoice_items_unit_price_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(100), nullable=True)

    invoice: Mapped[Invoice] = relationship(Invoice, back_populates="items")

    @classmethod
    def create(
        cls,
        description: str,
        quantity: int,
        unit_price: Decimal | int | str,
        unit: str | None = None,
    ) -> "InvoiceItem":
        _check_line(quantity, unit_price)
        price = to_money(unit_price)
        return cls(
            description=description,
            quantity=quantity,
            unit_price=price,
            line_total=line_total(quantity, price),
            unit=unit,
        )

    def reprice(self, quantity: int | None = None, unit_price: Decimal | int | str | None = None) -> None:
        """Change quantity and/or unit price, then recompute the line total."""
        new_quantity = self.quantity if quantity is None else quantity
        new_price = self.unit_price if unit_price is None else unit_price
        _check_line(new_quantity, new_price)
        self.quantity = new_quantity
        self.unit_price = to_money(new_price)
        self.line_total = line_total(self.quantity, self.unit_price)


def _check_line(quantity: int, unit_price: Decimal | int | str) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Item quantity must be a positive integer.")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"Item quantity must not exceed {MAX_QUANTITY}.")
    price = to_money(unit_price)
    if price < 0:
        raise ValidationError("Item unit price must not be negative.")
    check_limit(price, "Item unit price")
    check_limit(line_total(quantity, price), "Item line total")
