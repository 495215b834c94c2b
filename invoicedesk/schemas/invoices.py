"""Invoice request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, model_validator

from invoicedesk.models.enums import InvoiceStatus
from invoicedesk.models.invoice import MAX_QUANTITY
from invoicedesk.schemas.common import CamelModel
from invoicedesk.schemas.customers import CustomerResponse


class InvoiceItemRequest(CamelModel):
    description: str = Field(min_length=1, max_length=255)
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    unit_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    unit: str | None = Field(default=None, max_length=100)


class InvoiceCreateRequest(CamelModel):
    customer_id: int | None = Field(default=None, ge=1)
    customer_email: str | None = Field(default=None, max_length=180)
    issue_date: date
    due_date: date
    status: str | None = Field(default=None, max_length=20)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    notes: str | None = Field(default=None, max_length=10000)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100, decimal_places=2)
    discount_amount: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    items: list[InvoiceItemRequest] = Field(default_factory=list)

    @model_validator(mode="after")
    def _customer_reference(self) -> "InvoiceCreateRequest":
        if self.customer_id is None and not self.customer_email:
            raise ValueError("customerId or customerEmail is required")
        return self


class InvoiceUpdateRequest(CamelModel):
    customer_id: int | None = Field(default=None, ge=1)
    issue_date: date | None = None
    due_date: date | None = None
    status: str | None = Field(default=None, max_length=20)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    notes: str | None = Field(default=None, max_length=10000)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100, decimal_places=2)
    discount_amount: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    items: list[InvoiceItemRequest] | None = None


class InvoiceItemResponse(CamelModel):
    id: int
    position: int
    description: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    unit: str | None = None


class InvoiceResponse(CamelModel):
    id: int
    invoice_number: str
    customer: CustomerResponse
    issue_date: date
    due_date: date
    status: InvoiceStatus
    is_overdue: bool = False
    currency: str
    subtotal: Decimal
    tax_rate: Decimal | None = None
    tax_amount: Decimal | None = None
    discount_amount: Decimal | None = None
    total_amount: Decimal
    notes: str | None = None
    items: list[InvoiceItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None
