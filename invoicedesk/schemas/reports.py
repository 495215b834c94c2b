"""Report response schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from invoicedesk.schemas.common import CamelModel


class OverdueSummary(CamelModel):
    count: int
    total_amount: Decimal


class SummaryResponse(CamelModel):
    total_invoices: int
    total_revenue: Decimal
    overdue_invoices: OverdueSummary
    invoices_by_status: dict[str, int]
    total_customers: int
    generated_at: datetime
