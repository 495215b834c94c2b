"""Aggregate reporting over invoices and customers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from invoicedesk.billing import money
from invoicedesk.billing.lifecycle import SETTLED_STATUSES
from invoicedesk.models import Customer, Invoice, InvoiceStatus
from invoicedesk.services.base_service import BaseService


@dataclass(frozen=True)
class InvoiceSummary:
    total_invoices: int
    total_revenue: Decimal
    overdue_count: int
    overdue_amount: Decimal
    total_customers: int
    generated_at: datetime
    invoices_by_status: dict[str, int] = field(default_factory=dict)


class ReportService(BaseService):
    """Read-only reports; never writes."""

    def summary(self) -> InvoiceSummary:
        total_invoices = self.db.execute(select(func.count(Invoice.id))).scalar_one()
        total_customers = self.db.execute(select(func.count(Customer.id))).scalar_one()

        # Summed in Python so every step stays a 2-place Decimal.
        total_revenue = money.ZERO
        for amount in self.db.execute(select(Invoice.total_amount)).scalars():
            total_revenue = money.add(total_revenue, amount)

        overdue_stmt = select(Invoice.total_amount).where(
            Invoice.due_date < self.clock.today(),
            Invoice.status.not_in(list(SETTLED_STATUSES)),
        )
        overdue_count = 0
        overdue_amount = money.ZERO
        for amount in self.db.execute(overdue_stmt).scalars():
            overdue_count += 1
            overdue_amount = money.add(overdue_amount, amount)

        by_status = {status.value: 0 for status in InvoiceStatus}
        rows = self.db.execute(select(Invoice.status, func.count(Invoice.id)).group_by(Invoice.status))
        for status, count in rows:
            by_status[InvoiceStatus(status).value] = count

        return InvoiceSummary(
            total_invoices=total_invoices,
            total_revenue=total_revenue,
            overdue_count=overdue_count,
            overdue_amount=overdue_amount,
            total_customers=total_customers,
            generated_at=self.clock.now(),
            invoices_by_status=by_status,
        )

    def all_invoices(self) -> list[Invoice]:
        stmt = select(Invoice).options(selectinload(Invoice.items)).order_by(Invoice.id)
        return list(self.db.execute(stmt).unique().scalars())
