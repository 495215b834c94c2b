"""Report endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from invoicedesk.api.invoices import invoice_response
from invoicedesk.core.clock import Clock
from invoicedesk.core.dependencies import get_clock, get_report_service
from invoicedesk.schemas.invoices import InvoiceResponse
from invoicedesk.schemas.reports import OverdueSummary, SummaryResponse
from invoicedesk.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/summary", response_model=SummaryResponse)
def summary(reports: ReportService = Depends(get_report_service)) -> SummaryResponse:
    result = reports.summary()
    return SummaryResponse(
        total_invoices=result.total_invoices,
        total_revenue=result.total_revenue,
        overdue_invoices=OverdueSummary(count=result.overdue_count, total_amount=result.overdue_amount),
        invoices_by_status=result.invoices_by_status,
        total_customers=result.total_customers,
        generated_at=result.generated_at,
    )


@router.get("/all-invoices", response_model=list[InvoiceResponse])
def all_invoices(
    reports: ReportService = Depends(get_report_service),
    clock: Clock = Depends(get_clock),
) -> list[InvoiceResponse]:
    today = clock.today()
    return [invoice_response(invoice, today) for invoice in reports.all_invoices()]
