"""Invoice endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from invoicedesk.billing.lifecycle import is_overdue
from invoicedesk.core.clock import Clock
from invoicedesk.core.config import Config
from invoicedesk.core.dependencies import get_clock, get_invoice_service, get_settings
from invoicedesk.models import Invoice
from invoicedesk.schemas.invoices import InvoiceCreateRequest, InvoiceResponse, InvoiceUpdateRequest
from invoicedesk.services.invoice_pdf import pdf_filename, render_invoice_pdf
from invoicedesk.services.invoice_service import InvoiceService, ItemInput

router = APIRouter(prefix="/invoices", tags=["invoices"])


def invoice_response(invoice: Invoice, today: date) -> InvoiceResponse:
    response = InvoiceResponse.model_validate(invoice)
    response.is_overdue = is_overdue(invoice, today)
    return response


def _items(payload_items) -> list[ItemInput]:
    return [
        ItemInput(description=item.description, quantity=item.quantity, unit_price=item.unit_price, unit=item.unit)
        for item in payload_items
    ]


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreateRequest,
    invoices: InvoiceService = Depends(get_invoice_service),
    clock: Clock = Depends(get_clock),
) -> InvoiceResponse:
    invoice = invoices.create_invoice(
        issue_date=payload.issue_date,
        due_date=payload.due_date,
        items=_items(payload.items),
        customer_id=payload.customer_id,
        customer_email=payload.customer_email,
        status=payload.status,
        currency=payload.currency,
        notes=payload.notes,
        tax_rate=payload.tax_rate,
        discount_amount=payload.discount_amount,
    )
    return invoice_response(invoice, clock.today())


@router.get("", response_model=list[InvoiceResponse])
def list_invoices(
    status_filter: str | None = Query(default=None, alias="status"),
    customer_id: int | None = Query(default=None, alias="customerId"),
    invoices: InvoiceService = Depends(get_invoice_service),
    clock: Clock = Depends(get_clock),
) -> list[InvoiceResponse]:
    today = clock.today()
    return [invoice_response(invoice, today) for invoice in invoices.list_invoices(status_filter, customer_id)]


@router.get("/overdue", response_model=list[InvoiceResponse])
def list_overdue_invoices(
    invoices: InvoiceService = Depends(get_invoice_service),
    clock: Clock = Depends(get_clock),
) -> list[InvoiceResponse]:
    today = clock.today()
    return [invoice_response(invoice, today) for invoice in invoices.list_overdue()]


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    invoices: InvoiceService = Depends(get_invoice_service),
    clock: Clock = Depends(get_clock),
) -> InvoiceResponse:
    return invoice_response(invoices.require_invoice(invoice_id), clock.today())


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdateRequest,
    invoices: InvoiceService = Depends(get_invoice_service),
    clock: Clock = Depends(get_clock),
) -> InvoiceResponse:
    changes = payload.model_dump(exclude_unset=True, exclude={"items"})
    if payload.items is not None:
        changes["items"] = _items(payload.items)
    invoice = invoices.update_invoice(invoice_id, changes)
    return invoice_response(invoice, clock.today())


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(invoice_id: int, invoices: InvoiceService = Depends(get_invoice_service)) -> Response:
    invoices.delete_invoice(invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{invoice_id}/pdf")
def download_invoice_pdf(
    invoice_id: int,
    invoices: InvoiceService = Depends(get_invoice_service),
    settings: Config = Depends(get_settings),
) -> Response:
    invoice = invoices.require_invoice(invoice_id)
    return Response(
        content=render_invoice_pdf(invoice, settings),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(invoice)}"'},
    )
