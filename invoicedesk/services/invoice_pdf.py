"""
Invoice PDF rendering.

Lays out a single stored invoice with ReportLab: company header, bill-to
block, line items and the stored totals. Amounts are never recomputed here.
"""

from __future__ import annotations

import logging
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from invoicedesk.billing.money import format_money
from invoicedesk.core.config import Config
from invoicedesk.models import Invoice

logger = logging.getLogger(__name__)

HEADER_COLOR = colors.HexColor("#2C3E50")
ACCENT_COLOR = colors.HexColor("#3498DB")
STRIPE_COLOR = colors.HexColor("#F8F9FA")


def pdf_filename(invoice: Invoice) -> str:
    return f"invoice_{invoice.invoice_number}.pdf"


def _text(value: object) -> str:
    return escape("" if value is None else str(value))


def _totals_rows(invoice: Invoice) -> list[list[str]]:
    currency = invoice.currency
    rows = [["", "", "Subtotal:", format_money(invoice.subtotal, currency)]]
    if invoice.tax_amount is not None:
        rows.append(["", "", f"Tax ({invoice.tax_rate}%):", format_money(invoice.tax_amount, currency)])
    if invoice.discount_amount is not None:
        rows.append(["", "", "Discount:", f"-{format_money(invoice.discount_amount, currency)}"])
    rows.append(["", "", "Total:", format_money(invoice.total_amount, currency)])
    return rows


def render_invoice_pdf(invoice: Invoice, config: Config) -> bytes:
    """Render ``invoice`` and return the PDF document bytes."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=inch,
        leftMargin=inch,
        topMargin=inch,
        bottomMargin=inch,
        title=f"Invoice {invoice.invoice_number}",
    )

    elements = []
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "CompanyTitle",
        parent=styles["Heading1"],
        fontSize=24,
        textColor=HEADER_COLOR,
        spaceAfter=30,
        alignment=TA_CENTER,
    )

    elements.append(Paragraph(_text(config.COMPANY_NAME), title_style))
    elements.append(
        Paragraph(f"{_text(config.COMPANY_ADDRESS)}<br/>{_text(config.COMPANY_EMAIL)}", styles["Normal"])
    )
    elements.append(Spacer(1, 0.3 * inch))

    elements.append(Paragraph(f"INVOICE {_text(invoice.invoice_number)}", styles["Heading1"]))
    elements.append(Spacer(1, 0.2 * inch))

    customer = invoice.customer
    bill_to = Table(
        [
            ["Bill To:", "", "Issue Date:", invoice.issue_date.isoformat()],
            [customer.name, "", "Due Date:", invoice.due_date.isoformat()],
            [customer.email, "", "Status:", invoice.status.value.capitalize()],
            ["", "", "Amount Due:", format_money(invoice.total_amount, invoice.currency)],
        ],
        colWidths=[2.5 * inch, 0.3 * inch, 1.3 * inch, 1.7 * inch],
    )
    bill_to.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, 0), "Helvetica-Bold"),
                ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    elements.append(bill_to)
    elements.append(Spacer(1, 0.4 * inch))

    rows = [["Description", "Quantity", "Unit Price", "Total"]]
    for item in invoice.items:
        quantity = f"{item.quantity} {item.unit}" if item.unit else str(item.quantity)
        rows.append(
            [
                Paragraph(_text(item.description), styles["Normal"]),
                quantity,
                format_money(item.unit_price),
                format_money(item.line_total),
            ]
        )
    totals = _totals_rows(invoice)
    rows.extend(totals)
    first_total = -len(totals)

    items_table = Table(rows, colWidths=[2.8 * inch, 0.9 * inch, 1.1 * inch, 1.2 * inch], repeatRows=1)
    items_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), ACCENT_COLOR),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 11),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 10),
                ("FONTSIZE", (0, 1), (-1, -1), 10),
                ("ROWBACKGROUNDS", (0, 1), (-1, first_total - 1), [colors.white, STRIPE_COLOR]),
                ("GRID", (0, 0), (-1, first_total - 1), 0.5, colors.grey),
                ("FONTNAME", (2, first_total), (-1, -1), "Helvetica-Bold"),
                ("LINEABOVE", (2, first_total), (-1, first_total), 1, HEADER_COLOR),
                ("LINEABOVE", (2, -1), (-1, -1), 2, HEADER_COLOR),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    elements.append(items_table)

    if invoice.notes:
        elements.append(Spacer(1, 0.3 * inch))
        elements.append(Paragraph("<b>Notes:</b>", styles["Heading2"]))
        elements.append(Paragraph(_text(invoice.notes), styles["Normal"]))

    elements.append(Spacer(1, 0.5 * inch))
    footer_style = ParagraphStyle(
        "Footer",
        parent=styles["Normal"],
        fontSize=9,
        textColor=colors.grey,
        alignment=TA_CENTER,
    )
    elements.append(
        Paragraph(
            f"Thank you for your business!<br/>Questions? Contact us at {_text(config.COMPANY_EMAIL)}",
            footer_style,
        )
    )

    doc.build(elements)
    logger.info(
        "invoice.pdf.rendered",
        extra={"event": "invoice.pdf.rendered", "invoice_id": invoice.id, "items": len(invoice.items)},
    )
    return buffer.getvalue()
