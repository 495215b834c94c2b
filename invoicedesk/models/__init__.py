"""SQLAlchemy model package for the invoicing schema."""

from invoicedesk.models.base import Base
from invoicedesk.models.customer import Customer
from invoicedesk.models.enums import InvoiceStatus
from invoicedesk.models.invoice import Invoice, InvoiceItem
from invoicedesk.models.user import User

__all__ = [
    "Base",
    "Customer",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "User",
]
