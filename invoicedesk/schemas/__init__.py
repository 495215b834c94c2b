"""Pydantic schema package for API contracts."""

from invoicedesk.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from invoicedesk.schemas.common import CamelModel, ErrorEnvelope
from invoicedesk.schemas.customers import CustomerCreateRequest, CustomerResponse
from invoicedesk.schemas.invoices import (
    InvoiceCreateRequest,
    InvoiceItemRequest,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceUpdateRequest,
)
from invoicedesk.schemas.reports import OverdueSummary, SummaryResponse
from invoicedesk.schemas.users import UserCreateRequest, UserResponse

__all__ = [
    "CamelModel",
    "CustomerCreateRequest",
    "CustomerResponse",
    "ErrorEnvelope",
    "InvoiceCreateRequest",
    "InvoiceItemRequest",
    "InvoiceItemResponse",
    "InvoiceResponse",
    "InvoiceUpdateRequest",
    "LoginRequest",
    "OverdueSummary",
    "RegisterRequest",
    "SummaryResponse",
    "TokenResponse",
    "UserCreateRequest",
    "UserResponse",
]
