"""Customer request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from invoicedesk.schemas.common import CamelModel


class CustomerCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=180, pattern=r"^[^@\s]+@[^@\s]+$")


class CustomerResponse(CamelModel):
    id: int
    name: str
    email: str
    created_at: datetime
