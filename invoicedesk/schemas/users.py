"""User request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from invoicedesk.schemas.common import CamelModel


class UserCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=180, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=256)
    roles: list[str] | None = None


class UserResponse(CamelModel):
    id: int
    email: str
    name: str
    roles: list[str]
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None = None
