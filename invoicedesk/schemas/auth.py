"""Auth schema module."""

from __future__ import annotations

from pydantic import Field

from invoicedesk.schemas.common import CamelModel
from invoicedesk.schemas.users import UserResponse


class LoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=180)
    password: str = Field(min_length=1, max_length=256)


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=180, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=256)
    roles: list[str] | None = None


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
