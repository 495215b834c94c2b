"""Dependency providers for API handlers."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from invoicedesk.auth.gate import Identity
from invoicedesk.auth.jwt import TokenService
from invoicedesk.core.clock import Clock
from invoicedesk.core.config import Config
from invoicedesk.core.exceptions import AuthenticationError
from invoicedesk.database.db import get_db
from invoicedesk.services.customer_service import CustomerService
from invoicedesk.services.invoice_service import InvoiceService
from invoicedesk.services.report_service import ReportService
from invoicedesk.services.user_service import UserService


def get_settings(request: Request) -> Config:
    """Return the configuration the application was built with."""
    return request.app.state.config


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_db_session() -> Generator[Session, None, None]:
    """Yield SQLAlchemy session for dependency injection."""
    yield from get_db()


def get_current_identity(request: Request) -> Identity:
    """Identity attached by the auth gate middleware."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise AuthenticationError("Authentication required.", reason="authentication_required")
    return identity


def get_customer_service(
    db: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> CustomerService:
    return CustomerService(db, clock=clock)


def get_user_service(
    db: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
    settings: Config = Depends(get_settings),
) -> UserService:
    return UserService(db, clock=clock, hash_iterations=settings.PASSWORD_HASH_ITERATIONS)


def get_invoice_service(
    db: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
    settings: Config = Depends(get_settings),
) -> InvoiceService:
    return InvoiceService(
        db,
        clock=clock,
        max_retries=settings.INVOICE_NUMBER_MAX_RETRIES,
        default_currency=settings.DEFAULT_CURRENCY,
    )


def get_report_service(
    db: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> ReportService:
    return ReportService(db, clock=clock)
