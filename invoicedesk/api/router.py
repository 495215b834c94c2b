"""Root API router."""

from __future__ import annotations

from fastapi import APIRouter

from invoicedesk.api import auth, customers, health, invoices, reports, users


def get_api_router(prefix: str = "/api") -> APIRouter:
    api_router = APIRouter(prefix=prefix)
    api_router.include_router(health.router)
    api_router.include_router(auth.router)
    api_router.include_router(users.router)
    api_router.include_router(customers.router)
    api_router.include_router(invoices.router)
    api_router.include_router(reports.router)
    return api_router
