"""Canonical enum values for the invoicing schema."""

from __future__ import annotations

import enum


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


DEFAULT_USER_ROLES = ["user"]
