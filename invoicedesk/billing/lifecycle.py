"""Invoice status lifecycle.

    draft -> sent -> paid
    sent -> overdue -> paid
    draft | sent | overdue -> cancelled

``paid`` and ``cancelled`` are terminal. Whether an invoice is overdue is
decided by :func:`is_overdue` (due date passed, not settled); the explicit
``overdue`` status may only be set while that condition holds.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from invoicedesk.core.exceptions import InvalidTransitionError, ValidationError
from invoicedesk.models.enums import InvoiceStatus

SETTLED_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})


class StateMachine:
    """Transition table with explicit assertion helpers."""

    def __init__(self, transitions: dict[InvoiceStatus, set[InvoiceStatus]]) -> None:
        self._transitions = transitions

    def can_transition(self, current: InvoiceStatus, target: InvoiceStatus) -> bool:
        return current == target or target in self._transitions.get(current, set())

    def assert_transition(self, current: InvoiceStatus, target: InvoiceStatus) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {current.value} -> {target.value}")

    def is_terminal(self, status: InvoiceStatus) -> bool:
        return not self._transitions.get(status)


INVOICE_LIFECYCLE = StateMachine(
    {
        InvoiceStatus.DRAFT: {InvoiceStatus.SENT, InvoiceStatus.CANCELLED},
        InvoiceStatus.SENT: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED},
        InvoiceStatus.OVERDUE: {InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
        InvoiceStatus.PAID: set(),
        InvoiceStatus.CANCELLED: set(),
    }
)


def parse_status(value: str | InvoiceStatus) -> InvoiceStatus:
    try:
        return InvoiceStatus(value)
    except ValueError as exc:
        allowed = ", ".join(status.value for status in InvoiceStatus)
        raise ValidationError(f"Invalid status {value!r}; expected one of: {allowed}.") from exc


def is_past_due(due_date: date, status: InvoiceStatus, today: date) -> bool:
    return due_date < today and status not in SETTLED_STATUSES


def is_overdue(invoice: Any, today: date) -> bool:
    """Derived overdue condition, the single source of truth for listings."""
    return is_past_due(invoice.due_date, InvoiceStatus(invoice.status), today)


def initial_status(requested: str | InvoiceStatus | None) -> InvoiceStatus:
    """Status for a new invoice: draft, or one step away from draft."""
    if requested is None:
        return InvoiceStatus.DRAFT
    target = parse_status(requested)
    INVOICE_LIFECYCLE.assert_transition(InvoiceStatus.DRAFT, target)
    return target


def check_transition(
    current: InvoiceStatus,
    target: str | InvoiceStatus,
    due_date: date,
    today: date,
) -> InvoiceStatus:
    """Validate ``current -> target`` for an invoice due on ``due_date``."""
    resolved = parse_status(target)
    INVOICE_LIFECYCLE.assert_transition(InvoiceStatus(current), resolved)
    check_overdue_consistency(resolved, due_date, today)
    return resolved


def check_overdue_consistency(status: InvoiceStatus, due_date: date, today: date) -> None:
    if status == InvoiceStatus.OVERDUE and not due_date < today:
        raise InvalidTransitionError("An invoice can only be overdue once its due date has passed.")
