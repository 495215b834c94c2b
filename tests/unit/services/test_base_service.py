from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from invoicedesk.core.exceptions import DatabaseError
from invoicedesk.services.base_service import BaseService, violates_unique


class _FailingSession:
    def __init__(self, error: Exception) -> None:
        self.error = error
        self.rolled_back = False

    def commit(self) -> None:
        raise self.error

    def rollback(self) -> None:
        self.rolled_back = True


def test_unavailable_database_becomes_database_error():
    session = _FailingSession(OperationalError("COMMIT", {}, Exception("database is locked")))
    with pytest.raises(DatabaseError):
        BaseService(session).commit()
    assert session.rolled_back


def test_integrity_errors_propagate_after_rollback():
    error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: invoices.invoice_number"))
    session = _FailingSession(error)
    with pytest.raises(IntegrityError) as exc:
        BaseService(session).commit()
    assert session.rolled_back
    assert violates_unique(exc.value, "invoice_number")
    assert not violates_unique(exc.value, "email")
