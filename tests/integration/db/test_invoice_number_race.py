from __future__ import annotations

import threading
from datetime import date

import pytest
from sqlalchemy import func, select

from invoicedesk.core.exceptions import ConflictError
from invoicedesk.models import Invoice
from invoicedesk.services.invoice_service import InvoiceService

ISSUE = date(2026, 3, 1)
DUE = date(2026, 3, 31)


def _invoice_count(session) -> int:
    return session.execute(select(func.count(Invoice.id))).scalar_one()


def test_writer_that_lost_the_race_retries_with_next_number(session_factory, clock, customer, monkeypatch):
    """Another session commits INV-0001 between our max read and our insert."""
    ours = session_factory()
    theirs = session_factory()
    try:
        service = InvoiceService(ours, clock=clock)
        competitor = InvoiceService(theirs, clock=clock)
        real_current_max = service.allocator.current_max
        calls = []

        def interleaved_current_max():
            value = real_current_max()
            calls.append(value)
            if len(calls) == 1:
                competitor.create_invoice(customer_id=customer.id, issue_date=ISSUE, due_date=DUE)
            return value

        monkeypatch.setattr(service.allocator, "current_max", interleaved_current_max)

        invoice = service.create_invoice(customer_id=customer.id, issue_date=ISSUE, due_date=DUE)

        assert calls == [None, "INV-0001"]
        assert invoice.invoice_number == "INV-0002"
        assert _invoice_count(ours) == 2
    finally:
        ours.close()
        theirs.close()


def test_retries_are_bounded(session, clock, customer, monkeypatch):
    service = InvoiceService(session, clock=clock, max_retries=3)
    service.create_invoice(customer_id=customer.id, issue_date=ISSUE, due_date=DUE)

    calls = []

    def always_stale():
        calls.append(None)
        return None

    monkeypatch.setattr(service.allocator, "current_max", always_stale)

    with pytest.raises(ConflictError):
        service.create_invoice(customer_id=customer.id, issue_date=ISSUE, due_date=DUE)
    assert len(calls) == 3
    assert _invoice_count(session) == 1


def test_concurrent_creates_never_share_a_number(session_factory, clock, customer):
    workers = 4
    per_worker = 5
    customer_id = customer.id
    barrier = threading.Barrier(workers)
    lock = threading.Lock()
    numbers: list[str] = []
    errors: list[Exception] = []

    def create_batch():
        db = session_factory()
        try:
            # Every lost race means another insert succeeded, so this bound is never hit.
            service = InvoiceService(db, clock=clock, max_retries=workers * per_worker)
            barrier.wait()
            for _ in range(per_worker):
                invoice = service.create_invoice(customer_id=customer_id, issue_date=ISSUE, due_date=DUE)
                with lock:
                    numbers.append(invoice.invoice_number)
        except Exception as exc:
            with lock:
                errors.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=create_batch) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=120)

    assert errors == []
    assert len(numbers) == workers * per_worker
    assert sorted(numbers) == [f"INV-{n:04d}" for n in range(1, workers * per_worker + 1)]
