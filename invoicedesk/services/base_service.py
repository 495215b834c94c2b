"""Shared service base with robust session lifecycle behavior."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from invoicedesk.core.clock import Clock, system_clock
from invoicedesk.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class BaseService:
    """Base class for services that operate on a SQLAlchemy session."""

    def __init__(self, db: Session, clock: Clock = system_clock) -> None:
        self.db = db
        self.clock = clock

    def commit(self) -> None:
        """Commit current transaction and rollback on failure.

        A lost or locked database surfaces as :class:`DatabaseError`; integrity
        errors propagate unchanged so callers can inspect the constraint.
        """
        try:
            self.db.commit()
        except OperationalError as exc:
            self.db.rollback()
            logger.error("db.commit.failed", extra={"event": "db.commit.failed", "error": type(exc.orig).__name__})
            raise DatabaseError("The database is unavailable; please retry.") from exc
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()


def violates_unique(exc: IntegrityError, column: str) -> bool:
    """True when ``exc`` is a unique violation mentioning ``column``.

    SQLite reports ``UNIQUE constraint failed: table.column``; PostgreSQL names
    the constraint, which embeds the column name here by convention.
    """
    message = str(exc.orig).lower()
    return ("unique" in message or "duplicate" in message) and column.lower() in message
