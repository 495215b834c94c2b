"""Time source used for token validity and due-date comparisons."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


class Clock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock frozen at a given instant, advanced explicitly."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta: float) -> None:
        self._instant = self._instant + timedelta(**delta)


system_clock = Clock()
