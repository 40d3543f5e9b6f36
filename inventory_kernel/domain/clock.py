"""
Injectable time source.

Catalog, ledger and import code stamp ``created_at``, ``acknowledged_at``
and return events through the clock they were constructed with, so tests
can pin and step timestamps.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

CLOCK_EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of timezone-aware UTC timestamps."""

    @abstractmethod
    def now(self) -> datetime: ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Frozen clock for tests.

    Starts at ``start`` (default 2024-01-01 12:00 UTC) and only moves when
    ``advance()`` or ``set_time()`` is called.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or CLOCK_EPOCH

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> datetime:
        self._current += timedelta(seconds=seconds)
        return self._current
