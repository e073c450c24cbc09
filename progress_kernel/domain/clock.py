"""
Clock -- injectable time source.

Responsibility:
    Lets workflow code ask for "today" without calling ``date.today()``
    directly, so that lock-date comparisons and default form dates can be
    pinned in tests.

Architecture position:
    Kernel > Domain -- SystemClock is the only place that reads wall time.

Failure modes:
    None.  DeterministicClock never advances on its own.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services and workflows that compare against the current date
        receive a Clock through their constructor.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime`` in local time.
        - ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def now_utc(self) -> datetime:
        return self.now().astimezone(timezone.utc)

    def today(self) -> date:
        """Calendar date used for lock banners and form defaults."""
        return self.now().date()


class SystemClock(Clock):
    """Wall clock, in the machine's local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` is stable until ``advance()``, ``advance_days()`` or
          ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(2025, 11, 1, 9, 0, 0, tzinfo=timezone.utc)
        self._offset = timedelta(0)

    @classmethod
    def on(cls, day: date) -> "DeterministicClock":
        """Clock pinned to midday UTC on ``day``."""
        return cls(datetime(day.year, day.month, day.day, 12, 0, 0, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._fixed_time + self._offset

    def set_time(self, time: datetime) -> None:
        self._fixed_time = time
        self._offset = timedelta(0)

    def advance(self, seconds: int = 1) -> None:
        self._offset += timedelta(seconds=seconds)

    def advance_days(self, days: int = 1) -> None:
        self._offset += timedelta(days=days)
