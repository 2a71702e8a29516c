"""
Date ranges and resolver outcomes.

`ensure_range` and `find_interior_hole` answer with either `COVERED` or a
`Missing` wrapping the single range to fetch next, never `None`.
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterator, Union

from .adapters.base import Timespan
from .trading_calendar import next_trading_day, prev_trading_day


@dataclass(frozen=True)
class DateRange:
    """Inclusive UTC calendar-date window for one series granularity."""
    timespan: Timespan
    multiplier: int
    start: date
    end: date

    def __post_init__(self):
        if int(self.multiplier) < 1:
            raise ValueError(f"multiplier must be a positive integer, got {self.multiplier}")

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    @property
    def days(self) -> int:
        return 0 if self.is_empty else (self.end - self.start).days + 1

    def with_dates(self, start: date, end: date) -> "DateRange":
        return replace(self, start=start, end=end)

    def clip(self, outer: "DateRange") -> "DateRange":
        return self.with_dates(max(self.start, outer.start), min(self.end, outer.end))

    def to_trading_days(self) -> "DateRange":
        """Nudge `start` forward and `end` backward off weekends. May become empty."""
        return self.with_dates(next_trading_day(self.start), prev_trading_day(self.end))

    def chunks(self, max_days: int) -> Iterator["DateRange"]:
        """Split into consecutive calendar-day windows of at most `max_days`."""
        if max_days < 1:
            raise ValueError(f"max_days must be >= 1, got {max_days}")
        cursor = self.start
        while cursor <= self.end:
            chunk_end = min(cursor + timedelta(days=max_days - 1), self.end)
            yield self.with_dates(cursor, chunk_end)
            cursor = chunk_end + timedelta(days=1)

    def __str__(self) -> str:
        return f"{self.multiplier}/{self.timespan.value} {self.start.isoformat()}..{self.end.isoformat()}"


class _Covered:
    """Singleton: nothing left to fetch."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "COVERED"


COVERED = _Covered()


@dataclass(frozen=True)
class Missing:
    """The next sub-range that still needs a fetch."""
    range: DateRange


Resolution = Union[_Covered, Missing]
