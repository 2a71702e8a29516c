"""
Trading-day arithmetic.

A trading day is any weekday. Holidays are not modeled; a holiday simply
shows up as a gap that the provider never fills.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

ONE_DAY = timedelta(days=1)
MS_PER_DAY = 86_400_000


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def prev_trading_day(d: date) -> date:
    """Return `d` if it is a weekday, otherwise the Friday before it."""
    while is_weekend(d):
        d -= ONE_DAY
    return d


def next_trading_day(d: date) -> date:
    """Return `d` if it is a weekday, otherwise the Monday after it."""
    while is_weekend(d):
        d += ONE_DAY
    return d


def business_days_between(a: date, b: date) -> int:
    """Count weekdays strictly between `a` and `b`. Zero when b <= a."""
    if b <= a:
        return 0
    count = 0
    cur = a + ONE_DAY
    while cur < b:
        if not is_weekend(cur):
            count += 1
        cur += ONE_DAY
    return count


# ------------------------------ UTC helpers ------------------------------- #

def utc_today(now: Optional[datetime] = None) -> date:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date()


def to_utc_date(ts_ms: int) -> date:
    return datetime.fromtimestamp(int(ts_ms) / 1000, tz=timezone.utc).date()


def day_start_ms(d: date) -> int:
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp() * 1000)


def day_end_ms(d: date) -> int:
    """Last millisecond of `d` in UTC."""
    return day_start_ms(d) + MS_PER_DAY - 1
