"""
Coverage resolution.

Given a requested window, `RangeResolver.ensure_range` picks the single
most urgent sub-range still missing from the store, in this order:

    cold start  -> whole clamped window
    forward fill -> newer than the latest stored candle
    backfill    -> older than the earliest stored candle
    interior hole -> first gap of trading days between stored candles

Holes are computed on UTC calendar dates, even for intraday series.
"""

from datetime import date, timedelta
from typing import Callable, Optional

from .adapters.base import Timespan
from .config import FALLBACK_WINDOW_DAYS
from .ranges import COVERED, DateRange, Missing, Resolution
from .store import TimeSeriesStore
from .trading_calendar import (
    ONE_DAY,
    business_days_between,
    day_end_ms,
    day_start_ms,
    next_trading_day,
    prev_trading_day,
    to_utc_date,
    utc_today,
)


class RangeResolver:

    def __init__(self, store: TimeSeriesStore, today_fn: Optional[Callable[[], date]] = None):
        self.store = store
        self.today_fn = today_fn or utc_today

    def clamp(self, requested: DateRange) -> DateRange:
        """
        Clamp a requested window to data that can exist.

        DAY: never past yesterday (today's bar is incomplete), end on a
        trading day. HOUR/MINUTE: both ends on trading days; a window that
        collapses falls back to the last FALLBACK_WINDOW_DAYS calendar days.
        """
        today = self.today_fn()
        start, end = requested.start, min(requested.end, today)

        if requested.timespan is Timespan.DAY:
            end = prev_trading_day(min(end, today - ONE_DAY))
            return requested.with_dates(start, end)

        end = prev_trading_day(end)
        start = next_trading_day(start)
        if start > end:
            # Fallback: last FALLBACK_WINDOW_DAYS calendar days.
            start = next_trading_day(today - timedelta(days=FALLBACK_WINDOW_DAYS))
            end = prev_trading_day(today)
        return requested.with_dates(start, end)

    def ensure_range(self, symbol: str, requested: DateRange) -> Resolution:
        window = self.clamp(requested)
        if window.is_empty:
            return COVERED

        span, mult = window.timespan, window.multiplier
        latest = self.store.latest_timestamp(symbol, span, mult)
        earliest = self.store.earliest_timestamp(symbol, span, mult)
        if latest is None or earliest is None:
            return Missing(window)

        # Edges are compared on trading days; a weekend-only edge is not missing.
        after_latest = next_trading_day(to_utc_date(latest) + ONE_DAY)
        if after_latest <= prev_trading_day(window.end):
            return Missing(window.with_dates(max(window.start, after_latest), window.end))

        before_earliest = prev_trading_day(to_utc_date(earliest) - ONE_DAY)
        if before_earliest >= next_trading_day(window.start):
            return Missing(window.with_dates(window.start, min(window.end, before_earliest)))

        return self.find_interior_hole(symbol, window)

    def find_interior_hole(self, symbol: str, window: DateRange) -> Resolution:
        """Return the first run of missing trading days inside `window`."""
        if window.is_empty:
            return COVERED

        stamps = self.store.list_timestamps(
            symbol, window.timespan, window.multiplier,
            day_start_ms(window.start), day_end_ms(window.end),
        )
        if not stamps:
            return Missing(window)

        prev = to_utc_date(stamps[0])
        for ts in stamps[1:]:
            curr = to_utc_date(ts)
            if business_days_between(prev, curr) >= 1:
                hole = window.with_dates(
                    next_trading_day(prev + ONE_DAY),
                    prev_trading_day(curr - ONE_DAY),
                ).clip(window)
                if not hole.is_empty:
                    return Missing(hole)
            prev = curr
        return COVERED
