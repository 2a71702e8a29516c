"""
Shared pytest fixtures for the backfill test suite.

Provides an in-memory store, a fixed "today", a recording sleep and a
scripted provider so every test module can drive the engine without
touching the network or the wall clock.
"""

import json
from datetime import date, timedelta
from typing import Callable, List, Optional

import pytest

from candle_backfill.adapters.base import (
    Candle,
    DataProvider,
    ProviderConfig,
    ProviderResponse,
    Timespan,
)
from candle_backfill.store import SQLiteStore
from candle_backfill.trading_calendar import day_start_ms, is_weekend

# Wednesday. Every test window sits well before it unless a test says otherwise.
TODAY = date(2023, 2, 1)

HOUR_MS = 3_600_000


# ---------------------------------------------------------------------------
# Synthetic data helpers
# ---------------------------------------------------------------------------


def weekdays(start: date, end: date) -> List[date]:
    out = []
    cur = start
    while cur <= end:
        if not is_weekend(cur):
            out.append(cur)
        cur += timedelta(days=1)
    return out


def bar_timestamps(d: date, timespan: Timespan) -> List[int]:
    """Timestamps a provider would return for one trading day."""
    base = day_start_ms(d)
    if timespan is Timespan.DAY:
        return [base]
    # Two bars per day is enough to exercise intraday paths.
    return [base + 14 * HOUR_MS, base + 15 * HOUR_MS]


def make_candle(ts: int, close: float = 100.0) -> Candle:
    return Candle(timestamp=ts, open=close - 1, high=close + 1, low=close - 2, close=close, volume=1000.0)


def seed(store: SQLiteStore, symbol: str, days: List[date], timespan: Timespan = Timespan.DAY,
         multiplier: int = 1) -> None:
    rows = [make_candle(ts) for d in days for ts in bar_timestamps(d, timespan)]
    store.upsert_batch(symbol, timespan, multiplier, rows)


def envelope(results: list, status: str = "OK", error: Optional[str] = None) -> str:
    body = {"status": status, "results": results}
    if error is not None:
        body["error"] = error
    return json.dumps(body)


def bars_response(timespan: Timespan, from_date: date, to_date: date) -> ProviderResponse:
    results = [
        {"t": ts, "o": 99.0, "h": 101.0, "l": 98.0, "c": 100.0, "v": 1500}
        for d in weekdays(from_date, to_date)
        for ts in bar_timestamps(d, timespan)
    ]
    return ProviderResponse(200, envelope(results))


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


Responder = Callable[[str, int, Timespan, date, date], ProviderResponse]


def full_data(symbol, multiplier, timespan, from_date, to_date) -> ProviderResponse:
    return bars_response(timespan, from_date, to_date)


class FakeProvider(DataProvider):
    """Records every fetch and answers through a responder callable."""

    name = "FAKE"

    def __init__(self, responder: Responder = full_data):
        super().__init__(ProviderConfig(api_key="test-key", base_url="http://fake"))
        self.responder = responder
        self.calls = []

    def build_url(self, symbol, multiplier, timespan, from_date, to_date) -> str:
        return f"{self.base_url}/candles"

    def build_params(self, symbol, multiplier, timespan, from_date, to_date) -> dict:
        return {}

    def fetch(self, symbol, multiplier, timespan, from_date, to_date) -> ProviderResponse:
        self.calls.append((symbol, multiplier, timespan, from_date, to_date))
        return self.responder(symbol, multiplier, timespan, from_date, to_date)


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store():
    s = SQLiteStore(":memory:")
    yield s
    s.close()


@pytest.fixture()
def today_fn():
    return lambda: TODAY


@pytest.fixture()
def sleeper():
    return RecordingSleep()


@pytest.fixture()
def provider():
    return FakeProvider()
