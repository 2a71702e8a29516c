"""
backfill.py

Bring a stored candle series up to date with a remote provider for a
requested date window. Safe to run repeatedly; it only fetches what the
store is missing and upserts, so re-runs never duplicate rows.

Each pass:
    - asks the resolver for the next missing sub-range (or "covered"),
    - splits it into calendar-day chunks sized per timespan,
    - fetches every non-empty chunk once, retrying 429s with backoff,
    - upserts whatever rows came back in one batch per chunk.

The pass budget is finite. Residual holes after the last pass are reported
through `BackfillResult.converged`, not raised.
"""

from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from .adapters import get_provider
from .adapters.base import DataProvider, Timespan
from .config import BackfillConfig, load_provider_config
from .errors import ProviderError, ProviderUnavailable
from .logs import (
    c_desc,
    c_rows,
    c_type,
    c_var,
    fmt_range,
    log_error,
    log_info,
    log_success,
    log_update,
    log_warn,
)
from .ranges import DateRange, Missing, Resolution
from .resolver import RangeResolver
from .retry import BackoffPolicy
from .store import SQLiteStore, TimeSeriesStore


class ChunkStatus(enum.Enum):
    OK = "ok"
    DEGRADED = "degraded"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class ChunkResult:
    status: ChunkStatus
    rows: int
    requests: int


@dataclass
class BackfillResult:
    rows_inserted: int = 0
    passes: int = 0
    requests: int = 0
    converged: bool = False
    cancelled: bool = False
    degraded_chunks: int = 0
    abandoned_chunks: int = 0


class Backfiller:
    """
    Drives the resolver -> chunk -> fetch -> upsert loop for one store and provider.

    `sleep` is used for both backoff and the politeness delay; pass a no-op
    in tests.
    """

    def __init__(
        self,
        store: TimeSeriesStore,
        provider: DataProvider,
        config: Optional[BackfillConfig] = None,
        *,
        backoff: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        today_fn: Optional[Callable[[], date]] = None,
        verbose: bool = False,
    ):
        self.store = store
        self.provider = provider
        self.config = config or BackfillConfig()
        self.sleep = sleep
        self.backoff = backoff or BackoffPolicy.from_config(self.config.rate_limit, sleep=sleep)
        self.resolver = RangeResolver(store, today_fn=today_fn)
        self.verbose = verbose

    def _info(self, message: str) -> None:
        if self.verbose:
            log_info(message)

    def ensure_range(self, symbol: str, requested: DateRange) -> Resolution:
        return self.resolver.ensure_range(symbol, requested)

    def backfill_range(
        self,
        symbol: str,
        requested: DateRange,
        cancel: Optional[threading.Event] = None,
    ) -> BackfillResult:
        """
        Fetch and store everything missing from `requested`, up to max_passes.

        Raises ProviderError on a fatal provider status; store errors
        propagate unchanged.
        """
        result = BackfillResult()
        target = f"{c_type(symbol)}/{c_var(requested.multiplier)}{c_type(requested.timespan.value)}"
        self._info(f"Backfilling {target} {fmt_range(requested.start, requested.end)}")

        for pass_no in range(1, self.config.max_passes + 1):
            if cancel is not None and cancel.is_set():
                log_warn(f"Backfill of {target} cancelled before pass {c_var(pass_no)}")
                result.cancelled = True
                return result

            resolution = self.resolver.ensure_range(symbol, requested)
            if not isinstance(resolution, Missing):
                result.converged = True
                break

            result.passes = pass_no
            missing = resolution.range
            self._info(f"Pass {c_var(pass_no)}/{c_var(self.config.max_passes)}: "
                       f"missing {fmt_range(missing.start, missing.end)}")
            self._run_pass(symbol, missing, result, cancel)
            if result.cancelled:
                return result
        else:
            result.converged = not self.resolver.ensure_range(symbol, requested)
            if not result.converged:
                log_warn(f"Pass budget ({c_var(self.config.max_passes)}) exhausted for {target}; "
                         f"window is only partially covered")

        if result.abandoned_chunks or result.degraded_chunks:
            log_warn(f"{target}: {c_var(result.abandoned_chunks)} chunks abandoned, "
                     f"{c_var(result.degraded_chunks)} degraded")
        if self.verbose:
            log_success(f"{target}: {c_rows(result.rows_inserted)} rows in "
                        f"{c_var(result.passes)} passes ({c_var(result.requests)} requests)")
        return result

    def _run_pass(
        self,
        symbol: str,
        missing: DateRange,
        result: BackfillResult,
        cancel: Optional[threading.Event],
    ) -> None:
        max_days = self.config.chunk_days_for(missing.timespan)
        for chunk in missing.chunks(max_days):
            if cancel is not None and cancel.is_set():
                log_warn("Backfill cancelled mid-pass")
                result.cancelled = True
                return

            window = chunk.to_trading_days()
            if window.is_empty:
                self._info(f"Skipping non-trading chunk {fmt_range(chunk.start, chunk.end)}")
                continue

            outcome = self._fetch_chunk(symbol, window)
            result.requests += outcome.requests
            result.rows_inserted += outcome.rows
            if outcome.status is ChunkStatus.DEGRADED:
                result.degraded_chunks += 1
            elif outcome.status is ChunkStatus.ABANDONED:
                result.abandoned_chunks += 1
            self.sleep(self.config.politeness_delay_seconds)

    def _fetch_chunk(self, symbol: str, window: DateRange) -> ChunkResult:
        attempt = 0
        while True:
            attempt += 1
            self._info(f"GET {c_var(self.provider.name)} {symbol} {fmt_range(window.start, window.end)}")
            try:
                resp = self.provider.fetch(
                    symbol, window.multiplier, window.timespan, window.start, window.end
                )
            except ProviderUnavailable as e:
                reason = f"Network error: {c_desc(e)}"
            else:
                if 200 <= resp.status_code < 300:
                    return self._store_response(symbol, window, resp.body, attempt)
                if not self.backoff.is_retryable(resp.status_code):
                    log_error(f"HTTP {c_var(resp.status_code)}: {c_desc(resp.body)}")
                    raise ProviderError(resp.status_code, resp.body)
                reason = f"Rate limit ({resp.status_code})"

            if not self.backoff.should_retry(attempt):
                log_warn(f"{reason}. Giving up on {fmt_range(window.start, window.end)} "
                         f"after {c_var(attempt)} attempts")
                return ChunkResult(ChunkStatus.ABANDONED, 0, attempt)

            delay = self.backoff.delay(attempt)
            log_warn(f"{reason}. Retrying in {c_var(f'{delay:g}s')}...")
            self.backoff.sleep(delay)

    def _store_response(self, symbol: str, window: DateRange, body: str, attempts: int) -> ChunkResult:
        envelope = self.provider.parse_response(body)
        if not envelope.ok:
            detail = f": {c_desc(envelope.error)}" if envelope.error else ""
            log_warn(f"Provider status {c_var(envelope.status)} for "
                     f"{fmt_range(window.start, window.end)}{detail}")

        rows = 0
        if envelope.candles:
            rows = self.store.upsert_batch(symbol, window.timespan, window.multiplier, envelope.candles)
            if self.verbose:
                log_update(f"Upserted {c_rows(rows)} candles for {fmt_range(window.start, window.end)}")
        else:
            self._info(f"No candles for {fmt_range(window.start, window.end)}")

        status = ChunkStatus.OK if envelope.ok else ChunkStatus.DEGRADED
        return ChunkResult(status, rows, attempts)


# ------------------------------ Convenience ------------------------------- #

def backfill_symbol(
    db_file: str,
    symbol: str,
    start: date,
    end: date,
    timespan: "str | Timespan" = Timespan.DAY,
    multiplier: int = 1,
    *,
    provider: str = "POLYGON",
    config: Optional[BackfillConfig] = None,
    verbose: bool = False,
) -> BackfillResult:
    """
    One-shot backfill against a SQLite file, with credentials from the environment.

    Raises ConfigError when no API key is configured and ProviderError on a
    fatal provider response.
    """
    requested = DateRange(Timespan.parse(timespan), int(multiplier), start, end)
    source = get_provider(provider, load_provider_config())
    with SQLiteStore(db_file) as store:
        backfiller = Backfiller(store, source, config, verbose=verbose)
        return backfiller.backfill_range(symbol, requested)
