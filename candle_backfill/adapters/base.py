"""
Base provider classes for market-data integrations.

Provides the abstract base class and dataclasses that normalize candle
data across REST providers. A provider only knows how to issue one
request and how to read the response envelope; retry and backoff policy
belong to the caller.
"""

import enum
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from ..errors import ProviderUnavailable

USER_AGENT = "CandleBackfill/1.0"
HEADERS = {"User-Agent": USER_AGENT}

# Envelope `t` values below this are epoch seconds, otherwise epoch ms.
SECONDS_CUTOFF = 100_000_000_000
RESULT_FIELDS = ("t", "o", "h", "l", "c", "v")


class Timespan(enum.Enum):
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"

    @classmethod
    def parse(cls, value: "str | Timespan") -> "Timespan":
        if isinstance(value, cls):
            return value
        key = (value or "").strip().lower()
        for span in cls:
            if span.value == key:
                return span
        raise ValueError(
            f"Unsupported timespan: {value!r}. "
            f"Supported: {[s.value for s in cls]}"
        )


@dataclass(frozen=True)
class Candle:
    """Normalized candle representation across all providers."""
    timestamp: int  # milliseconds since epoch
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration: attempt ceiling and attempt-scaled backoff."""
    max_attempts: int = 3
    initial_backoff_seconds: float = 1.0
    max_backoff_seconds: float = 60.0
    rate_limit_status_codes: tuple = (429,)


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for a provider. Credentials live here, nowhere else."""
    api_key: str
    base_url: str = ""
    timeout_seconds: int = 30


@dataclass(frozen=True)
class ProviderResponse:
    status_code: int
    body: str


@dataclass(frozen=True)
class Envelope:
    """Decoded response body: `{status, results?, error?}`."""
    status: str
    candles: List[Candle] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"


def results_to_candles(results: List[Any]) -> List[Candle]:
    """
    Map envelope `results` entries to Candle objects.

    Entries with a missing or non-numeric field are dropped. Order is kept
    as received and timestamps are not checked against the request window.
    """
    rows = [r for r in results if isinstance(r, dict)]
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=list(RESULT_FIELDS))
    df = df.apply(pd.to_numeric, errors="coerce").dropna()
    if df.empty:
        return []

    t = df["t"]
    df["t"] = t.where(t >= SECONDS_CUTOFF, t * 1000).astype("int64")

    return [
        Candle(
            timestamp=int(r.t),
            open=float(r.o),
            high=float(r.h),
            low=float(r.l),
            close=float(r.c),
            volume=float(r.v),
        )
        for r in df.itertuples(index=False)
    ]


class DataProvider(ABC):
    """
    Abstract base class for market-data providers.

    Each provider encapsulates provider-specific logic for:
    - API URL construction
    - Request parameter formatting
    - Symbol formatting
    """

    name: str = ""
    default_base_url: str = ""

    def __init__(self, config: ProviderConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return (self.config.base_url or self.default_base_url).rstrip("/")

    def format_symbol(self, symbol: str) -> str:
        return symbol.strip().upper()

    @abstractmethod
    def build_url(
        self,
        symbol: str,
        multiplier: int,
        timespan: Timespan,
        from_date: date,
        to_date: date,
    ) -> str:
        """Build the endpoint URL for one candle request."""
        pass

    @abstractmethod
    def build_params(
        self,
        symbol: str,
        multiplier: int,
        timespan: Timespan,
        from_date: date,
        to_date: date,
    ) -> Dict[str, Any]:
        """Build query parameters, including authentication."""
        pass

    def fetch(
        self,
        symbol: str,
        multiplier: int,
        timespan: Timespan,
        from_date: date,
        to_date: date,
    ) -> ProviderResponse:
        """
        Issue a single GET for `[from_date, to_date]`.

        Returns the raw status code and body. Raises ProviderUnavailable on
        transport errors (connection reset, timeout, DNS).
        """
        symbol = self.format_symbol(symbol)
        url = self.build_url(symbol, multiplier, timespan, from_date, to_date)
        params = self.build_params(symbol, multiplier, timespan, from_date, to_date)
        try:
            resp = self.session.get(
                url, params=params, headers=HEADERS, timeout=self.config.timeout_seconds
            )
        except requests.RequestException as e:
            raise ProviderUnavailable(f"{self.name}: {e}") from e
        return ProviderResponse(resp.status_code, resp.text)

    def parse_response(self, body: str) -> Envelope:
        """Decode a 2xx body. An undecodable body yields a non-OK envelope."""
        try:
            data = json.loads(body)
        except (TypeError, ValueError) as e:
            return Envelope(status="INVALID", error=f"Failed to decode JSON response: {e}")
        if not isinstance(data, dict):
            return Envelope(status="INVALID", error="Response is not a JSON object")

        results = data.get("results") or []
        if not isinstance(results, list):
            results = []
        error = data.get("error")
        return Envelope(
            status=str(data.get("status", "")),
            candles=results_to_candles(results),
            error=str(error) if error is not None else None,
        )
