"""
Candle storage.

`TimeSeriesStore` is the contract the backfill engine relies on; every
series is keyed by (symbol, timespan, multiplier). `SQLiteStore` keeps all
series in a single `prices` table whose unique key makes re-writes
overwrite instead of duplicate.
"""

import sqlite3
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

import pandas as pd

from .adapters.base import Candle, Timespan

CANDLE_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]

_SCHEMA = """
CREATE TABLE IF NOT EXISTS prices (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    symbol      TEXT    NOT NULL,
    timespan    TEXT    NOT NULL,
    multiplier  INTEGER NOT NULL,
    timestamp   INTEGER NOT NULL,
    open REAL, high REAL, low REAL, close REAL,
    volume      REAL,
    UNIQUE(symbol, timespan, multiplier, timestamp)
);
CREATE INDEX IF NOT EXISTS idx_prices_symbol_tf_ts
    ON prices (symbol, timespan, multiplier, timestamp);
"""

_UPSERT_SQL = """
INSERT OR REPLACE INTO prices
    (symbol, timespan, multiplier, timestamp, open, high, low, close, volume)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_SERIES_WHERE = "symbol = ? AND timespan = ? AND multiplier = ?"


class TimeSeriesStore(ABC):
    """Persisted candles keyed by (symbol, timespan, multiplier, timestamp)."""

    @abstractmethod
    def latest_timestamp(self, symbol: str, timespan: Timespan, multiplier: int) -> Optional[int]:
        pass

    @abstractmethod
    def earliest_timestamp(self, symbol: str, timespan: Timespan, multiplier: int) -> Optional[int]:
        pass

    @abstractmethod
    def list_timestamps(
        self, symbol: str, timespan: Timespan, multiplier: int, from_ms: int, to_ms: int
    ) -> List[int]:
        """Ascending timestamps within [from_ms, to_ms]."""
        pass

    @abstractmethod
    def upsert_batch(
        self, symbol: str, timespan: Timespan, multiplier: int, rows: Iterable[Candle]
    ) -> int:
        """Insert-or-overwrite all rows atomically. Returns the number of rows written."""
        pass


class SQLiteStore(TimeSeriesStore):
    """SQLite-backed store. Use `:memory:` for a throwaway database."""

    def __init__(self, db_file: str = ":memory:"):
        self.db_file = db_file
        self.conn = sqlite3.connect(db_file)
        if db_file != ":memory:":
            self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.executescript(_SCHEMA)
        self.conn.commit()

    def __enter__(self) -> "SQLiteStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.conn.close()

    def _scalar(self, sql: str, params: tuple) -> Optional[int]:
        row = self.conn.execute(sql, params).fetchone()
        if row is None or row[0] is None:
            return None
        return int(row[0])

    def latest_timestamp(self, symbol: str, timespan: Timespan, multiplier: int) -> Optional[int]:
        return self._scalar(
            f"SELECT MAX(timestamp) FROM prices WHERE {_SERIES_WHERE}",
            (symbol, timespan.value, int(multiplier)),
        )

    def earliest_timestamp(self, symbol: str, timespan: Timespan, multiplier: int) -> Optional[int]:
        return self._scalar(
            f"SELECT MIN(timestamp) FROM prices WHERE {_SERIES_WHERE}",
            (symbol, timespan.value, int(multiplier)),
        )

    def count(self, symbol: str, timespan: Timespan, multiplier: int) -> int:
        return self._scalar(
            f"SELECT COUNT(*) FROM prices WHERE {_SERIES_WHERE}",
            (symbol, timespan.value, int(multiplier)),
        ) or 0

    def list_timestamps(
        self, symbol: str, timespan: Timespan, multiplier: int, from_ms: int, to_ms: int
    ) -> List[int]:
        cur = self.conn.execute(
            f"""
            SELECT timestamp FROM prices
            WHERE {_SERIES_WHERE} AND timestamp BETWEEN ? AND ?
            ORDER BY timestamp ASC
            """,
            (symbol, timespan.value, int(multiplier), int(from_ms), int(to_ms)),
        )
        return [int(r[0]) for r in cur.fetchall()]

    def upsert_batch(
        self, symbol: str, timespan: Timespan, multiplier: int, rows: Iterable[Candle]
    ) -> int:
        params = [
            (symbol, timespan.value, int(multiplier), int(c.timestamp),
             float(c.open), float(c.high), float(c.low), float(c.close), float(c.volume))
            for c in rows
        ]
        if not params:
            return 0
        # One transaction: commits on success, rolls back the whole batch on error.
        with self.conn:
            self.conn.executemany(_UPSERT_SQL, params)
        return len(params)

    def load_candles(
        self, symbol: str, timespan: Timespan, multiplier: int, from_ms: int, to_ms: int
    ) -> pd.DataFrame:
        """Candles in [from_ms, to_ms] as a DataFrame ordered by timestamp."""
        df = pd.read_sql_query(
            f"""
            SELECT timestamp, open, high, low, close, volume FROM prices
            WHERE {_SERIES_WHERE} AND timestamp BETWEEN ? AND ?
            ORDER BY timestamp ASC
            """,
            self.conn,
            params=(symbol, timespan.value, int(multiplier), int(from_ms), int(to_ms)),
        )
        if df.empty:
            return pd.DataFrame(columns=CANDLE_COLUMNS)
        df["timestamp"] = df["timestamp"].astype("int64")
        return df[CANDLE_COLUMNS]
