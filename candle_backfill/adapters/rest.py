"""
Generic candles REST provider.

Request shape:
    GET {base}/candles?symbol=AAPL&multiplier=1&timespan=day&from=2023-01-02&to=2023-01-06&apiKey=...
"""

from datetime import date
from typing import Any, Dict

from .base import DataProvider, Timespan
from . import register_provider


@register_provider
class RestProvider(DataProvider):
    """Provider for a `/candles` endpoint that answers with the standard envelope."""

    name = "REST"
    default_base_url = "http://localhost:8080"

    def build_url(self, symbol: str, multiplier: int, timespan: Timespan,
                  from_date: date, to_date: date) -> str:
        return f"{self.base_url}/candles"

    def build_params(self, symbol: str, multiplier: int, timespan: Timespan,
                     from_date: date, to_date: date) -> Dict[str, Any]:
        return {
            "symbol": symbol,
            "multiplier": int(multiplier),
            "timespan": timespan.value,
            "from": from_date.isoformat(),
            "to": to_date.isoformat(),
            "apiKey": self.config.api_key,
        }
