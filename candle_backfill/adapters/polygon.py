"""
Polygon.io aggregates provider.

API Documentation: https://polygon.io/docs/stocks/get_v2_aggs_ticker__stocksticker__range__multiplier___timespan___from___to

Polygon returns the standard envelope (`status`, `results`, `error`) with
`t` in epoch milliseconds. A `status` of "DELAYED" is a degraded answer,
not a failure.
"""

from datetime import date
from typing import Any, Dict

from .base import DataProvider, Timespan
from . import register_provider

POLYGON_API_URL = "https://api.polygon.io"
API_LIMIT = 50_000


@register_provider
class PolygonProvider(DataProvider):

    name = "POLYGON"
    default_base_url = POLYGON_API_URL

    def build_url(self, symbol: str, multiplier: int, timespan: Timespan,
                  from_date: date, to_date: date) -> str:
        return (
            f"{self.base_url}/v2/aggs/ticker/{symbol}/range/"
            f"{int(multiplier)}/{timespan.value}/{from_date.isoformat()}/{to_date.isoformat()}"
        )

    def build_params(self, symbol: str, multiplier: int, timespan: Timespan,
                     from_date: date, to_date: date) -> Dict[str, Any]:
        return {
            "adjusted": "true",
            "sort": "asc",  # ascending order
            "limit": API_LIMIT,
            "apiKey": self.config.api_key,
        }
