from .backfill import Backfiller, BackfillResult, backfill_symbol
from .adapters import get_provider, list_providers, DataProvider, Timespan
from .config import BackfillConfig, load_provider_config
from .errors import BackfillError, ConfigError, ProviderError, ProviderUnavailable
from .ranges import COVERED, DateRange, Missing
from .store import SQLiteStore, TimeSeriesStore

__version__ = "0.1.0"
__all__ = [
    "Backfiller",
    "BackfillResult",
    "backfill_symbol",
    "get_provider",
    "list_providers",
    "DataProvider",
    "Timespan",
    "BackfillConfig",
    "load_provider_config",
    "BackfillError",
    "ConfigError",
    "ProviderError",
    "ProviderUnavailable",
    "COVERED",
    "DateRange",
    "Missing",
    "SQLiteStore",
    "TimeSeriesStore",
]
