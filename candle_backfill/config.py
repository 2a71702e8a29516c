"""
Engine configuration.

`BackfillConfig` is passed into `Backfiller`; `ProviderConfig` is passed
into a provider. Nothing here is read at import time.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

from .adapters.base import ProviderConfig, RateLimitConfig, Timespan
from .errors import ConfigError

DEFAULT_MAX_PASSES = 6
DEFAULT_POLITENESS_DELAY_SECONDS = 0.25

# Calendar days per request; keeps each response under the provider's payload ceiling.
DEFAULT_CHUNK_DAYS = {
    Timespan.DAY: 30,
    Timespan.HOUR: 14,
    Timespan.MINUTE: 7,
}

# Intraday windows that collapse after weekend clamping fall back to this many days.
FALLBACK_WINDOW_DAYS = 7

API_KEY_ENV = "POLYGON_API_KEY"
BASE_URL_ENV = "CANDLES_BASE_URL"


@dataclass(frozen=True)
class BackfillConfig:
    max_passes: int = DEFAULT_MAX_PASSES
    chunk_days: Dict[Timespan, int] = field(default_factory=lambda: dict(DEFAULT_CHUNK_DAYS))
    politeness_delay_seconds: float = DEFAULT_POLITENESS_DELAY_SECONDS
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)

    def __post_init__(self):
        if self.max_passes < 1:
            raise ConfigError(f"max_passes must be >= 1, got {self.max_passes}")
        missing = [t.value for t in Timespan if t not in self.chunk_days]
        if missing:
            raise ConfigError(f"chunk_days has no entry for: {missing}")
        if any(int(d) < 1 for d in self.chunk_days.values()):
            raise ConfigError("chunk_days values must be >= 1")
        if self.rate_limit.max_attempts < 1:
            raise ConfigError("rate_limit.max_attempts must be >= 1")

    def chunk_days_for(self, timespan: Timespan) -> int:
        return int(self.chunk_days[timespan])


def load_provider_config(
    env_var: str = API_KEY_ENV,
    base_url: Optional[str] = None,
    timeout_seconds: int = 30,
    dotenv_path: Optional[str] = None,
) -> ProviderConfig:
    """
    Build a ProviderConfig from the environment.

    A `.env` file is loaded first (existing environment variables win).
    Raises ConfigError if the API key is missing or blank.
    """
    load_dotenv(dotenv_path=dotenv_path, override=False)
    api_key = (os.getenv(env_var) or "").strip()
    if not api_key:
        raise ConfigError(f"Set {env_var}")
    return ProviderConfig(
        api_key=api_key,
        base_url=base_url or os.getenv(BASE_URL_ENV, ""),
        timeout_seconds=timeout_seconds,
    )
