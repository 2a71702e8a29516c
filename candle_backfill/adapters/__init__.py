"""
Provider registry and factory.

Usage:
    from candle_backfill.adapters import get_provider, list_providers

    provider = get_provider('polygon', ProviderConfig(api_key='...'))
    print(list_providers())  # ['POLYGON', 'REST']
"""

from typing import Dict, List, Optional, Type

import requests

from .base import (
    Candle,
    DataProvider,
    Envelope,
    ProviderConfig,
    ProviderResponse,
    RateLimitConfig,
    Timespan,
)

# Registry of all available providers
_PROVIDERS: Dict[str, Type[DataProvider]] = {}


def register_provider(cls: Type[DataProvider]) -> Type[DataProvider]:
    """
    Decorator to register a provider class in the global registry.

    Usage:
        @register_provider
        class MyProvider(DataProvider):
            name = "MINE"
            ...
    """
    if not cls.name:
        raise ValueError(f"{cls.__name__} must define a non-empty `name`")
    _PROVIDERS[cls.name.upper()] = cls
    return cls


def get_provider(
    name: str,
    config: ProviderConfig,
    session: Optional[requests.Session] = None,
) -> DataProvider:
    """
    Factory function to get a provider instance by name.

    Args:
        name: Provider name (case-insensitive)
        config: Credentials and connection settings
        session: Optional requests session to share connections

    Raises:
        ValueError: If no provider is registered under that name
    """
    key = (name or "").upper()
    if key not in _PROVIDERS:
        available = list(_PROVIDERS.keys())
        raise ValueError(
            f"No provider registered for '{name}'. "
            f"Available providers: {available}"
        )
    return _PROVIDERS[key](config, session=session)


def list_providers() -> List[str]:
    """Return the sorted list of registered provider names."""
    return sorted(_PROVIDERS.keys())


# Import providers to trigger registration
from . import polygon
from . import rest

__all__ = [
    'Candle',
    'DataProvider',
    'Envelope',
    'ProviderConfig',
    'ProviderResponse',
    'RateLimitConfig',
    'Timespan',
    'register_provider',
    'get_provider',
    'list_providers',
]
