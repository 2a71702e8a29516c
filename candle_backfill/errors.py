"""Exceptions raised by the backfill engine."""


class BackfillError(Exception):
    """Base class for errors that abort a backfill."""


class ConfigError(BackfillError):
    """Missing or invalid configuration (e.g. no API key)."""


class ProviderError(BackfillError):
    """The remote provider answered with a fatal (non-2xx, non-429) status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Provider returned HTTP {status_code}: {body}")


class ProviderUnavailable(BackfillError):
    """Transport-level failure talking to the provider. Retryable."""
