"""
Backoff policy for rate-limited requests.

The policy only answers "how many attempts" and "how long to wait before
the next one"; sleeping goes through an injectable callable so tests never
block.
"""

import time
from dataclasses import dataclass, field
from typing import Callable

from .adapters.base import RateLimitConfig


def attempt_scaled_delay(config: RateLimitConfig) -> Callable[[int], float]:
    """Delay grows linearly with the attempt number, capped at max_backoff_seconds."""
    def delay(attempt: int) -> float:
        return min(config.max_backoff_seconds, config.initial_backoff_seconds * max(1, attempt))
    return delay


@dataclass
class BackoffPolicy:
    max_attempts: int = 3
    delay_fn: Callable[[int], float] = field(default=lambda attempt: float(attempt))
    sleep: Callable[[float], None] = time.sleep
    retry_status_codes: tuple = (429,)

    @classmethod
    def from_config(cls, config: RateLimitConfig, sleep: Callable[[float], None] = time.sleep) -> "BackoffPolicy":
        return cls(
            max_attempts=config.max_attempts,
            delay_fn=attempt_scaled_delay(config),
            sleep=sleep,
            retry_status_codes=tuple(config.rate_limit_status_codes),
        )

    def is_retryable(self, status_code: int) -> bool:
        return status_code in self.retry_status_codes

    def delay(self, attempt: int) -> float:
        return float(self.delay_fn(attempt))

    def should_retry(self, attempt: int) -> bool:
        """True if another attempt is allowed after `attempt` (1-based) failed."""
        return attempt < self.max_attempts
