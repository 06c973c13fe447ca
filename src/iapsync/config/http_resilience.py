"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from .errors import InvalidConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Transport-level retries.

    The subscription endpoints are idempotent, so POST is retryable.
    """

    total: int = 2
    backoff_factor: float = 0.5
    max_backoff_wait: float = 10.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = frozenset({"POST"})
    status_forcelist: frozenset[int] = frozenset({429, 502, 503, 504})
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
    )
    backoff_jitter: float = 1.0

    @property
    def enabled(self) -> bool:
        return self.total > 0


NO_RETRY = RetryPolicy(total=0)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise InvalidConfigurationError(
                f"{self.name} timeout", f"expected a positive value, got {self.timeout_seconds}"
            )
        if self.ratelimit is not None and (
            self.ratelimit.max_calls <= 0 or self.ratelimit.per_seconds <= 0
        ):
            raise InvalidConfigurationError(f"{self.name} rate limit", "must be positive")
