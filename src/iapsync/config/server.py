"""Subscription server configuration values."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from iapsync import __version__

from .env import optional_env_var, require_env_var
from .errors import InvalidConfigurationError
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig

SERVER_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Holds the subscription server endpoint and client behaviour."""

    base_url: str
    resilience: ResilienceConfig


def _parse_base_url(raw: str) -> str:
    try:
        url = httpx.URL(raw.strip())
    except httpx.InvalidURL as exc:
        raise InvalidConfigurationError("IAPSYNC_SERVER_URL", str(exc)) from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise InvalidConfigurationError("IAPSYNC_SERVER_URL", "expected an http(s) URL")
    base_url = str(url)
    return base_url if base_url.endswith("/") else f"{base_url}/"


def _parse_timeout() -> float:
    raw = optional_env_var("IAPSYNC_SERVER_TIMEOUT", str(SERVER_TIMEOUT_SECONDS))
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidConfigurationError("IAPSYNC_SERVER_TIMEOUT", f"not a number: {raw}") from exc


def get_server_config(*, resilience: ResilienceConfig | None = None) -> ServerConfig:
    base_url = _parse_base_url(require_env_var("IAPSYNC_SERVER_URL"))
    return ServerConfig(
        base_url=base_url,
        resilience=resilience
        or ResilienceConfig(
            name="subscription-server",
            timeout_seconds=_parse_timeout(),
            # Registration is driven by the caller's own cadence; never retry here.
            retry=NO_RETRY,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            default_headers={"User-Agent": f"iapsync/{__version__}"},
        ),
    )
