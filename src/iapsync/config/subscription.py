"""Subscription product configuration."""

from __future__ import annotations

from dataclasses import dataclass

from iapsync.domain.types import DEFAULT_PRODUCT_ID

from .env import optional_env_var


@dataclass(frozen=True, slots=True)
class SubscriptionConfig:
    product_id: str = DEFAULT_PRODUCT_ID


def get_subscription_config() -> SubscriptionConfig:
    return SubscriptionConfig(
        product_id=optional_env_var("IAPSYNC_PRODUCT_ID", DEFAULT_PRODUCT_ID),
    )
