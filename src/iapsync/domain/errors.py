"""Errors raised while reconciling and redeeming subscriptions."""

from __future__ import annotations


class RedemptionError(RuntimeError):
    """Base class for operational failures surfaced to callers."""


class IntegrityFailure(RedemptionError):
    """Raised when the payment platform hands us a payload we cannot verify."""


class ProductUnavailableError(RedemptionError):
    """Raised when the subscription product is unknown to the payment platform."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Subscription product not available: {product_id}")
        self.product_id = product_id


class RemoteFailure(RedemptionError):
    """Raised when the subscription server answers with an unexpected status."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientEnvironmentFailure(RedemptionError):
    """Raised when the network or storage is unavailable; safe to retry later."""
