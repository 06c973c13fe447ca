"""Domain layer: identity reconciliation and subscription redemption."""

from __future__ import annotations

from .coordinator import RedemptionCoordinator, generate_subscriber_id
from .errors import (
    IntegrityFailure,
    ProductUnavailableError,
    RedemptionError,
    RemoteFailure,
    TransientEnvironmentFailure,
)
from .identity_store import SubscriberIdentityStore
from .listener import UpdateListener
from .prober import EntitlementProber
from .reconciliation import ReconciliationCase, classify
from .serial_queue import SerialTaskQueue
from .types import (
    DEFAULT_PRODUCT_ID,
    EntitlementTransaction,
    ExternalReference,
    OriginalTransactionId,
    PurchaseResult,
    PurchaseToken,
    SignatureStatus,
    SubscriberIdentity,
)

__all__ = [
    "DEFAULT_PRODUCT_ID",
    "EntitlementProber",
    "EntitlementTransaction",
    "ExternalReference",
    "IntegrityFailure",
    "OriginalTransactionId",
    "ProductUnavailableError",
    "PurchaseResult",
    "PurchaseToken",
    "ReconciliationCase",
    "RedemptionCoordinator",
    "RedemptionError",
    "RemoteFailure",
    "SerialTaskQueue",
    "SignatureStatus",
    "SubscriberIdentity",
    "SubscriberIdentityStore",
    "TransientEnvironmentFailure",
    "UpdateListener",
    "classify",
    "generate_subscriber_id",
]
