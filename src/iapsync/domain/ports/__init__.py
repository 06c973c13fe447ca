"""Domain port definitions for adapters."""

from __future__ import annotations

from .collaborators import (
    CrossDeviceSync,
    EnqueueRedemptionJob,
    RedemptionCheckpointStore,
    RedemptionJobQueue,
    RedemptionNecessityChecker,
    RunRedemptionJob,
)
from .persistence import KeyValueRepository
from .platform import PaymentPlatform, Product, PurchaseOutcome, PurchaseOutcomeKind
from .registrar import SubscriberRegistrar
from .unit_of_work import (
    ReadTransaction,
    SubscriptionRepositories,
    SubscriptionUnitOfWork,
    UnitOfWorkFactory,
    WriteTransaction,
)

__all__ = [
    "CrossDeviceSync",
    "EnqueueRedemptionJob",
    "KeyValueRepository",
    "PaymentPlatform",
    "Product",
    "PurchaseOutcome",
    "PurchaseOutcomeKind",
    "ReadTransaction",
    "RedemptionCheckpointStore",
    "RedemptionJobQueue",
    "RedemptionNecessityChecker",
    "RunRedemptionJob",
    "SubscriberRegistrar",
    "SubscriptionRepositories",
    "SubscriptionUnitOfWork",
    "UnitOfWorkFactory",
    "WriteTransaction",
]
