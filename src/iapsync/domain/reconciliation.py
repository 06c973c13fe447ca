"""Classification of local entitlement against the persisted subscriber identity."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from iapsync.domain.types import EntitlementTransaction, SubscriberIdentity


class ReconciliationCase(StrEnum):
    MATCHING = "matching"
    """Local entitlement matches the persisted identity; nothing to register."""

    MISMATCHED = "mismatched"
    """Identity came from elsewhere (another device or store account) and we
    also hold a local entitlement. The local entitlement wins."""

    ENTITLEMENT_ONLY = "entitlement_only"
    """First local purchase; no identity registered yet."""

    IDENTITY_ONLY = "identity_only"
    """Identity may be expired or restored from another device; carry on with it."""

    NOTHING = "nothing"
    """No entitlement and no identity; nothing to redeem."""

    @property
    def requires_registration(self) -> bool:
        return self in {ReconciliationCase.MISMATCHED, ReconciliationCase.ENTITLEMENT_ONLY}


def classify(
    identity: SubscriberIdentity | None,
    entitlement: EntitlementTransaction | None,
) -> ReconciliationCase:
    if entitlement is not None and identity is not None:
        if identity.matches(entitlement):
            return ReconciliationCase.MATCHING
        return ReconciliationCase.MISMATCHED
    if entitlement is not None:
        return ReconciliationCase.ENTITLEMENT_ONLY
    if identity is not None:
        return ReconciliationCase.IDENTITY_ONLY
    return ReconciliationCase.NOTHING
