"""Lookup of the transaction currently entitling the device to a subscription."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from iapsync.domain.ports.platform import PaymentPlatform
    from iapsync.domain.types import EntitlementTransaction

log = getLogger(__name__)


class EntitlementProber:
    def __init__(self, platform: PaymentPlatform) -> None:
        self._platform = platform

    async def latest_entitlement(self, product_id: str) -> EntitlementTransaction | None:
        """Return the transaction that most recently entitled us to ``product_id``.

        If a subscription was bought in transaction T and renewed in T+1 (expired)
        and T+2 (current), this returns T+2. Unverified transactions are never
        returned.
        """

        transaction = await self._platform.current_entitlement(product_id)
        if transaction is None:
            return None

        if not transaction.is_verified:
            log.error(
                "Latest entitlement transaction %s for %s was unverified!",
                transaction.id,
                product_id,
            )
            return None

        return transaction
