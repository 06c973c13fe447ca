"""Port for the device payment platform (StoreKit-style)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from iapsync.domain.types import EntitlementTransaction


@dataclass(frozen=True, slots=True)
class Product:
    product_id: str


class PurchaseOutcomeKind(StrEnum):
    SUCCESS = "success"
    USER_CANCELLED = "user_cancelled"
    PENDING = "pending"


@dataclass(frozen=True, slots=True)
class PurchaseOutcome:
    """Raw result of a platform purchase.

    ``transaction`` is set for ``SUCCESS`` and carries its own signature status.
    """

    kind: PurchaseOutcomeKind
    transaction: EntitlementTransaction | None = None


@runtime_checkable
class PaymentPlatform(Protocol):
    async def current_entitlement(self, product_id: str) -> EntitlementTransaction | None:
        """Return the transaction currently entitling us to ``product_id``, if any."""
        ...

    async def products(self, product_ids: Sequence[str]) -> Sequence[Product]: ...

    async def purchase(self, product: Product) -> PurchaseOutcome: ...

    def transaction_updates(self) -> AsyncIterator[EntitlementTransaction]:
        """Unbounded stream of transactions completed outside a purchase call."""
        ...

    async def finish(self, transaction: EntitlementTransaction) -> None: ...
