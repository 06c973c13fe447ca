"""Reconciliation and redemption of the paid-tier subscription.

Subscriptions may only be started on a primary device, but that primary may
not be this device, or even run the same platform. The persisted subscriber
identity may therefore have been generated here or restored from elsewhere,
and the coordinator has to reconcile it with whatever the local payment
platform says before asking for a redemption.
"""

from __future__ import annotations

import secrets
from logging import getLogger
from typing import TYPE_CHECKING

from iapsync.domain.errors import IntegrityFailure, ProductUnavailableError
from iapsync.domain.identity_store import SubscriberIdentityStore
from iapsync.domain.ports.platform import PurchaseOutcomeKind
from iapsync.domain.prober import EntitlementProber
from iapsync.domain.reconciliation import ReconciliationCase, classify
from iapsync.domain.serial_queue import SerialTaskQueue
from iapsync.domain.types import (
    DEFAULT_PRODUCT_ID,
    SUBSCRIBER_ID_LENGTH,
    OriginalTransactionId,
    PurchaseResult,
    SubscriberIdentity,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from iapsync.domain.ports.collaborators import (
        CrossDeviceSync,
        RedemptionJobQueue,
        RedemptionNecessityChecker,
    )
    from iapsync.domain.ports.platform import PaymentPlatform
    from iapsync.domain.ports.registrar import SubscriberRegistrar
    from iapsync.domain.ports.unit_of_work import (
        ReadTransaction,
        UnitOfWorkFactory,
        WriteTransaction,
    )

log = getLogger(__name__)


def generate_subscriber_id() -> bytes:
    return secrets.token_bytes(SUBSCRIBER_ID_LENGTH)


class RedemptionCoordinator[TJob]:
    """Public entry points for purchasing and redeeming the subscription."""

    def __init__(
        self,
        *,
        platform: PaymentPlatform,
        unit_of_work_factory: UnitOfWorkFactory,
        registrar: SubscriberRegistrar,
        sync: CrossDeviceSync,
        job_queue: RedemptionJobQueue[TJob],
        necessity_checker: RedemptionNecessityChecker,
        product_id: str = DEFAULT_PRODUCT_ID,
        store: SubscriberIdentityStore | None = None,
        prober: EntitlementProber | None = None,
        subscriber_id_factory: Callable[[], bytes] = generate_subscriber_id,
    ) -> None:
        self.product_id = product_id
        self._platform = platform
        self._unit_of_work_factory = unit_of_work_factory
        self._registrar = registrar
        self._sync = sync
        self._job_queue = job_queue
        self._necessity_checker = necessity_checker
        self._store = store or SubscriberIdentityStore()
        self.prober = prober or EntitlementProber(platform)
        self._subscriber_id_factory = subscriber_id_factory
        self._redemption_queue: SerialTaskQueue[None] = SerialTaskQueue("redeem-subscription")

    # Identity access ------------------------------------------------------------

    def get_identity(self, tx: ReadTransaction) -> SubscriberIdentity | None:
        return self._store.get(tx)

    def restore_identity(self, identity: SubscriberIdentity, tx: WriteTransaction) -> None:
        """Overwrite the identity with one from an authoritative external source.

        Generally identities are generated and registered here; this is the
        exception for identities preserved on another device or in a backup.
        """

        log.info("Restoring subscriber identity %s", identity.redacted_id)
        self._store.set(identity, tx)

    # Purchase -------------------------------------------------------------------

    async def purchase_new_subscription(self) -> PurchaseResult:
        """Purchase the subscription and redeem it.

        Users who are already subscribed get platform UI explaining so, and the
        call still returns ``SUCCESS``.
        """

        products = await self._platform.products([self.product_id])
        product = next((p for p in products if p.product_id == self.product_id), None)
        if product is None:
            raise ProductUnavailableError(self.product_id)

        outcome = await self._platform.purchase(product)
        match outcome.kind:
            case PurchaseOutcomeKind.SUCCESS:
                if outcome.transaction is None or not outcome.transaction.is_verified:
                    log.error("Unverified successful purchase result!")
                    raise IntegrityFailure("Unverified successful purchase result")
                await self.redeem_if_necessary()
                return PurchaseResult.SUCCESS
            case PurchaseOutcomeKind.USER_CANCELLED:
                log.info("User cancelled subscription purchase.")
                return PurchaseResult.USER_CANCELLED
            case PurchaseOutcomeKind.PENDING:
                log.warning("Subscription purchase is pending; expect redemption if approved.")
                return PurchaseResult.PENDING

    # Redemption -----------------------------------------------------------------

    async def redeem_if_necessary(self) -> None:
        """Redeem the subscription with the server if a redemption is due.

        Safe to call repeatedly and concurrently. Each call runs its own cycle
        once every earlier cycle has finished, so later cycles see state
        persisted by earlier ones and usually short-circuit.
        """

        await self._redemption_queue.enqueue(self._redeem_if_necessary)

    async def _redeem_if_necessary(self) -> None:
        # A restore may be writing an authoritative identity right now.
        try:
            await self._sync.wait_for_pending_restores()
        except Exception:  # noqa: BLE001
            log.warning("Waiting for pending restores failed; continuing", exc_info=True)

        with self._unit_of_work_factory() as tx:
            persisted = self._store.get(tx)

        entitlement = await self.prober.latest_entitlement(self.product_id)

        case = classify(persisted, entitlement)
        log.debug("Reconciliation case: %s", case)

        if case is ReconciliationCase.NOTHING:
            return
        if case is ReconciliationCase.IDENTITY_ONLY:
            log.warning("Have persisted subscriber identity, but no local entitlement...")
        elif entitlement is not None and case.requires_registration:
            if case is ReconciliationCase.MISMATCHED:
                log.info(
                    "Local entitlement does not match persisted identity; "
                    "claiming the local subscription."
                )
            await self._register_new_identity(entitlement.original_id)

        await self._necessity_checker.redeem_if_necessary(
            checkpoints=self._store,
            unit_of_work_factory=self._unit_of_work_factory,
            enqueue_job=self._job_queue.enqueue_redemption_job,
            run_job=self._job_queue.run_redemption_job,
        )

    async def _register_new_identity(self, original_transaction_id: int) -> SubscriberIdentity:
        """Generate a subscriber id, register it remotely, then persist it."""

        log.info("Generating and registering new subscriber id")
        identity = SubscriberIdentity(
            subscriber_id=self._subscriber_id_factory(),
            external_reference=OriginalTransactionId(original_transaction_id),
        )

        # Unassociated at first; association is safe to repeat for any id/reference pair.
        await self._registrar.register_subscriber_id(identity.subscriber_id)
        await self._registrar.associate_subscriber_id(
            identity.subscriber_id, identity.external_reference
        )

        with self._unit_of_work_factory() as tx:
            self._store.set(identity, tx)
            tx.commit()

        # The identity is synced to other devices.
        self._sync.record_pending_local_account_updates()
        log.info("Registered subscriber id %s", identity.redacted_id)
        return identity
