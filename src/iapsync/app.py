"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from iapsync.adapters.identity_record import build_identity_record, parse_identity_record
from iapsync.adapters.registrar import HttpSubscriberRegistrar
from iapsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySubscriptionUnitOfWork,
    is_started,
    startup,
)
from iapsync.config.subscription import get_subscription_config
from iapsync.domain.coordinator import RedemptionCoordinator
from iapsync.domain.identity_store import SubscriberIdentityStore
from iapsync.domain.listener import UpdateListener

if TYPE_CHECKING:
    from collections.abc import Mapping

    from iapsync.adapters.identity_record import SubscriberIdentityRecord
    from iapsync.config.subscription import SubscriptionConfig
    from iapsync.domain.ports.collaborators import (
        CrossDeviceSync,
        RedemptionJobQueue,
        RedemptionNecessityChecker,
    )
    from iapsync.domain.ports.platform import PaymentPlatform
    from iapsync.domain.ports.registrar import SubscriberRegistrar
    from iapsync.domain.ports.unit_of_work import UnitOfWorkFactory
    from iapsync.domain.types import SubscriberIdentity


log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemySubscriptionUnitOfWork


def build_coordinator[TJob](
    *,
    platform: PaymentPlatform,
    sync: CrossDeviceSync,
    job_queue: RedemptionJobQueue[TJob],
    necessity_checker: RedemptionNecessityChecker,
    registrar: SubscriberRegistrar | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    subscription: SubscriptionConfig | None = None,
) -> RedemptionCoordinator[TJob]:
    """Wire a coordinator with the configured adapters.

    The payment platform and the host collaborators are always supplied by the
    embedding application; storage and the registrar default to SQLAlchemy and
    the HTTP registrar configured from the environment.
    """

    config = subscription or get_subscription_config()
    return RedemptionCoordinator(
        platform=platform,
        unit_of_work_factory=unit_of_work_factory or _default_unit_of_work_factory(),
        registrar=registrar or HttpSubscriberRegistrar(),
        sync=sync,
        job_queue=job_queue,
        necessity_checker=necessity_checker,
        product_id=config.product_id,
    )


def start_update_listener(
    coordinator: RedemptionCoordinator[object],
    platform: PaymentPlatform,
) -> UpdateListener:
    """Start consuming platform transaction updates; requires a running event loop."""

    listener = UpdateListener(
        platform=platform,
        prober=coordinator.prober,
        redeem=coordinator.redeem_if_necessary,
        product_id=coordinator.product_id,
    )
    listener.start()
    log.info("Listening for transaction updates for %s", coordinator.product_id)
    return listener


def show_identity(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SubscriberIdentityRecord | None:
    """Return the persisted identity in its portable record form."""

    factory = unit_of_work_factory or _default_unit_of_work_factory()
    with factory() as tx:
        identity = SubscriberIdentityStore().get(tx)
    return build_identity_record(identity) if identity is not None else None


def restore_identity_from_record(
    payload: Mapping[str, object],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SubscriberIdentity:
    """Overwrite the persisted identity with an authoritative external record."""

    identity = parse_identity_record(payload)
    factory = unit_of_work_factory or _default_unit_of_work_factory()
    with factory() as tx:
        SubscriberIdentityStore().set(identity, tx)
        tx.commit()
    return identity
