from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from iapsync.adapters.registrar import encode_subscriber_id
from iapsync.app import (
    build_coordinator,
    restore_identity_from_record,
    show_identity,
    start_update_listener,
)
from iapsync.config import SubscriptionConfig
from iapsync.domain.types import OriginalTransactionId, PurchaseToken
from tests.helpers.fakes import make_transaction

if TYPE_CHECKING:
    from collections.abc import Callable

    from iapsync.adapters.sqlalchemy import SqlAlchemySubscriptionUnitOfWork
    from tests.helpers.fakes import (
        FakeJobQueue,
        FakeNecessityChecker,
        FakePaymentPlatform,
        FakeRegistrar,
        FakeSync,
    )

type UnitOfWorkFactory = Callable[[], SqlAlchemySubscriptionUnitOfWork]

SUBSCRIBER_ID = b"\x42" * 32


def test_show_identity_when_nothing_persisted(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    assert show_identity(unit_of_work_factory=sqlite_unit_of_work) is None


def test_restore_then_show_identity(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    payload = {"subscriberId": encode_subscriber_id(SUBSCRIBER_ID), "purchaseToken": "tok"}

    identity = restore_identity_from_record(payload, unit_of_work_factory=sqlite_unit_of_work)
    record = show_identity(unit_of_work_factory=sqlite_unit_of_work)

    assert identity.subscriber_id == SUBSCRIBER_ID
    assert identity.external_reference == PurchaseToken("tok")
    assert record is not None
    assert record.model_dump(by_alias=True, exclude_none=True) == payload


def test_invalid_record_leaves_identity_untouched(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    restore_identity_from_record(
        {"subscriberId": encode_subscriber_id(SUBSCRIBER_ID), "originalTransactionId": 1},
        unit_of_work_factory=sqlite_unit_of_work,
    )

    with pytest.raises(ValidationError):
        restore_identity_from_record(
            {"subscriberId": "AAAA"}, unit_of_work_factory=sqlite_unit_of_work
        )

    record = show_identity(unit_of_work_factory=sqlite_unit_of_work)
    assert record is not None
    assert record.original_transaction_id == 1


@pytest.mark.asyncio
async def test_build_coordinator_uses_configured_product(  # noqa: PLR0913
    sqlite_unit_of_work: UnitOfWorkFactory,
    platform: FakePaymentPlatform,
    registrar: FakeRegistrar,
    sync: FakeSync,
    job_queue: FakeJobQueue,
    necessity_checker: FakeNecessityChecker,
) -> None:
    platform.entitlement = make_transaction(42, product_id="custom.tier")
    coordinator = build_coordinator(
        platform=platform,
        sync=sync,
        job_queue=job_queue,
        necessity_checker=necessity_checker,
        registrar=registrar,
        unit_of_work_factory=sqlite_unit_of_work,
        subscription=SubscriptionConfig(product_id="custom.tier"),
    )

    await coordinator.redeem_if_necessary()

    assert coordinator.product_id == "custom.tier"
    with sqlite_unit_of_work() as tx:
        identity = coordinator.get_identity(tx)
    assert identity is not None
    assert identity.external_reference == OriginalTransactionId(42)


def test_build_coordinator_reads_product_from_environment(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_unit_of_work: UnitOfWorkFactory,
    platform: FakePaymentPlatform,
    registrar: FakeRegistrar,
    sync: FakeSync,
    job_queue: FakeJobQueue,
    necessity_checker: FakeNecessityChecker,
) -> None:
    monkeypatch.setenv("IAPSYNC_PRODUCT_ID", "env.tier")

    coordinator = build_coordinator(
        platform=platform,
        sync=sync,
        job_queue=job_queue,
        necessity_checker=necessity_checker,
        registrar=registrar,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert coordinator.product_id == "env.tier"


@pytest.mark.asyncio
async def test_start_update_listener_redeems_latest_update(
    sqlite_unit_of_work: UnitOfWorkFactory,
    platform: FakePaymentPlatform,
    registrar: FakeRegistrar,
    sync: FakeSync,
    job_queue: FakeJobQueue,
    necessity_checker: FakeNecessityChecker,
) -> None:
    renewal = make_transaction(42, transaction_id=43)
    platform.entitlement = renewal
    platform.updates = [renewal]
    coordinator = build_coordinator(
        platform=platform,
        sync=sync,
        job_queue=job_queue,
        necessity_checker=necessity_checker,
        registrar=registrar,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    listener = start_update_listener(coordinator, platform)
    await listener.start()

    assert platform.finished == [renewal]
    assert len(registrar.register_calls) == 1
    assert len(job_queue.ran) == 1
