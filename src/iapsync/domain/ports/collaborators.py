"""Ports for collaborators that redemption hands work to."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from iapsync.domain.ports.unit_of_work import (
        ReadTransaction,
        UnitOfWorkFactory,
        WriteTransaction,
    )

type EnqueueRedemptionJob[TJob] = Callable[[bytes, WriteTransaction], TJob]
type RunRedemptionJob[TJob] = Callable[[TJob], Awaitable[None]]


@runtime_checkable
class CrossDeviceSync(Protocol):
    """Propagates account state between a user's devices."""

    async def wait_for_pending_restores(self) -> None: ...

    def record_pending_local_account_updates(self) -> None: ...


@runtime_checkable
class RedemptionJobQueue[TJob](Protocol):
    """Durable queue of receipt-credential redemption jobs."""

    def enqueue_redemption_job(self, subscriber_id: bytes, tx: WriteTransaction) -> TJob: ...

    async def run_redemption_job(self, job: TJob) -> None: ...


@runtime_checkable
class RedemptionCheckpointStore(Protocol):
    """State the necessity checker reads and updates."""

    def subscriber_id(self, tx: ReadTransaction) -> bytes | None: ...

    def get_renewal_checkpoint(self, tx: ReadTransaction) -> datetime | None: ...

    def set_renewal_checkpoint(self, value: datetime, tx: WriteTransaction) -> None: ...

    def get_necessity_checkpoint(self, tx: ReadTransaction) -> datetime | None: ...

    def set_necessity_checkpoint(self, value: datetime, tx: WriteTransaction) -> None: ...


@runtime_checkable
class RedemptionNecessityChecker(Protocol):
    """Decides whether a redemption is due and runs it through the given callbacks."""

    async def redeem_if_necessary[TJob](
        self,
        *,
        checkpoints: RedemptionCheckpointStore,
        unit_of_work_factory: UnitOfWorkFactory,
        enqueue_job: EnqueueRedemptionJob[TJob],
        run_job: RunRedemptionJob[TJob],
    ) -> None: ...
