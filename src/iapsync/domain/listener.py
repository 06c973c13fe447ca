"""Consumption of transaction updates pushed by the payment platform.

Updates cover transactions that do not complete inline with a purchase call,
such as renewals and purchases approved later ("Ask to Buy"). We only need to
notice that an entitling transaction happened; the redemption path already
tracks whether a redemption is actually due.
"""

from __future__ import annotations

import asyncio
import contextlib
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from iapsync.domain.ports.platform import PaymentPlatform
    from iapsync.domain.prober import EntitlementProber
    from iapsync.domain.types import EntitlementTransaction

log = getLogger(__name__)


class UpdateListener:
    def __init__(
        self,
        *,
        platform: PaymentPlatform,
        prober: EntitlementProber,
        redeem: Callable[[], Awaitable[None]],
        product_id: str,
    ) -> None:
        self._platform = platform
        self._prober = prober
        self._redeem = redeem
        self._product_id = product_id
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Start consuming updates in a background task (idempotent)."""

        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="transaction-updates")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def run(self) -> None:
        """Consume the update stream until it ends or the task is cancelled."""

        try:
            async for transaction in self._platform.transaction_updates():
                try:
                    await self.handle(transaction)
                except Exception:
                    log.exception("Failed to handle transaction update")
        except Exception:
            log.exception("Transaction update stream failed")
            return
        log.info("Transaction update stream ended")

    async def handle(self, transaction: EntitlementTransaction) -> bool:
        """Process one update; return whether a redemption was attempted."""

        if not transaction.is_verified:
            log.error("Transaction %s from update was unverified!", transaction.id)
            return False

        # Every transaction must be finished eventually.
        await self._platform.finish(transaction)

        latest = await self._prober.latest_entitlement(self._product_id)
        if latest is None or latest.id != transaction.id:
            log.info("Transaction update is not for the latest entitling transaction.")
            return False

        log.info("Transaction update is for latest entitling transaction; redeeming.")
        try:
            await self._redeem()
        except Exception:
            log.exception("Failed to redeem subscription after transaction update")
        return True
