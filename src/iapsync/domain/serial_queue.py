"""Serialised execution of async operations, one after another."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine


class SerialTaskQueue[T]:
    """Runs enqueued operations one at a time, in call order.

    Every call runs its own operation, but not before all previously enqueued
    operations have finished, whether they succeeded or failed. Later callers
    can therefore short-circuit on state persisted by earlier ones. Callers are
    shielded, so a cancelled caller never cancels an enqueued operation.

    The tail is read and replaced without an intervening ``await``, which is
    what makes this safe on a single event loop without a lock.
    """

    def __init__(self, name: str = "serial-task-queue") -> None:
        self._name = name
        self._tail: asyncio.Task[T] | None = None

    async def enqueue(self, operation: Callable[[], Coroutine[object, object, T]]) -> T:
        task = asyncio.create_task(self._run_after(self._tail, operation), name=self._name)
        task.add_done_callback(self._release)
        self._tail = task
        return await asyncio.shield(task)

    @staticmethod
    async def _run_after(
        previous: asyncio.Task[T] | None,
        operation: Callable[[], Coroutine[object, object, T]],
    ) -> T:
        if previous is not None and not previous.done():
            # Its outcome belongs to its own caller; we only wait for it to end.
            await asyncio.wait({previous})
        return await operation()

    def _release(self, task: asyncio.Task[T]) -> None:
        if self._tail is task:
            self._tail = None
