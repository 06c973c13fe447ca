"""Transaction boundary around subscriber state."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from iapsync.domain.ports.persistence import KeyValueRepository


@dataclass(slots=True)
class SubscriptionRepositories:
    """Repositories backing subscriber identity and redemption checkpoints."""

    key_values: KeyValueRepository


@runtime_checkable
class SubscriptionUnitOfWork(Protocol):
    """A ``with`` block over one storage transaction.

    Writes become visible to later units of work only after ``commit()``;
    leaving the block discards anything uncommitted.
    """

    @property
    def repositories(self) -> SubscriptionRepositories: ...

    def __enter__(self) -> SubscriptionUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


# A read transaction is any open unit of work; a write transaction is one the
# caller commits before leaving the ``with`` block.
type ReadTransaction = SubscriptionUnitOfWork
type WriteTransaction = SubscriptionUnitOfWork

UnitOfWorkFactory = Callable[[], SubscriptionUnitOfWork]
