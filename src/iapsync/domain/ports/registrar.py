"""Port for registering subscriber identities with the subscription server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from iapsync.domain.types import ExternalReference


@runtime_checkable
class SubscriberRegistrar(Protocol):
    """Unauthenticated, idempotent server calls.

    Implementations raise :class:`iapsync.domain.errors.RemoteFailure` on an
    unexpected status and :class:`iapsync.domain.errors.TransientEnvironmentFailure`
    when the server cannot be reached.
    """

    async def register_subscriber_id(self, subscriber_id: bytes) -> None: ...

    async def associate_subscriber_id(
        self,
        subscriber_id: bytes,
        external_reference: ExternalReference,
    ) -> None: ...
