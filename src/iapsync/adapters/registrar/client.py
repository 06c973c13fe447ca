"""HTTP client registering subscriber ids with the subscription server."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from iapsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from iapsync.config.server import ServerConfig, get_server_config
from iapsync.domain.errors import RemoteFailure, TransientEnvironmentFailure
from iapsync.domain.ports.registrar import SubscriberRegistrar
from iapsync.domain.types import OriginalTransactionId, PurchaseToken

if TYPE_CHECKING:
    from collections.abc import Callable

    from iapsync.domain.types import ExternalReference

log = getLogger(__name__)


def encode_subscriber_id(subscriber_id: bytes) -> str:
    """Base64url without padding, as used in subscription URLs."""

    return base64.urlsafe_b64encode(subscriber_id).rstrip(b"=").decode("ascii")


def register_path(subscriber_id: bytes) -> str:
    return f"v1/subscription/{encode_subscriber_id(subscriber_id)}"


def associate_path(subscriber_id: bytes, external_reference: ExternalReference) -> str:
    base = register_path(subscriber_id)
    match external_reference:
        case OriginalTransactionId(value=original_transaction_id):
            return f"{base}/appstore/{original_transaction_id}"
        case PurchaseToken(value=purchase_token):
            return f"{base}/playbilling/{quote(purchase_token, safe="")}"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpSubscriberRegistrar:
    """Unauthenticated registrar; the subscriber id itself is the credential.

    Both calls are idempotent on the server, so repeating them with the same
    arguments is harmless.
    """

    config: ServerConfig = field(default_factory=get_server_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def register_subscriber_id(self, subscriber_id: bytes) -> None:
        await self._post(register_path(subscriber_id), action="registering subscriber id")

    async def associate_subscriber_id(
        self,
        subscriber_id: bytes,
        external_reference: ExternalReference,
    ) -> None:
        await self._post(
            associate_path(subscriber_id, external_reference),
            action="associating subscriber id with external reference",
        )

    async def _post(self, path: str, *, action: str) -> None:
        url = f"{self.config.base_url}{path}"
        try:
            async with self.client_factory(self.config.resilience) as client:
                response = await client.post(url)
        except httpx.TransportError as exc:
            log.warning("Transport failure while %s: %s", action, type(exc).__name__)
            raise TransientEnvironmentFailure(f"Network unavailable while {action}") from exc

        if not response.is_success:
            # The URL embeds the subscriber id; keep it out of logs and messages.
            log.error("Unexpected status code %s while %s", response.status_code, action)
            raise RemoteFailure(
                f"Unexpected status code {response.status_code} while {action}",
                status_code=response.status_code,
            )


if TYPE_CHECKING:
    _registrar_check: SubscriberRegistrar = HttpSubscriberRegistrar()
