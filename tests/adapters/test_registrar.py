from __future__ import annotations

import base64
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from iapsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from iapsync.adapters.registrar import (
    HttpSubscriberRegistrar,
    associate_path,
    encode_subscriber_id,
    register_path,
)
from iapsync.config import MissingConfigurationError, get_server_config
from iapsync.domain.errors import RemoteFailure, TransientEnvironmentFailure
from iapsync.domain.types import OriginalTransactionId, PurchaseToken

SUBSCRIBER_ID = bytes(range(0xE0, 0x100))
ENCODED_ID = encode_subscriber_id(SUBSCRIBER_ID)


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


class FakeServer:
    """Idempotent subscription server keyed by request path."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []
        self.subscribers: set[str] = set()
        self.associations: set[tuple[str, str]] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code)
        _, _, rest = request.url.path.partition("/v1/subscription/")
        subscriber, _, reference = rest.partition("/")
        self.subscribers.add(subscriber)
        if reference:
            self.associations.add((subscriber, reference))
        return httpx.Response(200)


@pytest.fixture
def server_url(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setenv("IAPSYNC_SERVER_URL", "https://subscriptions.example.test/api")
    return "https://subscriptions.example.test/api/"


def _registrar(handler: Callable[[httpx.Request], httpx.Response]) -> HttpSubscriberRegistrar:
    return HttpSubscriberRegistrar(
        config=get_server_config(),
        client_factory=_make_client_factory(handler),
    )


def test_subscriber_id_is_base64url_without_padding() -> None:
    assert len(ENCODED_ID) == 43
    assert not set(ENCODED_ID) & {"=", "+", "/"}
    assert base64.urlsafe_b64decode(f"{ENCODED_ID}=") == SUBSCRIBER_ID


def test_paths_for_each_reference_kind() -> None:
    assert register_path(SUBSCRIBER_ID) == f"v1/subscription/{ENCODED_ID}"
    assert associate_path(SUBSCRIBER_ID, OriginalTransactionId(2**64 - 1)) == (
        f"v1/subscription/{ENCODED_ID}/appstore/18446744073709551615"
    )
    assert associate_path(SUBSCRIBER_ID, PurchaseToken("a/b+c")) == (
        f"v1/subscription/{ENCODED_ID}/playbilling/a%2Fb%2Bc"
    )


@pytest.mark.asyncio
@pytest.mark.usefixtures("server_url")
async def test_register_posts_to_subscription_path() -> None:
    server = FakeServer()

    await _registrar(server).register_subscriber_id(SUBSCRIBER_ID)

    (request,) = server.requests
    assert request.method == "POST"
    assert str(request.url) == (
        f"https://subscriptions.example.test/api/v1/subscription/{ENCODED_ID}"
    )
    assert request.content == b""


@pytest.mark.asyncio
@pytest.mark.usefixtures("server_url")
async def test_associate_posts_to_appstore_path() -> None:
    server = FakeServer()

    await _registrar(server).associate_subscriber_id(SUBSCRIBER_ID, OriginalTransactionId(42))

    (request,) = server.requests
    assert request.method == "POST"
    assert request.url.path == f"/api/v1/subscription/{ENCODED_ID}/appstore/42"


@pytest.mark.asyncio
@pytest.mark.usefixtures("server_url")
async def test_repeated_calls_are_harmless() -> None:
    server = FakeServer()
    registrar = _registrar(server)

    for _ in range(2):
        await registrar.register_subscriber_id(SUBSCRIBER_ID)
        await registrar.associate_subscriber_id(SUBSCRIBER_ID, OriginalTransactionId(42))

    assert len(server.requests) == 4
    assert server.subscribers == {ENCODED_ID}
    assert server.associations == {(ENCODED_ID, "appstore/42")}


@pytest.mark.asyncio
@pytest.mark.usefixtures("server_url")
@pytest.mark.parametrize("status_code", [201, 204])
async def test_any_success_status_is_accepted(status_code: int) -> None:
    await _registrar(lambda _request: httpx.Response(status_code)).register_subscriber_id(
        SUBSCRIBER_ID
    )


@pytest.mark.asyncio
@pytest.mark.usefixtures("server_url")
@pytest.mark.parametrize("status_code", [400, 409, 500, 503])
async def test_unexpected_status_raises_remote_failure(
    status_code: int, caplog: pytest.LogCaptureFixture
) -> None:
    server = FakeServer(status_code=status_code)

    with pytest.raises(RemoteFailure) as exc:
        await _registrar(server).associate_subscriber_id(SUBSCRIBER_ID, PurchaseToken("t"))

    assert exc.value.status_code == status_code
    assert len(server.requests) == 1
    assert ENCODED_ID not in caplog.text
    assert ENCODED_ID not in str(exc.value)


@pytest.mark.asyncio
@pytest.mark.usefixtures("server_url")
async def test_transport_error_raises_transient_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(TransientEnvironmentFailure):
        await _registrar(handler).register_subscriber_id(SUBSCRIBER_ID)


def test_registrar_requires_server_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("IAPSYNC_SERVER_URL", raising=False)

    with pytest.raises(MissingConfigurationError):
        HttpSubscriberRegistrar()
