"""Pytest configuration and shared fixtures for thorchain-dashboard-data tests."""

from collections.abc import Callable

import httpx
import pytest

from thorchain_dashboard.api import FailoverClient, Provider, ProviderRegistry, ResponseCache

Handler = Callable[[httpx.Request], httpx.Response]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MockUpstream:
    """
    Routes requests by host to per-provider handlers and records every call.

    Hosts without a handler answer 404.

    """

    def __init__(self) -> None:
        self.routes: dict[str, Handler] = {}
        self.calls: list[httpx.Request] = []

    def route(self, host: str, handler: Handler) -> None:
        self.routes[host] = handler

    def json(self, host: str, payload, status_code: int = 200) -> None:
        self.route(host, lambda request: httpx.Response(status_code, json=payload))

    def text(self, host: str, body: str, status_code: int = 200) -> None:
        self.route(host, lambda request: httpx.Response(status_code, text=body))

    def status(self, host: str, status_code: int) -> None:
        self.route(host, lambda request: httpx.Response(status_code, text="error"))

    def fail_connect(self, host: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.route(host, handler)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)

    def hosts(self) -> list[str]:
        return [request.url.host for request in self.calls]

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [request for request in self.calls if request.url.host == host]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))


FAST = Provider(name="fast", base_url="https://fast.example", nominal_update_interval_ms=6000, priority=1)
STABLE = Provider(
    name="stable",
    base_url="https://stable.example",
    extra_headers={"x-client-id": "dashboard", "accept": "application/json"},
    nominal_update_interval_ms=60000,
    priority=2,
)
ARCHIVE = Provider(
    name="archive",
    base_url="https://archive.example",
    extra_headers={"x-client-id": "dashboard"},
    supports_height_query=True,
    priority=3,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> MockUpstream:
    return MockUpstream()


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry([FAST, STABLE, ARCHIVE])


@pytest.fixture
def client(registry: ProviderRegistry, upstream: MockUpstream, clock: FakeClock) -> FailoverClient:
    """Failover client with a 5 second TTL over the fast/stable/archive providers."""
    failover = FailoverClient(
        registry,
        5.0,
        name="test",
        cache=ResponseCache(5.0, clock=clock),
        http_client=upstream.client(),
        clock=clock,
    )
    yield failover
    failover.http_client.close()
