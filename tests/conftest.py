from __future__ import annotations

import os
import sys
from typing import Any

import httpx
import pytest


PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from authn8_mcp.client import Authn8Client


TOKEN_INFO = {
    "businessName": "Acme Holdings",
    "tokenName": "ci-agent",
    "scopedGroups": [
        {"id": "g1", "name": "Finance"},
        {"id": "g2", "name": "Ops"},
    ],
    "accountCount": 2,
    "expiresAt": "2027-01-05T12:00:00Z",
}

ACCOUNTS = [
    {"id": "a1", "name": "Acme Bank", "issuerDomain": "acme.com"},
    {"id": "a2", "name": "Acme Shop", "issuerDomain": "shop.acme.com"},
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthn8Api:
    """In-process stand-in for the Authn8 API, served via httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, Any] = {}

    def respond(
        self,
        path: str,
        json: Any = None,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._routes[path] = (status, json, headers)

    def fail(self, path: str, exc_factory: Any) -> None:
        self._routes[path] = exc_factory

    def calls(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(route):
            raise route(request)
        status, body, headers = route
        return httpx.Response(status, json=body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "AUTHN8_API_KEY",
        "AUTHN8_API_URL",
        "AUTHN8_TIMEOUT",
        "AUTHN8_CACHE_TTL",
        "AUTHN8_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api() -> FakeAuthn8Api:
    fake = FakeAuthn8Api()
    fake.respond("/api/pat/me", TOKEN_INFO)
    fake.respond("/api/pat/accounts", {"accounts": ACCOUNTS})
    fake.respond("/api/pat/otp/a1", {"name": "Acme Bank", "code": "123456", "length": 6})
    fake.respond("/api/pat/otp/a2", {"name": "Acme Shop", "code": "654321", "length": 6})
    return fake


@pytest.fixture
def client(api: FakeAuthn8Api, clock: FakeClock) -> Authn8Client:
    return Authn8Client(
        "pat_test_token",
        "https://authn8.test",
        transport=api.transport,
        clock=clock,
    )
