"""Shared fixtures: a fake Spotify API served through httpx.MockTransport.

Hey future me - no test ever talks to the network. FakeSpotifyApi answers both
the accounts token endpoint and /v1 catalog routes and COUNTS every request,
so tests can assert "no network call happened" or "exactly one token exchange".
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest

from catalogspot.config.settings import SpotifySettings
from catalogspot.infrastructure.integrations.catalog_client import CatalogClient

RouteBody = dict[str, Any] | Callable[[httpx.Request], dict[str, Any] | httpx.Response]


class FakeClock:
    """Controllable clock for token expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FakeSpotifyApi:
    """In-memory stand-in for accounts.spotify.com and api.spotify.com."""

    def __init__(self) -> None:
        self.token_requests: list[httpx.Request] = []
        self.api_requests: list[httpx.Request] = []
        self.routes: dict[str, tuple[int, RouteBody]] = {}
        self.token_status = 200
        self.token_body: dict[str, Any] | None = None
        self.token_delay = 0.0
        self.expires_in = 3600

    def add_route(self, path: str, body: RouteBody, status: int = 200) -> None:
        """Register a response for ``/v1/<path>``."""
        self.routes[path] = (status, body)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "accounts.spotify.com":
            self.token_requests.append(request)
            if self.token_delay:
                await asyncio.sleep(self.token_delay)
            body = self.token_body
            if body is None:
                body = {
                    "access_token": f"token-{len(self.token_requests)}",
                    "token_type": "Bearer",
                    "expires_in": self.expires_in,
                }
            return httpx.Response(self.token_status, json=body)

        self.api_requests.append(request)
        path = request.url.path.removeprefix("/v1/")
        if path not in self.routes:
            return httpx.Response(
                404, json={"error": {"status": 404, "message": "Non existing id"}}
            )
        status, body = self.routes[path]
        payload = body(request) if callable(body) else body
        if isinstance(payload, httpx.Response):
            return payload
        return httpx.Response(status, json=payload)


@pytest.fixture
def fake_api() -> FakeSpotifyApi:
    """Fresh fake API per test."""
    return FakeSpotifyApi()


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at 2026-01-01 12:00 UTC."""
    return FakeClock()


@pytest.fixture
async def http_client(fake_api: FakeSpotifyApi) -> AsyncIterator[httpx.AsyncClient]:
    """AsyncClient routed to the fake API."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler)) as client:
        yield client


@pytest.fixture
async def catalog_client(
    http_client: httpx.AsyncClient, clock: FakeClock
) -> AsyncIterator[CatalogClient]:
    """CatalogClient wired to the fake API and the fake clock."""
    client = CatalogClient.from_combined_credentials(
        "test-id:test-secret",
        settings=SpotifySettings(),
        http_client=http_client,
        clock=clock,
    )
    yield client
    await client.close()
