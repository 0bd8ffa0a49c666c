"""Tests for the Redis-backed rate limiter middleware."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from core import create_access_token
from services import RateLimiter, set_rate_limiter
from services.rate_limiter import default_client_identifier


class InMemoryRedis:
    def __init__(self) -> None:
        self.data: dict[str, int] = {}

    async def incr(self, key: str) -> int:  # pragma: no cover - simple helper
        value = self.data.get(key, 0) + 1
        self.data[key] = value
        return value

    async def expire(self, key: str, ttl: int) -> None:  # pragma: no cover - noop
        return None


class BrokenRedis:
    async def incr(self, key: str) -> int:
        raise ConnectionError("redis down")

    async def expire(self, key: str, ttl: int) -> None:  # pragma: no cover - unreachable
        return None


def _build_request(
    *,
    cookie_header: str | None = None,
    authorization: str | None = None,
    client_host: str = "10.0.0.12",
) -> Request:
    headers: list[tuple[bytes, bytes]] = []
    if cookie_header is not None:
        headers.append((b"cookie", cookie_header.encode("ascii")))
    if authorization is not None:
        headers.append((b"authorization", authorization.encode("ascii")))
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": headers,
        "query_string": b"",
        "client": (client_host, 1234),
        "app": None,
    }
    return Request(scope)


def test_default_client_identifier_uses_access_cookie() -> None:
    access_token = create_access_token("user-access")
    request = _build_request(cookie_header=f"access_token={access_token}")

    assert default_client_identifier(request) == "user:user-access"


def test_default_client_identifier_prefers_bearer_token() -> None:
    bearer_token = create_access_token("user-bearer")
    cookie_token = create_access_token("user-cookie")
    request = _build_request(
        authorization=f"Bearer {bearer_token}",
        cookie_header=f"access_token={cookie_token}",
    )

    assert default_client_identifier(request) == "user:user-bearer"


def test_default_client_identifier_falls_back_to_client_ip_for_bad_tokens() -> None:
    request = _build_request(authorization="Bearer not-a-jwt")

    assert default_client_identifier(request) == "ip:10.0.0.12"


@pytest.mark.asyncio
async def test_rate_limiter_blocks_after_threshold(async_client: AsyncClient) -> None:
    set_rate_limiter(RateLimiter(InMemoryRedis(), limit=2, window_seconds=60))

    first = await async_client.get("/api/v1/users/search", params={"q": "x"})
    second = await async_client.get("/api/v1/users/search", params={"q": "x"})
    third = await async_client.get("/api/v1/users/search", params={"q": "x"})

    assert first.status_code == 200
    assert second.status_code == 200
    assert third.status_code == 429
    body = third.json()
    assert body["success"] is False
    assert body["message"] == "Too many requests"


@pytest.mark.asyncio
async def test_health_is_exempt_from_rate_limit(async_client: AsyncClient) -> None:
    set_rate_limiter(RateLimiter(InMemoryRedis(), limit=1, window_seconds=60))

    for _ in range(3):
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["data"] == {"status": "ok"}


@pytest.mark.asyncio
async def test_rate_limiter_can_be_disabled(async_client: AsyncClient) -> None:
    set_rate_limiter(RateLimiter(InMemoryRedis(), limit=0, window_seconds=60))

    for _ in range(5):
        response = await async_client.get("/api/v1/users/search", params={"q": "x"})
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_rate_limiter_fails_open_when_redis_is_down(async_client: AsyncClient) -> None:
    set_rate_limiter(RateLimiter(BrokenRedis(), limit=1, window_seconds=60))

    response = await async_client.get("/api/v1/users/search", params={"q": "x"})

    assert response.status_code == 200
