"""
tests.test_claims_refresh

Backend claims refresh client tests.

Responsibilities:
- Verify the request shape (path, body, bearer token).
- Verify HTTP failures surface as `RefreshFailedError`.
"""

from __future__ import annotations

import json

import httpx
import pytest

from tenant_claims.backend.claims_refresh import ClaimsRefreshClient, create_http_client
from tenant_claims.claims.errors import RefreshFailedError
from tenant_claims.settings import Settings


@pytest.mark.asyncio
async def test_refresh_request_shape() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ver": 2})

    async def token() -> str:
        return "id-token"

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="http://backend") as http:
        client = ClaimsRefreshClient(http=http, token_provider=token)
        body = await client.refresh_claims(principal_id="u1")

    assert body == {"ver": 2}
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/refreshUserClaims"
    assert seen[0].headers["Authorization"] == "Bearer id-token"
    assert json.loads(seen[0].content) == {"uid": "u1"}


@pytest.mark.asyncio
async def test_empty_response_body() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(204))
    async with httpx.AsyncClient(transport=transport, base_url="http://backend") as http:
        body = await ClaimsRefreshClient(http=http).refresh_claims(principal_id="u1")

    assert body == {}


@pytest.mark.asyncio
async def test_http_errors_raise_refresh_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://backend"
    ) as http:
        client = ClaimsRefreshClient(http=http)
        with pytest.raises(RefreshFailedError):
            await client.refresh_claims(principal_id="u1")


def test_http_client_requires_base_url() -> None:
    with pytest.raises(ValueError):
        create_http_client(Settings(env="test", backend_base_url=None))


@pytest.mark.asyncio
async def test_http_client_uses_settings() -> None:
    settings = Settings(env="test", backend_base_url="http://backend", backend_timeout_seconds=3)
    async with create_http_client(settings) as http:
        assert str(http.base_url) == "http://backend"
        assert http.timeout.read == 3


# --- Module Notes -----------------------------------------------------------
# The backend function itself is out of scope; only the client boundary is exercised.
