"""
tenant_claims.backend.claims_refresh

HTTP client boundary for the backend claims functions.

Responsibilities:
- Call the backend `refreshUserClaims` function so upstream role grants are re-applied.
- Attach the caller's bearer token when a token provider is configured.
- Convert transport/HTTP failures into `RefreshFailedError`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from tenant_claims.claims.errors import RefreshFailedError
from tenant_claims.observability.logging import get_logger
from tenant_claims.settings import Settings

log = get_logger(__name__)

TokenProvider = Callable[[], Awaitable[str | None]]


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    if not settings.backend_base_url:
        raise ValueError("backend_base_url is not configured")
    return httpx.AsyncClient(
        base_url=settings.backend_base_url,
        timeout=settings.backend_timeout_seconds,
    )


class ClaimsRefreshClient:
    """
    The claims store depends on this interface for `refresh()`; the backend itself (token
    issuance, claims verification) lives outside this package.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._http = http
        self._token_provider = token_provider

    async def _headers(self) -> dict[str, str]:
        if self._token_provider is None:
            return {}
        token = await self._token_provider()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def refresh_claims(self, *, principal_id: str) -> dict[str, Any]:
        try:
            r = await self._http.post(
                "/refreshUserClaims",
                headers=await self._headers(),
                json={"uid": principal_id},
            )
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise RefreshFailedError(f"refreshUserClaims failed: {e}") from e

        log.info("claims_refresh_requested", status_code=r.status_code)
        # The function may return an empty body; callers only need the side effect.
        return r.json() if r.content else {}


# --- Module Notes -----------------------------------------------------------
# Retries/backoff belong in the httpx transport configured by the host application.
