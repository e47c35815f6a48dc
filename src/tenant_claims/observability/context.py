"""
tenant_claims.observability.context

Session-scoped logging context.

Responsibilities:
- Bind the signed-in principal id into structlog contextvars.
- Clear it again on sign-out so identities never leak between sessions.
"""

from __future__ import annotations

import structlog

_PRINCIPAL_KEY = "principal_id"


def bind_principal(principal_id: str) -> None:
    structlog.contextvars.bind_contextvars(**{_PRINCIPAL_KEY: principal_id})


def clear_principal() -> None:
    structlog.contextvars.unbind_contextvars(_PRINCIPAL_KEY)


# --- Module Notes -----------------------------------------------------------
# `ClaimsStore.on_signed_in` / `on_signed_out` own the bind/clear calls; tasks spawned while
# a principal is bound inherit the context automatically.
