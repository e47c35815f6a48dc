"""
tenant_claims.claims.errors

Error taxonomy for the claims engine.

Responsibilities:
- Define store-layer exceptions raised by document store adapters and the refresh path.
- Define the non-exceptional denial reasons carried on `AccessDecision`.
"""

from __future__ import annotations

import enum


class DenialReason(enum.StrEnum):
    # Why a gate evaluation did not grant; stable values consumed by UI "access denied" views.
    loading = "LOADING"
    unauthenticated = "UNAUTHENTICATED"
    claims_unavailable = "CLAIMS_UNAVAILABLE"
    no_tenant_selected = "NO_TENANT_SELECTED"
    role_missing = "ROLE_MISSING"


class ClaimsError(Exception):
    pass


class DocumentStoreError(ClaimsError):
    """
    Raised by document store adapters when a read, write or subscription fails.
    """


class DocumentExistsError(ClaimsError):
    """
    Raised by `DocumentStore.create` when the target document already exists.
    """

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"document {collection}/{doc_id} already exists")
        self.collection = collection
        self.doc_id = doc_id


class TenantUnreachableError(ClaimsError):
    # Recovered locally by the aggregator (the tenant is excluded), never surfaced to gates.
    def __init__(self, tenant_id: str, cause: str) -> None:
        super().__init__(f"tenant {tenant_id} unreachable: {cause}")
        self.tenant_id = tenant_id
        self.cause = cause


class RefreshFailedError(ClaimsError):
    pass


class NotSignedInError(ClaimsError):
    pass


# --- Module Notes -----------------------------------------------------------
# Resolution helpers (resolver, access role composer) never raise; they degrade to defaults.
# Only store-layer operations surface these exceptions.
