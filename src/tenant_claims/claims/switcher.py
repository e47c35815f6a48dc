"""
tenant_claims.claims.switcher

Active-tenant switching.

Responsibilities:
- Validate that the principal belongs to the requested tenant.
- Persist `activeTenantId` to the claims document (the only non-bootstrap writer).
- Leave in-memory state alone; the claims store republishes from its subscription.
"""

from __future__ import annotations

from dataclasses import dataclass

from tenant_claims.claims.models import parse_claims_document
from tenant_claims.claims.store import ClaimsStore
from tenant_claims.documents.base import DocumentStore
from tenant_claims.observability.logging import get_logger
from tenant_claims.settings import Settings, get_settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TenantSwitchResult:
    tenant_id: str
    switched: bool
    diagnostic: str | None = None


class TenantSwitcher:
    def __init__(
        self,
        *,
        store: ClaimsStore,
        documents: DocumentStore,
        settings: Settings | None = None,
    ) -> None:
        self._store = store
        self._documents = documents
        self._settings = settings or get_settings()

    async def switch_to(self, tenant_id: str) -> TenantSwitchResult:
        # Raises NotSignedInError when nobody is signed in.
        principal_id = self._store.require_principal()

        # Validate against the stored document, not the cached state, right before writing.
        snapshot = await self._documents.get(self._settings.users_collection, principal_id)
        if not snapshot.exists:
            return TenantSwitchResult(
                tenant_id=tenant_id, switched=False, diagnostic="claims document missing"
            )

        principal = parse_claims_document(snapshot.data).to_principal(principal_id)
        if not principal.belongs_to(tenant_id):
            log.info("tenant_switch_rejected", tenant_id=tenant_id)
            return TenantSwitchResult(
                tenant_id=tenant_id,
                switched=False,
                diagnostic=f"principal does not belong to tenant {tenant_id}",
            )
        if principal.active_tenant_id == tenant_id:
            return TenantSwitchResult(
                tenant_id=tenant_id, switched=False, diagnostic="tenant already active"
            )

        await self._documents.update(
            self._settings.users_collection,
            principal_id,
            {"activeTenantId": tenant_id},
        )
        log.info("tenant_switched", tenant_id=tenant_id, previous=principal.active_tenant_id)
        return TenantSwitchResult(tenant_id=tenant_id, switched=True)


# --- Module Notes -----------------------------------------------------------
# `update` merges a single field so concurrent role changes in the same document survive.
