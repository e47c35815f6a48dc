"""
tenant_claims.claims.modules

Module entitlement aggregation.

Responsibilities:
- Represent module entitlements as a typed set with an explicit "all modules" sentinel.
- Union the module lists of every tenant a principal belongs to, plus one level of child
  tenants, fanning out reads concurrently.
- Skip tenants whose read fails instead of aborting the aggregation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar

from tenant_claims.claims.access_role import is_platform_partition
from tenant_claims.claims.errors import TenantUnreachableError
from tenant_claims.claims.models import TenantDocument, parse_tenant_document
from tenant_claims.documents.base import DocumentStore
from tenant_claims.observability.logging import get_logger
from tenant_claims.settings import Settings, get_settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ModuleSet:
    """
    Modules visible to a principal. `universal` is the platform-operator sentinel; check
    entitlement with `allows()` rather than looking for a wildcard string.
    """

    WILDCARD: ClassVar[str] = "*"

    modules: frozenset[str] = frozenset()
    universal: bool = False

    @classmethod
    def everything(cls) -> ModuleSet:
        return cls(universal=True)

    @classmethod
    def of(cls, modules: Iterable[str]) -> ModuleSet:
        return cls(modules=frozenset(modules))

    @property
    def is_universal(self) -> bool:
        return self.universal

    def allows(self, module_id: str) -> bool:
        return self.universal or module_id in self.modules

    def as_wire(self) -> frozenset[str]:
        # Wire/UI representation: the universal set is spelled {"*"}.
        return frozenset({self.WILDCARD}) if self.universal else self.modules

    def __len__(self) -> int:
        return len(self.as_wire())


NO_MODULES = ModuleSet()


class ModuleEntitlementAggregator:
    def __init__(self, *, store: DocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    async def aggregate(self, *, tenant_ids: Iterable[str], access_role: str) -> ModuleSet:
        if is_platform_partition(access_role):
            return ModuleSet.everything()

        ids = sorted(set(tenant_ids))
        if not ids:
            return NO_MODULES

        semaphore = asyncio.Semaphore(self._settings.aggregation_concurrency)
        per_tenant = await asyncio.gather(*(self._tenant_modules(t, semaphore) for t in ids))

        merged: set[str] = set()
        for modules in per_tenant:
            merged.update(modules)

        log.info("modules_aggregated", tenants=len(ids), modules=sorted(merged))
        return ModuleSet.of(merged)

    async def _tenant_modules(self, tenant_id: str, semaphore: asyncio.Semaphore) -> set[str]:
        doc = await self._reachable(tenant_id, semaphore)
        if doc is None:
            return set()

        modules = set(doc.modules)
        # Hierarchy depth is one level: children's own `tenants` lists are not followed.
        children = await asyncio.gather(*(self._reachable(c, semaphore) for c in doc.tenants))
        for child in children:
            if child is not None:
                modules.update(child.modules)
        return modules

    async def _reachable(
        self, tenant_id: str, semaphore: asyncio.Semaphore
    ) -> TenantDocument | None:
        try:
            return await self._read_tenant(tenant_id, semaphore)
        except TenantUnreachableError as e:
            log.warning("tenant_unreachable", tenant_id=e.tenant_id, error=e.cause)
            return None

    async def _read_tenant(self, tenant_id: str, semaphore: asyncio.Semaphore) -> TenantDocument:
        try:
            async with semaphore:
                snapshot = await self._store.get(self._settings.tenants_collection, tenant_id)
        except Exception as e:
            # Any adapter or transport failure excludes this tenant only.
            raise TenantUnreachableError(tenant_id, str(e) or type(e).__name__) from e

        if not snapshot.exists:
            raise TenantUnreachableError(tenant_id, "document missing")
        return parse_tenant_document(snapshot.data)


# --- Module Notes -----------------------------------------------------------
# The claims store runs `aggregate` as a separate task per snapshot so role fields are never
# held back by tenant reads; stale runs are cancelled by the store.
