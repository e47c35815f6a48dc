"""
tests.helpers

Test data builders and doubles shared across test modules.

Responsibilities:
- Build claims documents in the stored wire shape.
- Provide a gated aggregator for tests that need to control module aggregation timing.
- Provide fault-injecting doubles (raw transport errors, failing aggregation).
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from tenant_claims.claims.modules import ModuleSet
from tenant_claims.documents.base import DocumentSnapshot
from tenant_claims.documents.memory import InMemoryDocumentStore


def claims_doc(
    tenants: dict[str, tuple[str, str]] | list[str] | None = None,
    *,
    active: str | None = None,
    org_type: str = "Tenant",
    role: str | None = None,
    security_level: str | None = None,
) -> dict[str, Any]:
    doc: dict[str, Any] = {"orgType": org_type, "activeTenantId": active}
    if isinstance(tenants, dict):
        doc["tenantIds"] = {
            tid: {"role": r, "securityLevel": lvl} for tid, (r, lvl) in tenants.items()
        }
    elif tenants is not None:
        doc["tenantIds"] = list(tenants)
    if role is not None:
        doc["role"] = role
    if security_level is not None:
        doc["securityLevel"] = security_level
    return doc


class GatedAggregator:
    """
    Aggregator stand-in whose runs block until released; each run returns `mod-<tenant>`.
    """

    def __init__(self) -> None:
        self.runs: list[tuple[frozenset[str], asyncio.Event]] = []

    async def aggregate(self, *, tenant_ids: Iterable[str], access_role: str) -> ModuleSet:
        ids = frozenset(tenant_ids)
        release = asyncio.Event()
        self.runs.append((ids, release))
        await release.wait()
        return ModuleSet.of(f"mod-{t}" for t in ids)

    def release(self, tenant_ids: Iterable[str]) -> None:
        wanted = frozenset(tenant_ids)
        for ids, event in self.runs:
            if ids == wanted:
                event.set()

    def release_all(self) -> None:
        for _, event in self.runs:
            event.set()


class ResettingDocumentStore(InMemoryDocumentStore):
    """
    In-memory store whose reads of the given keys fail with a raw transport error.
    """

    def __init__(self, resetting: Iterable[tuple[str, str]]) -> None:
        super().__init__()
        self.resetting = set(resetting)

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        if (collection, doc_id) in self.resetting:
            raise ConnectionError("socket reset")
        return await super().get(collection, doc_id)


class FailingAggregator:
    async def aggregate(self, *, tenant_ids: Iterable[str], access_role: str) -> ModuleSet:
        raise RuntimeError("aggregation backend down")
