"""
tests.test_modules

Module entitlement aggregation tests.

Responsibilities:
- Verify one-level hierarchy unions, platform short-circuit and failure tolerance.
- Verify order independence of the aggregated set.
"""

from __future__ import annotations

import itertools

import pytest

from tenant_claims.claims.modules import NO_MODULES, ModuleEntitlementAggregator, ModuleSet
from tenant_claims.documents.memory import InMemoryDocumentStore
from tenant_claims.settings import Settings, get_settings
from tests.helpers import ResettingDocumentStore


@pytest.fixture
def aggregator(documents: InMemoryDocumentStore, settings: Settings) -> ModuleEntitlementAggregator:
    return ModuleEntitlementAggregator(store=documents, settings=settings)


@pytest.mark.asyncio
async def test_child_tenant_modules_are_inherited(
    documents: InMemoryDocumentStore, aggregator: ModuleEntitlementAggregator
) -> None:
    documents.seed("tenants", "A", {"modules": ["crm"], "tenants": ["A1"]})
    documents.seed("tenants", "A1", {"modules": ["jobs-board"]})

    modules = await aggregator.aggregate(tenant_ids=["A"], access_role="tenant_3")

    assert modules.as_wire() == frozenset({"crm", "jobs-board"})
    assert modules.allows("crm")
    assert not modules.allows("flex")


@pytest.mark.asyncio
async def test_hierarchy_is_one_level_deep(
    documents: InMemoryDocumentStore, aggregator: ModuleEntitlementAggregator
) -> None:
    documents.seed("tenants", "A", {"modules": ["crm"], "tenants": ["A1"]})
    documents.seed("tenants", "A1", {"modules": ["jobs-board"], "tenants": ["A2"]})
    documents.seed("tenants", "A2", {"modules": ["flex"]})

    modules = await aggregator.aggregate(tenant_ids=["A"], access_role="tenant_3")

    assert modules.as_wire() == frozenset({"crm", "jobs-board"})


@pytest.mark.asyncio
async def test_platform_partition_short_circuits(
    documents: InMemoryDocumentStore, aggregator: ModuleEntitlementAggregator
) -> None:
    documents.failing_reads.add(("tenants", "A"))

    modules = await aggregator.aggregate(tenant_ids=["A"], access_role="platform_5")

    assert modules.is_universal
    assert modules.allows("anything")
    assert modules.as_wire() == frozenset({"*"})


@pytest.mark.asyncio
async def test_unreachable_tenants_are_skipped(
    documents: InMemoryDocumentStore, aggregator: ModuleEntitlementAggregator
) -> None:
    documents.seed("tenants", "A", {"modules": ["crm"], "tenants": ["gone"]})
    documents.seed("tenants", "B", {"modules": ["jobs-board"]})
    documents.seed("tenants", "C", {"modules": ["flex"]})
    documents.failing_reads.add(("tenants", "C"))

    modules = await aggregator.aggregate(tenant_ids=["A", "B", "C", "deleted"], access_role="tenant_2")

    assert modules.as_wire() == frozenset({"crm", "jobs-board"})


@pytest.mark.asyncio
async def test_aggregation_is_order_independent_and_duplicate_free(
    documents: InMemoryDocumentStore, aggregator: ModuleEntitlementAggregator
) -> None:
    documents.seed("tenants", "A", {"modules": ["crm", "jobs-board"], "tenants": ["B"]})
    documents.seed("tenants", "B", {"modules": ["crm", "flex"]})
    documents.seed("tenants", "C", {"modules": ["flex", "customers"]})

    results = {
        await aggregator.aggregate(tenant_ids=order, access_role="tenant_4")
        for order in itertools.permutations(["A", "B", "C", "A"])
    }

    assert results == {ModuleSet.of({"crm", "jobs-board", "flex", "customers"})}


@pytest.mark.asyncio
async def test_no_tenants_means_no_modules(aggregator: ModuleEntitlementAggregator) -> None:
    assert await aggregator.aggregate(tenant_ids=[], access_role="tenant_5") == NO_MODULES


@pytest.mark.asyncio
async def test_raw_transport_errors_skip_only_that_tenant(settings: Settings) -> None:
    documents = ResettingDocumentStore({("tenants", "B"), ("tenants", "A2")})
    documents.seed("tenants", "A", {"modules": ["crm"], "tenants": ["A1", "A2"]})
    documents.seed("tenants", "A1", {"modules": ["flex"]})
    documents.seed("tenants", "B", {"modules": ["jobs-board"]})
    aggregator = ModuleEntitlementAggregator(store=documents, settings=settings)

    modules = await aggregator.aggregate(tenant_ids=["A", "B"], access_role="tenant_3")

    assert modules.as_wire() == frozenset({"crm", "flex"})


@pytest.mark.asyncio
async def test_default_settings_come_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TENANT_CLAIMS_TENANTS_COLLECTION", "orgs")
    get_settings.cache_clear()
    documents = InMemoryDocumentStore()
    documents.seed("orgs", "A", {"modules": ["crm"]})
    try:
        aggregator = ModuleEntitlementAggregator(store=documents)
        modules = await aggregator.aggregate(tenant_ids=["A"], access_role="tenant_3")
    finally:
        get_settings.cache_clear()

    assert modules.as_wire() == frozenset({"crm"})


def test_module_set_sentinel() -> None:
    assert not NO_MODULES.allows("crm")
    assert ModuleSet.everything() != ModuleSet.of({"*"})
    assert not ModuleSet.of({"*"}).allows("crm")


# --- Module Notes -----------------------------------------------------------
# The wildcard is only a wire spelling; `ModuleSet.of({"*"})` is not the universal set.
