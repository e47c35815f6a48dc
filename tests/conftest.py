"""
tests.conftest

Shared fixtures for the claims engine test-suite.

Responsibilities:
- Build isolated settings, in-memory document stores and claims stores per test.
"""

from __future__ import annotations

import pytest

from tenant_claims.claims.gate import AuthorizationGate
from tenant_claims.claims.store import ClaimsStore
from tenant_claims.documents.memory import InMemoryDocumentStore
from tenant_claims.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test")


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def store(documents: InMemoryDocumentStore, settings: Settings) -> ClaimsStore:
    return ClaimsStore(documents=documents, settings=settings)


@pytest.fixture
def gate(store: ClaimsStore) -> AuthorizationGate:
    return AuthorizationGate(store)


# --- Module Notes -----------------------------------------------------------
# The in-memory store notifies subscribers synchronously, so most tests can assert on
# `store.state` right after a write without sleeping.
