"""
tenant_claims.documents.base

Document store boundary used by the claims engine.

Responsibilities:
- Define the snapshot type delivered by reads and subscriptions.
- Define the `DocumentStore` protocol (point reads, writes, live subscriptions).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

SnapshotListener = Callable[["DocumentSnapshot"], None]
ErrorListener = Callable[[Exception], None]


@dataclass(frozen=True, slots=True)
class DocumentSnapshot:
    collection: str
    doc_id: str
    exists: bool
    data: Mapping[str, Any] = field(default_factory=dict)


class Subscription(Protocol):
    def close(self) -> None: ...


class DocumentStore(Protocol):
    """
    Reactive key-value collaborator (e.g. a Firestore-like backend).

    Adapters raise `DocumentStoreError` for transport/backend failures and
    `DocumentExistsError` from `create` when the document is already present.
    """

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot: ...

    async def create(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None: ...

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None: ...

    def subscribe(
        self,
        collection: str,
        doc_id: str,
        on_snapshot: SnapshotListener,
        on_error: ErrorListener | None = None,
    ) -> Subscription: ...


# --- Module Notes -----------------------------------------------------------
# Listeners are plain callables invoked in the store's delivery order; the claims store keeps
# its listener synchronous and schedules any follow-up I/O as separate tasks.
