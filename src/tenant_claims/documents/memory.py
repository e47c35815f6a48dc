"""
tenant_claims.documents.memory

In-process `DocumentStore` implementation.

Responsibilities:
- Hold documents in memory keyed by (collection, doc_id).
- Deliver snapshots to subscribers on every write, in write order.
- Support fault injection (failing reads, subscription errors, latency) for tests and demos.
"""

from __future__ import annotations

import asyncio
import copy
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from tenant_claims.claims.errors import DocumentExistsError, DocumentStoreError
from tenant_claims.documents.base import DocumentSnapshot, ErrorListener, SnapshotListener

_Key = tuple[str, str]


class _MemorySubscription:
    def __init__(self, store: InMemoryDocumentStore, key: _Key, entry: _Listener) -> None:
        self._store = store
        self._key = key
        self._entry = entry
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._detach(self._key, self._entry)


class _Listener:
    __slots__ = ("on_snapshot", "on_error")

    def __init__(self, on_snapshot: SnapshotListener, on_error: ErrorListener | None) -> None:
        self.on_snapshot = on_snapshot
        self.on_error = on_error


class InMemoryDocumentStore:
    """
    Listeners are called synchronously from the writing coroutine, and once on subscribe with
    the current snapshot (missing documents are delivered with `exists=False`).
    """

    def __init__(self, *, latency: float = 0.0) -> None:
        self._docs: dict[_Key, dict[str, Any]] = {}
        self._listeners: dict[_Key, list[_Listener]] = defaultdict(list)
        self._latency = latency
        self.failing_reads: set[_Key] = set()
        # (operation, collection, doc_id) for every successful write.
        self.write_log: list[tuple[str, str, str]] = []

    def seed(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        # Test setup helper: no notification, no write log entry.
        self._docs[(collection, doc_id)] = copy.deepcopy(dict(data))

    def peek(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        data = self._docs.get((collection, doc_id))
        return copy.deepcopy(data) if data is not None else None

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        await self._pause()
        key = (collection, doc_id)
        if key in self.failing_reads:
            raise DocumentStoreError(f"read failed for {collection}/{doc_id}")
        return self._snapshot(key)

    async def create(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        await self._pause()
        key = (collection, doc_id)
        if key in self._docs:
            raise DocumentExistsError(collection, doc_id)
        self._write(key, "create", copy.deepcopy(dict(data)))

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        await self._pause()
        key = (collection, doc_id)
        current = self._docs.get(key)
        if current is None:
            raise DocumentStoreError(f"cannot update missing document {collection}/{doc_id}")
        merged = {**current, **copy.deepcopy(dict(fields))}
        self._write(key, "update", merged)

    def subscribe(
        self,
        collection: str,
        doc_id: str,
        on_snapshot: SnapshotListener,
        on_error: ErrorListener | None = None,
    ) -> _MemorySubscription:
        key = (collection, doc_id)
        entry = _Listener(on_snapshot, on_error)
        self._listeners[key].append(entry)
        sub = _MemorySubscription(self, key, entry)
        on_snapshot(self._snapshot(key))
        return sub

    def emit_error(self, collection: str, doc_id: str, error: Exception) -> None:
        for entry in list(self._listeners.get((collection, doc_id), [])):
            if entry.on_error is not None:
                entry.on_error(error)

    def listener_count(self, collection: str, doc_id: str) -> int:
        return len(self._listeners.get((collection, doc_id), []))

    def _detach(self, key: _Key, entry: _Listener) -> None:
        listeners = self._listeners.get(key)
        if listeners and entry in listeners:
            listeners.remove(entry)

    def _write(self, key: _Key, op: str, data: dict[str, Any]) -> None:
        self._docs[key] = data
        self.write_log.append((op, key[0], key[1]))
        snapshot = self._snapshot(key)
        for entry in list(self._listeners.get(key, [])):
            entry.on_snapshot(snapshot)

    def _snapshot(self, key: _Key) -> DocumentSnapshot:
        data = self._docs.get(key)
        if data is None:
            return DocumentSnapshot(collection=key[0], doc_id=key[1], exists=False)
        return DocumentSnapshot(
            collection=key[0], doc_id=key[1], exists=True, data=copy.deepcopy(data)
        )

    async def _pause(self) -> None:
        # Always yield so concurrent callers interleave like they would against a remote store.
        await asyncio.sleep(self._latency)


# --- Module Notes -----------------------------------------------------------
# Production wiring supplies an adapter over the real document backend with the same
# `DocumentStore` protocol; this implementation backs the test-suite.
