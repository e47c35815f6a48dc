"""
tenant_claims.claims.store

Live claims store for the signed-in principal.

Responsibilities:
- Own the session lifecycle: subscribe on sign-in, tear down on sign-out.
- Bootstrap a default claims document for brand-new principals (exactly once).
- Turn each document snapshot into a `ResolvedContext` and republish `ClaimsState`.
- Aggregate module entitlements per snapshot in a cancellable background task.
- Re-read claims out-of-band on `refresh()`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import replace

from tenant_claims.backend.claims_refresh import ClaimsRefreshClient
from tenant_claims.claims.errors import (
    DocumentExistsError,
    DocumentStoreError,
    NotSignedInError,
    RefreshFailedError,
)
from tenant_claims.claims.models import Principal, default_claims_document, parse_claims_document
from tenant_claims.claims.modules import ModuleEntitlementAggregator
from tenant_claims.claims.state import (
    ANONYMOUS_STATE,
    ClaimsState,
    ResolvedContext,
    resolve_context,
)
from tenant_claims.documents.base import DocumentSnapshot, DocumentStore, Subscription
from tenant_claims.observability.context import bind_principal, clear_principal
from tenant_claims.observability.logging import get_logger
from tenant_claims.settings import Settings, get_settings

log = get_logger(__name__)

StateListener = Callable[[ClaimsState], None]


class ClaimsStore:
    """
    Single-writer state machine over the principal's claims document.

    Inbound: document snapshots (subscription) and out-of-band reads (`refresh`).
    Outbound writes: only `ensure_claims_document` (bootstrap). The snapshot handler never
    writes, so a published state can never re-trigger itself.
    """

    def __init__(
        self,
        *,
        documents: DocumentStore,
        settings: Settings | None = None,
        aggregator: ModuleEntitlementAggregator | None = None,
        refresher: ClaimsRefreshClient | None = None,
    ) -> None:
        self._documents = documents
        self._settings = settings or get_settings()
        self._aggregator = aggregator or ModuleEntitlementAggregator(
            store=documents, settings=self._settings
        )
        self._refresher = refresher

        self._state: ClaimsState = ANONYMOUS_STATE
        self._listeners: list[StateListener] = []
        self._principal_id: str | None = None
        self._email: str | None = None
        self._subscription: Subscription | None = None
        self._aggregation: asyncio.Task[None] | None = None
        self._bootstrap_lock = asyncio.Lock()
        self._ready = asyncio.Event()
        # Bumped on every applied snapshot and on sign-in/out; stale async work compares it.
        self._generation = 0

    @property
    def state(self) -> ClaimsState:
        return self._state

    @property
    def principal_id(self) -> str | None:
        return self._principal_id

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # --- Lifecycle ------------------------------------------------------------

    async def on_signed_in(self, principal_id: str, *, email: str | None = None) -> None:
        if principal_id == self._principal_id:
            return
        if self._principal_id is not None:
            self.on_signed_out()

        bind_principal(principal_id)
        self._principal_id = principal_id
        self._email = email
        self._generation += 1
        self._publish(ClaimsState(principal_id=principal_id, loading=True))

        self._subscription = self._documents.subscribe(
            self._settings.users_collection,
            principal_id,
            self._on_snapshot,
            self._on_subscription_error,
        )
        log.info("claims_subscribed")

        try:
            await self.ensure_claims_document()
        except DocumentStoreError as e:
            if principal_id == self._principal_id:
                log.warning("claims_bootstrap_failed", error=str(e))
                self._publish(replace(self._state, loading=False, error=str(e)))

    def on_signed_out(self) -> None:
        if self._principal_id is None and self._subscription is None:
            return

        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self._cancel_aggregation()

        self._principal_id = None
        self._email = None
        self._generation += 1
        self._ready.clear()
        self._publish(ANONYMOUS_STATE)
        log.info("claims_signed_out")
        clear_principal()

    async def ensure_claims_document(self) -> bool:
        """
        Write the default claims document if the principal has none.

        Returns True only for the call that actually wrote. The published state is not touched
        here; the subscription re-fires with the stored document.
        """

        principal_id = self.require_principal()
        async with self._bootstrap_lock:
            if principal_id != self._principal_id:
                return False

            # Re-check immediately before writing; `create` also refuses to overwrite.
            snapshot = await self._documents.get(self._settings.users_collection, principal_id)
            if snapshot.exists or principal_id != self._principal_id:
                return False

            doc = default_claims_document(
                email=self._email,
                security_level=self._settings.bootstrap_security_level,
                org_type=self._settings.bootstrap_org_type,
            )
            try:
                await self._documents.create(self._settings.users_collection, principal_id, doc)
            except DocumentExistsError:
                log.info("claims_bootstrap_skipped", reason="created concurrently")
                return False

        log.info("claims_bootstrap_written")
        return True

    async def refresh(self) -> ClaimsState:
        principal_id = self.require_principal()
        generation = self._generation

        try:
            if self._refresher is not None:
                await self._refresher.refresh_claims(principal_id=principal_id)
            snapshot = await self._documents.get(self._settings.users_collection, principal_id)
        except (DocumentStoreError, RefreshFailedError) as e:
            log.warning("claims_refresh_failed", error=str(e))
            if principal_id == self._principal_id:
                self._publish(replace(self._state, error=str(e)))
            raise RefreshFailedError(str(e)) from e

        if principal_id != self._principal_id:
            return self._state
        if generation != self._generation:
            # A newer snapshot arrived while we were reading; it is authoritative.
            return self._state
        if not snapshot.exists:
            await self.ensure_claims_document()
            return self._state

        self._apply(parse_claims_document(snapshot.data).to_principal(principal_id))
        return self._state

    async def wait_until_ready(self, *, timeout: float | None = None) -> ClaimsState:
        await asyncio.wait_for(self._ready.wait(), timeout=timeout)
        return self._state

    async def modules_settled(self) -> ClaimsState:
        # Awaits the in-flight aggregation (if any); newer snapshots may start another.
        while self._aggregation is not None and not self._aggregation.done():
            task = self._aggregation
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if task is self._aggregation:
                    raise
        return self._state

    # --- Snapshot handling ----------------------------------------------------

    def _on_snapshot(self, snapshot: DocumentSnapshot) -> None:
        principal_id = self._principal_id
        if principal_id is None or snapshot.doc_id != principal_id:
            return
        if not snapshot.exists:
            # Bootstrap is in progress (or failed); wait for the next snapshot.
            log.info("claims_document_missing")
            return
        self._apply(parse_claims_document(snapshot.data).to_principal(principal_id))

    def _on_subscription_error(self, error: Exception) -> None:
        log.warning("claims_subscription_error", error=str(error))
        if self._principal_id is None:
            return
        # Keep the last known context; gates keep evaluating against it.
        self._publish(replace(self._state, loading=False, error=str(error)))

    def _apply(self, principal: Principal) -> None:
        self._generation += 1
        generation = self._generation
        context = resolve_context(principal)

        self._cancel_aggregation()
        self._publish(
            replace(
                self._state,
                context=context,
                loading=False,
                modules_loading=True,
                error=None,
            )
        )
        self._ready.set()
        log.info(
            "claims_snapshot",
            role=context.role.value,
            security_level=context.security_level,
            access_role=context.access_role,
            active_tenant_id=context.active_tenant_id,
        )

        self._aggregation = asyncio.get_running_loop().create_task(
            self._aggregate_modules(generation=generation, context=context)
        )

    async def _aggregate_modules(self, *, generation: int, context: ResolvedContext) -> None:
        try:
            modules = await self._aggregator.aggregate(
                tenant_ids=context.tenant_ids,
                access_role=context.access_role,
            )
        except Exception as e:
            if generation != self._generation:
                return
            log.warning("modules_aggregation_failed", error=str(e))
            self._publish(replace(self._state, modules_loading=False, error=str(e)))
            return
        if generation != self._generation:
            return
        self._publish(replace(self._state, modules=modules, modules_loading=False))

    # --- Helpers --------------------------------------------------------------

    def _cancel_aggregation(self) -> None:
        if self._aggregation is not None and not self._aggregation.done():
            self._aggregation.cancel()
        self._aggregation = None

    def require_principal(self) -> str:
        if self._principal_id is None:
            raise NotSignedInError("no principal is signed in")
        return self._principal_id

    def _publish(self, state: ClaimsState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)


# --- Module Notes -----------------------------------------------------------
# Writes to the claims document happen only in `ensure_claims_document` (here) and in
# `claims.switcher.TenantSwitcher`; neither is reachable from `_on_snapshot`.
