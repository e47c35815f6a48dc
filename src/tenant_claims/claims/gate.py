"""
tenant_claims.claims.gate

Role-set authorization gate.

Responsibilities:
- Evaluate a role requirement (ANY / ALL) against the published claims state for a tenant.
- Produce `AccessDecision` values with enough detail for an "access denied" view.
- Expose the refresh action used after out-of-band role grants.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from tenant_claims.claims.errors import DenialReason
from tenant_claims.claims.models import Role
from tenant_claims.claims.resolver import resolve_tenant_role
from tenant_claims.claims.state import ClaimsState
from tenant_claims.claims.store import ClaimsStore
from tenant_claims.observability.logging import get_logger

log = get_logger(__name__)

ADMIN: frozenset[Role] = frozenset({Role.admin})
RECRUITER: frozenset[Role] = frozenset({Role.recruiter})
MANAGER: frozenset[Role] = frozenset({Role.manager})
RECRUITER_OR_MANAGER: frozenset[Role] = frozenset({Role.recruiter, Role.manager})


@dataclass(frozen=True, slots=True)
class AccessDecision:
    granted: bool
    missing_roles: frozenset[Role] = frozenset()
    evaluated_tenant_id: str | None = None
    diagnostic: str | None = None
    reason: DenialReason | None = None
    # True while claims are still loading: not a grant, but not a hard denial either.
    loading: bool = False
    current_role: Role | None = None
    current_security_level: str | None = None


class AuthorizationGate:
    """
    Synchronous evaluation over the store's last published state; never performs I/O.
    """

    def __init__(self, store: ClaimsStore) -> None:
        self._store = store

    def evaluate(
        self,
        required_roles: Iterable[Role | str],
        *,
        tenant_id: str | None = None,
        require_all: bool = False,
    ) -> AccessDecision:
        required = _normalize_roles(required_roles)
        return evaluate_access(
            self._store.state,
            required,
            tenant_id=tenant_id,
            require_all=require_all,
        )

    def allows(
        self,
        required_roles: Iterable[Role | str],
        *,
        tenant_id: str | None = None,
        require_all: bool = False,
    ) -> bool:
        return self.evaluate(required_roles, tenant_id=tenant_id, require_all=require_all).granted

    def allows_role(self, role: Role | str, *, tenant_id: str | None = None) -> bool:
        return self.allows([role], tenant_id=tenant_id)

    async def refresh(self) -> ClaimsState:
        # Raises RefreshFailedError; the previous state stays published.
        return await self._store.refresh()


def evaluate_access(
    state: ClaimsState,
    required: frozenset[Role],
    *,
    tenant_id: str | None = None,
    require_all: bool = False,
) -> AccessDecision:
    if not required:
        raise ValueError("required_roles must not be empty")

    if state.loading:
        return AccessDecision(
            granted=False,
            evaluated_tenant_id=tenant_id,
            diagnostic="claims loading",
            reason=DenialReason.loading,
            loading=True,
        )

    if not state.authenticated:
        return AccessDecision(
            granted=False,
            missing_roles=required,
            evaluated_tenant_id=tenant_id,
            diagnostic="not authenticated",
            reason=DenialReason.unauthenticated,
        )

    context = state.context
    if context is None:
        return AccessDecision(
            granted=False,
            missing_roles=required,
            evaluated_tenant_id=tenant_id,
            diagnostic=state.error or "claims unavailable",
            reason=DenialReason.claims_unavailable,
        )

    target = tenant_id or context.active_tenant_id

    # Platform operators (orgType, never a stored role) bypass tenant-scoped checks.
    if context.principal.is_platform_operator:
        return AccessDecision(
            granted=True,
            evaluated_tenant_id=target,
            current_role=context.role,
            current_security_level=context.security_level,
        )

    if target is None:
        return AccessDecision(
            granted=False,
            missing_roles=required,
            diagnostic="no tenant selected",
            reason=DenialReason.no_tenant_selected,
            current_role=context.role,
            current_security_level=context.security_level,
        )

    assignment = resolve_tenant_role(context.principal, target)
    if require_all:
        # One role per tenant: ALL can only hold when the requirement is exactly that role.
        granted = required == {assignment.role}
    else:
        granted = assignment.role in required

    if granted:
        return AccessDecision(
            granted=True,
            evaluated_tenant_id=target,
            current_role=assignment.role,
            current_security_level=assignment.security_level,
        )

    missing = required - {assignment.role}
    log.debug(
        "access_denied",
        tenant_id=target,
        role=assignment.role.value,
        missing_roles=sorted(missing),
        require_all=require_all,
    )
    return AccessDecision(
        granted=False,
        missing_roles=missing,
        evaluated_tenant_id=target,
        diagnostic=(
            f"role {assignment.role.value} in tenant {target} does not satisfy "
            f"{'all of' if require_all else 'any of'} {', '.join(sorted(required))}"
        ),
        reason=DenialReason.role_missing,
        current_role=assignment.role,
        current_security_level=assignment.security_level,
    )


def _normalize_roles(roles: Iterable[Role | str]) -> frozenset[Role]:
    # Unknown role names are a caller bug here (unlike stored claims, which degrade).
    return frozenset(r if isinstance(r, Role) else Role(r) for r in roles)


# --- Module Notes -----------------------------------------------------------
# `evaluate_access` is a pure function of (state, requirement) so views can re-run it on every
# published `ClaimsState` without touching the store.
