"""
tenant_claims.claims.state

Published claims state.

Responsibilities:
- Define `ResolvedContext`, the derived role/tenant view gates evaluate against.
- Define `ClaimsState`, the full value the claims store republishes (context + modules +
  loading/error flags).
- Derive a `ResolvedContext` from a `Principal`.
"""

from __future__ import annotations

from dataclasses import dataclass

from tenant_claims.claims.access_role import compose_access_role
from tenant_claims.claims.models import ANONYMOUS_ASSIGNMENT, Principal, Role
from tenant_claims.claims.modules import NO_MODULES, ModuleSet
from tenant_claims.claims.resolver import resolve_tenant_role, select_target_tenant


@dataclass(frozen=True, slots=True)
class ResolvedContext:
    principal: Principal
    role: Role
    security_level: str
    access_role: str
    active_tenant_id: str | None

    @property
    def is_platform_operator(self) -> bool:
        # Derived from orgType only; a stored role value never confers platform status.
        return self.principal.is_platform_operator

    @property
    def tenant_ids(self) -> frozenset[str]:
        return self.principal.tenant_ids


def resolve_context(principal: Principal) -> ResolvedContext:
    target = select_target_tenant(principal)
    assignment = resolve_tenant_role(principal, target)
    # The partition follows orgType alone; tenant roles only pick the security level.
    partition_role = Role.platform_operator if principal.is_platform_operator else Role.tenant
    return ResolvedContext(
        principal=principal,
        role=assignment.role,
        security_level=assignment.security_level,
        access_role=compose_access_role(partition_role, assignment.security_level),
        active_tenant_id=target,
    )


@dataclass(frozen=True, slots=True)
class ClaimsState:
    principal_id: str | None = None
    context: ResolvedContext | None = None
    loading: bool = False
    # Published independently of `context`; may lag one snapshot behind.
    modules: ModuleSet = NO_MODULES
    modules_loading: bool = False
    error: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.principal_id is not None

    @property
    def role(self) -> Role:
        return self.context.role if self.context else ANONYMOUS_ASSIGNMENT.role

    @property
    def security_level(self) -> str:
        return self.context.security_level if self.context else ANONYMOUS_ASSIGNMENT.security_level

    @property
    def active_tenant_id(self) -> str | None:
        return self.context.active_tenant_id if self.context else None


ANONYMOUS_STATE = ClaimsState()


# --- Module Notes -----------------------------------------------------------
# `ClaimsState` instances are immutable; the store replaces the whole value on every change
# so listeners never observe a half-updated state.
