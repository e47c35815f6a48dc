"""
tenant_claims.claims.resolver

Tenant-role resolution.

Responsibilities:
- Resolve a principal's role and security level for a tenant (total, never raises).
- Choose the target tenant for a principal (active tenant, else first membership).
"""

from __future__ import annotations

from tenant_claims.claims.models import HARD_DEFAULT_ASSIGNMENT, Principal, RoleAssignment


def resolve_tenant_role(principal: Principal, tenant_id: str | None) -> RoleAssignment:
    """
    Precedence:
    1. explicit assignment for `tenant_id`
    2. the principal's top-level role / security level
    3. `HARD_DEFAULT_ASSIGNMENT` (Tenant, "5")
    """

    if tenant_id is not None:
        assignment = principal.tenant_roles.get(tenant_id)
        if assignment is not None:
            return assignment

    if principal.role is not None or principal.security_level is not None:
        return RoleAssignment(
            role=principal.role or HARD_DEFAULT_ASSIGNMENT.role,
            security_level=principal.security_level or HARD_DEFAULT_ASSIGNMENT.security_level,
        )

    return HARD_DEFAULT_ASSIGNMENT


def select_target_tenant(principal: Principal) -> str | None:
    if principal.belongs_to(principal.active_tenant_id):
        return principal.active_tenant_id
    if principal.tenant_roles:
        # Lexicographic rather than document order so the choice is stable across snapshots.
        return min(principal.tenant_roles)
    return None


# --- Module Notes -----------------------------------------------------------
# Callers rely on totality here: partial or malformed claims must still yield a decision.
