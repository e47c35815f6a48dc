"""
tenant_claims.claims.menu

Navigation menu gating.

Responsibilities:
- Describe menu entries with declarative visibility constraints.
- Filter entries against the published claims state (access role, org type, security level,
  module entitlement).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from tenant_claims.claims.models import OrgType
from tenant_claims.claims.state import ClaimsState


@dataclass(frozen=True, slots=True)
class MenuItem:
    """
    Empty constraint collections mean "no constraint". `access_roles` holds composed
    access-role keys (e.g. `tenant_5`, `platform_5`), compared for equality only.
    """

    text: str
    to: str
    icon: str | None = None
    access_roles: frozenset[str] = frozenset()
    org_types: frozenset[OrgType] = frozenset()
    security_levels: frozenset[str] = frozenset()
    module: str | None = None


def is_menu_item_visible(item: MenuItem, state: ClaimsState) -> bool:
    context = state.context
    if context is None:
        return False
    if item.access_roles and context.access_role not in item.access_roles:
        return False
    if item.org_types and context.principal.org_type not in item.org_types:
        return False
    if item.security_levels and context.security_level not in item.security_levels:
        return False
    if item.module is not None and not state.modules.allows(item.module):
        return False
    return True


def visible_menu_items(items: Iterable[MenuItem], state: ClaimsState) -> list[MenuItem]:
    return [item for item in items if is_menu_item_visible(item, state)]


# --- Module Notes -----------------------------------------------------------
# Module-constrained entries follow `state.modules`, which may lag the role fields by one
# snapshot; views re-filter on every published state.
