"""
tenant_claims.claims.access_role

Access-role composition.

Responsibilities:
- Compose the opaque partition key (e.g. `tenant_3`, `platform_5`) from role + security level.
- Identify platform-operator partition keys by equality, never by parsing.
"""

from __future__ import annotations

from tenant_claims.claims.models import SECURITY_LEVELS, Role, parse_security_level

_TENANT_PREFIX = "tenant"
_PLATFORM_PREFIX = "platform"


def compose_access_role(role: Role, security_level: str) -> str:
    prefix = _PLATFORM_PREFIX if role is Role.platform_operator else _TENANT_PREFIX
    return f"{prefix}_{parse_security_level(security_level)}"


_PLATFORM_PARTITIONS: frozenset[str] = frozenset(
    compose_access_role(Role.platform_operator, level) for level in SECURITY_LEVELS
)


def is_platform_partition(access_role: str) -> bool:
    return access_role in _PLATFORM_PARTITIONS


# --- Module Notes -----------------------------------------------------------
# Consumers (menu gating, module aggregation) compare access roles for equality only; the
# string format is not a parsing contract.
