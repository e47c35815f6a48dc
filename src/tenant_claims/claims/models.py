"""
tenant_claims.claims.models

Claims domain models and wire-format parsing.

Responsibilities:
- Define the normalized domain types (`Role`, `OrgType`, `RoleAssignment`, `Principal`).
- Parse claims and tenant documents from the document store (Pydantic, lenient).
- Normalize the legacy array-shaped tenant list into the map shape at this boundary only.
- Build the default claims document written on first sign-in.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tenant_claims.observability.logging import get_logger

log = get_logger(__name__)

SECURITY_LEVELS: tuple[str, ...] = ("1", "2", "3", "4", "5")


class Role(enum.StrEnum):
    # Values are stored in claims documents; treat as stable API contract.
    admin = "Admin"
    recruiter = "Recruiter"
    manager = "Manager"
    worker = "Worker"
    customer = "Customer"
    tenant = "Tenant"
    platform_operator = "PlatformOperator"


class OrgType(enum.StrEnum):
    tenant = "Tenant"
    platform_operator = "PlatformOperator"


@dataclass(frozen=True, slots=True)
class RoleAssignment:
    role: Role
    security_level: str


# Resolver fallback when neither a tenant assignment nor a top-level role is known.
HARD_DEFAULT_ASSIGNMENT = RoleAssignment(role=Role.tenant, security_level="5")
# Published while nobody is signed in.
ANONYMOUS_ASSIGNMENT = RoleAssignment(role=Role.tenant, security_level="3")


def parse_role(raw: Any) -> Role:
    """
    Map a stored role string onto `Role`; anything unknown degrades to `Role.tenant`.

    `PlatformOperator` is never accepted from a stored role field: platform status comes from
    `orgType` only, so tenant-level role edits cannot escalate a principal.
    """

    if isinstance(raw, Role):
        role = raw
    elif isinstance(raw, str):
        try:
            role = Role(raw.strip())
        except ValueError:
            return Role.tenant
    else:
        return Role.tenant
    return Role.tenant if role is Role.platform_operator else role


def parse_security_level(raw: Any, *, default: str = HARD_DEFAULT_ASSIGNMENT.security_level) -> str:
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        raw = str(raw)
    if isinstance(raw, str) and raw.strip() in SECURITY_LEVELS:
        return raw.strip()
    return default


def parse_org_type(raw: Any) -> OrgType:
    if isinstance(raw, str) and raw.strip() == OrgType.platform_operator.value:
        return OrgType.platform_operator
    return OrgType.tenant


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Signed-in identity with its per-tenant role assignments.
    """

    id: str
    email: str | None = None
    tenant_roles: Mapping[str, RoleAssignment] = field(default_factory=dict)
    active_tenant_id: str | None = None
    org_type: OrgType = OrgType.tenant
    # Top-level (user-level) claims; used when a tenant has no explicit assignment.
    role: Role | None = None
    security_level: str | None = None

    @property
    def is_platform_operator(self) -> bool:
        return self.org_type is OrgType.platform_operator

    @property
    def tenant_ids(self) -> frozenset[str]:
        return frozenset(self.tenant_roles)

    def belongs_to(self, tenant_id: str | None) -> bool:
        return tenant_id is not None and tenant_id in self.tenant_roles


# --- Wire models --------------------------------------------------------------


def _optional_str(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class TenantRoleEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    role: str | None = None
    security_level: str | None = Field(default=None, alias="securityLevel")

    @field_validator("role", "security_level", mode="before")
    @classmethod
    def _lenient_str(cls, value: Any) -> str | None:
        return _optional_str(value)


class ClaimsDocument(BaseModel):
    """
    Stored shape of a principal's claims document.

    `tenantIds` is either a map of tenant id -> {role, securityLevel} or the legacy array of
    tenant ids. Both are accepted here; `to_principal` emits the normalized map shape.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    email: str | None = None
    role: str | None = None
    security_level: str | None = Field(default=None, alias="securityLevel")
    org_type: str | None = Field(default=None, alias="orgType")
    active_tenant_id: str | None = Field(default=None, alias="activeTenantId")
    tenant_ids: dict[str, TenantRoleEntry] | list[str] | None = Field(
        default=None, alias="tenantIds"
    )

    @field_validator("email", "role", "security_level", "org_type", "active_tenant_id", mode="before")
    @classmethod
    def _lenient_str(cls, value: Any) -> str | None:
        return _optional_str(value)

    @field_validator("tenant_ids", mode="before")
    @classmethod
    def _lenient_tenant_ids(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                str(k): (v if isinstance(v, Mapping) else {})
                for k, v in value.items()
                if isinstance(k, str) and k
            }
        if isinstance(value, list | tuple):
            return [v for v in value if isinstance(v, str) and v]
        return None

    def tenant_roles(self) -> dict[str, RoleAssignment]:
        if isinstance(self.tenant_ids, dict):
            return {
                tenant_id: RoleAssignment(
                    role=parse_role(entry.role),
                    security_level=parse_security_level(entry.security_level),
                )
                for tenant_id, entry in self.tenant_ids.items()
            }
        if isinstance(self.tenant_ids, list):
            # Legacy array form carries membership only; the role is unknown.
            return {tenant_id: HARD_DEFAULT_ASSIGNMENT for tenant_id in self.tenant_ids}
        return {}

    def to_principal(self, principal_id: str) -> Principal:
        return Principal(
            id=principal_id,
            email=self.email,
            tenant_roles=self.tenant_roles(),
            active_tenant_id=self.active_tenant_id,
            org_type=parse_org_type(self.org_type),
            role=parse_role(self.role) if self.role is not None else None,
            security_level=(
                parse_security_level(self.security_level)
                if self.security_level is not None
                else None
            ),
        )


class TenantDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    modules: list[str] = Field(default_factory=list)
    # Child tenants (one level of nesting).
    tenants: list[str] = Field(default_factory=list)

    @field_validator("modules", "tenants", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> list[str]:
        if not isinstance(value, list | tuple):
            return []
        return [v for v in value if isinstance(v, str) and v]


def parse_claims_document(data: Mapping[str, Any] | None) -> ClaimsDocument:
    # Total: a document that still fails validation is treated as empty (fail-closed).
    try:
        return ClaimsDocument.model_validate(dict(data or {}))
    except ValidationError as e:
        log.warning("claims_document_invalid", error=str(e))
        return ClaimsDocument()


def parse_tenant_document(data: Mapping[str, Any] | None) -> TenantDocument:
    try:
        return TenantDocument.model_validate(dict(data or {}))
    except ValidationError as e:
        log.warning("tenant_document_invalid", error=str(e))
        return TenantDocument()


def default_claims_document(
    *,
    email: str | None,
    security_level: str,
    org_type: str,
) -> dict[str, Any]:
    """
    Document written the first time a principal signs in without one.
    """

    doc = ClaimsDocument(
        email=email,
        role=Role.tenant.value,
        security_level=security_level,
        org_type=org_type,
        active_tenant_id=None,
        tenant_ids={},
    )
    return doc.model_dump(by_alias=True)


# --- Module Notes -----------------------------------------------------------
# Everything downstream of `to_principal` operates on `Principal` only; the legacy array shape
# never leaks past this module.
