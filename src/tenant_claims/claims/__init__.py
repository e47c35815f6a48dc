"""
tenant_claims.claims

Claims resolution and authorization package.

Responsibilities:
- Claims data model and document parsing.
- Tenant-role resolution, access-role composition and module entitlement aggregation.
- Live claims store, authorization gate, tenant switching and menu gating.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Pure helpers (resolver, access_role) have no I/O; store/gate/switcher own all side effects.
