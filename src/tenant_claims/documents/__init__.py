"""
tenant_claims.documents

Document store package.

Responsibilities:
- Define the document store protocol consumed by the claims engine.
- Provide an in-memory adapter for tests and local wiring.
"""

# Package marker; import adapters directly from submodules.


# --- Module Notes -----------------------------------------------------------
# The claims engine should depend on `documents.base` only, never on a concrete adapter.
