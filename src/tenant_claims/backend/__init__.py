"""
tenant_claims.backend

Backend function client package.

Responsibilities:
- Provide the RPC boundary for backend functions the engine may invoke (claims refresh).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The claims store depends on this boundary, not on httpx directly.
