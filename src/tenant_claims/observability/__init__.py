"""
tenant_claims.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Session context propagation for consistent log enrichment.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Metrics/tracing exporters can be added here without touching claims resolution logic.
