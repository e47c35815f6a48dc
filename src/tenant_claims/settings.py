"""
tenant_claims.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the claims engine.
- Hold the bootstrap policy used when a principal has no claims document yet.
- Offer a cached settings instance for wiring.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine configuration:
    - Strict env-driven configuration
    - Defaults safe for local dev (bootstrap never creates platform operators)
    - Single settings object shared by the store, aggregator and backend client
    """

    model_config = SettingsConfigDict(env_prefix="TENANT_CLAIMS_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "tenant-claims"
    log_level: str = "INFO"
    # Per-component overrides, e.g. {"claims.modules": "WARNING"}; env value is JSON.
    log_component_levels: dict[str, str] = Field(default_factory=dict)

    # Document store layout
    users_collection: str = "users"
    tenants_collection: str = "tenants"

    # Default claims document written on first sign-in.
    bootstrap_security_level: Literal["1", "2", "3", "4", "5"] = "5"
    bootstrap_org_type: Literal["Tenant", "PlatformOperator"] = "Tenant"

    # Backend RPC used by refresh(); None disables the remote call.
    backend_base_url: str | None = None
    backend_timeout_seconds: float = Field(default=10.0, gt=0)

    # Upper bound on concurrent tenant reads during module aggregation.
    aggregation_concurrency: int = Field(default=8, ge=1)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for every store instance.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Constructors take an optional `settings`; when omitted they fall back to `get_settings()`.
# Tests pass isolated instances so the process environment is never read.
