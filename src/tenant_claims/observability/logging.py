"""
tenant_claims.observability.logging

Structured logging configuration for the claims engine.

Responsibilities:
- Configure `structlog` for JSON logs (or console output during local dev).
- Stamp every event with the engine's service/env fields and the session principal.
- Apply per-component level overrides (e.g. quiet `claims.modules`, verbose `claims.gate`).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog

from tenant_claims.settings import Settings, get_settings

_PACKAGE = "tenant_claims"


def configure_logging(
    *,
    service_name: str,
    level: str,
    env: str = "dev",
    json: bool = True,
    component_levels: Mapping[str, str] | None = None,
) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=_level(level),
    )
    for component, component_level in (component_levels or {}).items():
        logging.getLogger(_logger_name(component)).setLevel(_level(component_level))

    renderer: Any = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_engine_fields(service_name, env),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging_from_settings(settings: Settings | None = None) -> None:
    """
    Host-application entry point: console output in dev, JSON everywhere else.
    """

    settings = settings or get_settings()
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        env=settings.env,
        json=settings.env != "dev",
        component_levels=settings.log_component_levels,
    )


def _add_engine_fields(service_name: str, env: str):
    # Events logged outside a session still carry an explicit principal_id of None.
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("env", env)
        event_dict.setdefault("principal_id", None)
        return event_dict

    return processor


def _logger_name(component: str) -> str:
    # Accept both "claims.gate" and "tenant_claims.claims.gate".
    if component == _PACKAGE or component.startswith(f"{_PACKAGE}."):
        return component
    return f"{_PACKAGE}.{component}"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Session-scoped metadata (principal id) is bound via contextvars in `observability.context`.
