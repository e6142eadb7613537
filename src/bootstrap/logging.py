"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from src.infrastructure.observability import configure_structlog as _configure_structlog

# Environment variable selecting the log renderer (default: production JSON)
ENVIRONMENT_ENV = "GOVERNANCE_ENV"


def configure_structlog(environment: str | None = None) -> str:
    """Configure structlog for the given or configured environment.

    Returns:
        The environment that was applied.
    """
    resolved = environment or os.getenv(ENVIRONMENT_ENV, "production")
    _configure_structlog(environment=resolved)
    return resolved


__all__ = ["ENVIRONMENT_ENV", "configure_structlog"]
