"""Observability infrastructure: structured logging and correlation IDs.

Usage:
    from src.infrastructure.observability import (
        configure_structlog,
        correlation_scope,
    )

    # At startup
    configure_structlog(environment="production")

    # Per request
    with correlation_scope(incoming_id):
        ...
"""

from src.infrastructure.observability.correlation import (
    correlation_id_processor,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from src.infrastructure.observability.logging import (
    bind_governance_context,
    build_processors,
    configure_structlog,
    get_logger_for_service,
)

__all__: list[str] = [
    "bind_governance_context",
    "build_processors",
    "configure_structlog",
    "correlation_id_processor",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_service",
    "set_correlation_id",
]
