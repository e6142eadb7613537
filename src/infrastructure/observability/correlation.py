"""Correlation ID management for governance requests.

One correlation id follows a caller's request through the facade, the
services and the notification publisher, so an approval and the events
it produced can be joined in the logs.

Usage:
    # At request start (HTTP middleware, CLI command, worker job)
    with correlation_scope(request.headers.get("X-Correlation-ID")):
        await facade.approve_action(action_id, caller)

    # In structlog configuration
    processors = [..., correlation_id_processor, ...]
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from uuid6 import uuid7

# Empty string means "no correlation id in this context"
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new, time-ordered correlation ID (UUIDv7)."""
    return str(uuid7())


def get_correlation_id() -> str:
    """Return the current correlation ID, or "" if none is set."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Run a block under a correlation ID, restoring the previous one after.

    Args:
        correlation_id: ID supplied by the caller. A new one is generated
            when missing or empty.

    Yields:
        The correlation ID in effect inside the block.
    """
    value = correlation_id or generate_correlation_id()
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding correlation_id to every log entry."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict
