"""Retry helper for compare-and-swap saves.

Stores reject a save whose expected version is stale. The per-entity
lock removes conflicts between tasks of one process; this helper covers
writers in other processes sharing the same store. The operation is
re-run from a fresh read on each attempt, so a conflicting writer never
silently loses its update.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from structlog import get_logger

from src.domain.errors.concurrent_modification import ConcurrentModificationError

logger = get_logger(__name__)

T = TypeVar("T")


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    operation_name: str,
) -> T:
    """Run a read-modify-write operation, retrying on CAS conflicts.

    Args:
        operation: Zero-argument coroutine factory performing one full
            read-modify-write attempt.
        max_attempts: Total attempts before giving up (>= 1).
        operation_name: Name used in log entries.

    Returns:
        Whatever the operation returns on its first non-conflicting run.

    Raises:
        ConcurrentModificationError: Every attempt conflicted.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except ConcurrentModificationError as exc:
            if attempt >= max_attempts:
                logger.warning(
                    "CAS retries exhausted",
                    operation=operation_name,
                    entity=exc.entity,
                    entity_id=exc.entity_id,
                    attempts=attempt,
                )
                raise
            logger.debug(
                "CAS conflict, retrying",
                operation=operation_name,
                entity=exc.entity,
                entity_id=exc.entity_id,
                attempt=attempt,
            )
            attempt += 1
