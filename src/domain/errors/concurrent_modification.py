"""Concurrent modification error for compare-and-swap saves.

Stores reject a save whose expected version no longer matches the
stored version. Services re-read and retry; this error only escapes
once the retry budget is spent.
"""

from __future__ import annotations

from uuid import UUID

from src.domain.exceptions import GovernanceError


class ConcurrentModificationError(GovernanceError):
    """Raised when a CAS save loses against a concurrent writer.

    This is a recoverable error - the caller should re-read the entity
    and decide whether to retry or abort.

    Attributes:
        entity: Kind of entity being saved (e.g. "action").
        entity_id: Identifier of the entity.
        expected_version: Version the writer based its change on.
        actual_version: Version found in the store.
    """

    def __init__(
        self,
        entity: str,
        entity_id: str | UUID,
        expected_version: int,
        actual_version: int,
    ) -> None:
        self.entity = entity
        self.entity_id = str(entity_id)
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Concurrent modification detected for {entity} {entity_id}: "
            f"expected version {expected_version}, found {actual_version}"
        )
