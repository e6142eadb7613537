"""Action repository port.

Actions are never deleted. Updates go through compare-and-swap on
Action.version so that a writer working from a stale snapshot cannot
overwrite a concurrent approval.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.action import Action


class ActionRepositoryProtocol(Protocol):
    """Protocol for action persistence."""

    async def add(self, action: Action) -> None:
        """Insert a newly proposed action.

        Raises:
            ValueError: If an action with the same id exists.
        """
        ...

    async def get(self, action_id: UUID) -> Action | None:
        """Return the action or None if unknown."""
        ...

    async def save(self, action: Action, expected_version: int) -> Action:
        """Atomically replace an action if its stored version matches.

        Returns:
            The saved action with version expected_version + 1.

        Raises:
            ActionNotFoundError: If the action does not exist.
            ConcurrentModificationError: If the stored version differs.
        """
        ...

    async def list_by_team(
        self,
        team_id: str,
        is_executed: bool | None = None,
    ) -> list[Action]:
        """List a team's actions, newest first.

        Args:
            team_id: Team to list.
            is_executed: When given, only actions whose executed flag matches.
        """
        ...
