"""In-memory stub for ActionRepositoryProtocol.

Simulates the actions table:
- Unique action ids
- Compare-and-swap saves on Action.version
- Team listing, newest first, filterable by executed flag

For testing concurrent approvals, the stub can be told to report a
conflict on the next N saves regardless of version (inject_conflicts).
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from uuid import UUID

from src.domain.errors import ActionNotFoundError, ConcurrentModificationError
from src.domain.models.action import Action


class ActionRepositoryStub:
    """In-memory stub implementation of ActionRepositoryProtocol.

    Attributes:
        save_count: Number of successful saves (for assertions).
    """

    def __init__(self) -> None:
        """Initialize empty stub."""
        self._actions: dict[UUID, Action] = {}
        self._lock = asyncio.Lock()
        self._pending_conflicts = 0
        self.save_count = 0

    def inject_conflicts(self, count: int) -> None:
        """Make the next count saves fail with ConcurrentModificationError."""
        self._pending_conflicts = count

    async def add(self, action: Action) -> None:
        async with self._lock:
            if action.id in self._actions:
                raise ValueError(f"Action {action.id} already exists")
            self._actions[action.id] = action

    async def get(self, action_id: UUID) -> Action | None:
        return self._actions.get(action_id)

    async def save(self, action: Action, expected_version: int) -> Action:
        async with self._lock:
            current = self._actions.get(action.id)
            if current is None:
                raise ActionNotFoundError(action.id)
            if self._pending_conflicts > 0:
                self._pending_conflicts -= 1
                raise ConcurrentModificationError(
                    "action", action.id, expected_version, current.version
                )
            if current.version != expected_version:
                raise ConcurrentModificationError(
                    "action", action.id, expected_version, current.version
                )
            saved = replace(action, version=expected_version + 1)
            self._actions[action.id] = saved
            self.save_count += 1
            return saved

    async def list_by_team(
        self,
        team_id: str,
        is_executed: bool | None = None,
    ) -> list[Action]:
        actions = [
            action
            for action in self._actions.values()
            if action.team_id == team_id
            and (is_executed is None or action.is_executed == is_executed)
        ]
        return sorted(actions, key=lambda action: (action.created_at, action.id), reverse=True)

    def clear(self) -> None:
        """Clear all stored data (for test cleanup)."""
        self._actions.clear()
        self._pending_conflicts = 0
        self.save_count = 0
