"""Entitlement store port - system of record for teams and members.

The membership collaborator owns durable storage of teams, members and
their role assignments. The entitlement registry reads and writes it
only through this protocol.

Concurrency contract:
- save_member is a compare-and-swap on Member.version
- operations on different members never block each other
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.member import Member, TeamPolicy


class EntitlementStoreProtocol(Protocol):
    """Protocol for team and member persistence."""

    async def create_team(self, team_id: str) -> None:
        """Register a new team.

        Raises:
            InvalidArgumentError: If the team already exists.
        """
        ...

    async def team_exists(self, team_id: str) -> bool:
        """Check whether a team is registered."""
        ...

    async def add_member(self, member: Member) -> Member:
        """Insert a member if absent.

        Returns:
            The stored member (the existing one if already present).

        Raises:
            TeamNotFoundError: If the team is not registered.
        """
        ...

    async def get_member(self, team_id: str, address: str) -> Member | None:
        """Return the member or None if the address is not in the team."""
        ...

    async def save_member(self, member: Member, expected_version: int) -> Member:
        """Atomically replace a member if its stored version matches.

        Args:
            member: The new member state.
            expected_version: Version the caller read before modifying.

        Returns:
            The saved member with version expected_version + 1.

        Raises:
            MemberNotFoundError: If the member does not exist.
            ConcurrentModificationError: If the stored version differs.
        """
        ...

    async def list_members(self, team_id: str) -> list[Member]:
        """Return all members of a team ordered by join time."""
        ...


class TeamPolicyStoreProtocol(Protocol):
    """Protocol for per-team governance policy persistence."""

    async def get_policy(self, team_id: str) -> TeamPolicy | None:
        """Return the team's policy or None when it uses defaults."""
        ...

    async def save_policy(self, policy: TeamPolicy) -> None:
        """Insert or replace a team's policy."""
        ...
