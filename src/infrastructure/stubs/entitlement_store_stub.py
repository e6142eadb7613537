"""In-memory stubs for EntitlementStoreProtocol and TeamPolicyStoreProtocol.

These stubs provide in-memory implementations for testing and for
single-process deployments. They simulate the membership database
including:
- Unique (team_id, address) members
- Compare-and-swap saves on Member.version
- Join-order listing
"""

from __future__ import annotations

import asyncio

from src.domain.errors import (
    ConcurrentModificationError,
    InvalidArgumentError,
    MemberNotFoundError,
    TeamNotFoundError,
)
from src.domain.models.member import Member, TeamPolicy


class EntitlementStoreStub:
    """In-memory stub implementation of EntitlementStoreProtocol.

    Members are kept per team in insertion order, which is join order.
    All mutations run under one asyncio.Lock so a compare-and-swap check
    and its write are atomic.
    """

    def __init__(self) -> None:
        """Initialize empty stub."""
        # Key: team_id, Value: {address: Member} in join order
        self._teams: dict[str, dict[str, Member]] = {}
        self._lock = asyncio.Lock()
        self.save_count = 0

    async def create_team(self, team_id: str) -> None:
        async with self._lock:
            if team_id in self._teams:
                raise InvalidArgumentError("team_id", f"team {team_id} already exists")
            self._teams[team_id] = {}

    async def team_exists(self, team_id: str) -> bool:
        return team_id in self._teams

    async def add_member(self, member: Member) -> Member:
        async with self._lock:
            members = self._teams.get(member.team_id)
            if members is None:
                raise TeamNotFoundError(member.team_id)
            existing = members.get(member.address)
            if existing is not None:
                return existing
            members[member.address] = member
            return member

    async def get_member(self, team_id: str, address: str) -> Member | None:
        return self._teams.get(team_id, {}).get(address)

    async def save_member(self, member: Member, expected_version: int) -> Member:
        async with self._lock:
            members = self._teams.get(member.team_id, {})
            current = members.get(member.address)
            if current is None:
                raise MemberNotFoundError(member.team_id, member.address)
            if current.version != expected_version:
                raise ConcurrentModificationError(
                    "member",
                    f"{member.team_id}/{member.address}",
                    expected_version,
                    current.version,
                )
            saved = Member(
                team_id=member.team_id,
                address=member.address,
                joined_at=current.joined_at,
                roles=member.roles,
                version=expected_version + 1,
            )
            members[member.address] = saved
            self.save_count += 1
            return saved

    async def list_members(self, team_id: str) -> list[Member]:
        return list(self._teams.get(team_id, {}).values())

    def clear(self) -> None:
        """Clear all stored data (for test cleanup)."""
        self._teams.clear()
        self.save_count = 0


class TeamPolicyStoreStub:
    """In-memory stub implementation of TeamPolicyStoreProtocol."""

    def __init__(self) -> None:
        self._policies: dict[str, TeamPolicy] = {}

    async def get_policy(self, team_id: str) -> TeamPolicy | None:
        return self._policies.get(team_id)

    async def save_policy(self, policy: TeamPolicy) -> None:
        self._policies[policy.team_id] = policy

    def clear(self) -> None:
        """Clear all stored data (for test cleanup)."""
        self._policies.clear()
