"""Election and ballot repository ports.

Ballots are stored per (election_id, voter): an upsert replaces the
previous ballot of the same voter, so the store can never hold two
ballots for one voter.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.election import Ballot, Election


class ElectionRepositoryProtocol(Protocol):
    """Protocol for election persistence."""

    async def add(self, election: Election) -> None:
        """Insert a new election.

        Raises:
            ValueError: If an election with the same id exists.
        """
        ...

    async def get(self, election_id: UUID) -> Election | None:
        """Return the election or None if unknown."""
        ...

    async def save(self, election: Election, expected_version: int) -> Election:
        """Atomically replace an election if its stored version matches.

        Raises:
            ElectionNotFoundError: If the election does not exist.
            ConcurrentModificationError: If the stored version differs.
        """
        ...

    async def list_by_team(self, team_id: str) -> list[Election]:
        """List a team's elections ordered by start date."""
        ...


class BallotRepositoryProtocol(Protocol):
    """Protocol for ballot persistence."""

    async def upsert(self, ballot: Ballot) -> bool:
        """Store a ballot, replacing any earlier ballot of the same voter.

        Returns:
            True if an earlier ballot was replaced, False if this is the
            voter's first ballot.
        """
        ...

    async def get(self, election_id: UUID, voter: str) -> Ballot | None:
        """Return the voter's current ballot, if any."""
        ...

    async def list_for_election(self, election_id: UUID) -> list[Ballot]:
        """Return all current ballots for an election ordered by voter."""
        ...

    async def count(self, election_id: UUID) -> int:
        """Return the number of voters with a ballot on record."""
        ...
