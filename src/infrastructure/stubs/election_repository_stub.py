"""In-memory stubs for ElectionRepositoryProtocol and BallotRepositoryProtocol.

The ballot stub keys ballots by (election_id, voter), mirroring the
unique constraint of the votes table: an upsert can only ever replace,
never append.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from uuid import UUID

from src.domain.errors import ConcurrentModificationError, ElectionNotFoundError
from src.domain.models.election import Ballot, Election


class ElectionRepositoryStub:
    """In-memory stub implementation of ElectionRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize empty stub."""
        self._elections: dict[UUID, Election] = {}
        self._lock = asyncio.Lock()

    async def add(self, election: Election) -> None:
        async with self._lock:
            if election.id in self._elections:
                raise ValueError(f"Election {election.id} already exists")
            self._elections[election.id] = election

    async def get(self, election_id: UUID) -> Election | None:
        return self._elections.get(election_id)

    async def save(self, election: Election, expected_version: int) -> Election:
        async with self._lock:
            current = self._elections.get(election.id)
            if current is None:
                raise ElectionNotFoundError(election.id)
            if current.version != expected_version:
                raise ConcurrentModificationError(
                    "election", election.id, expected_version, current.version
                )
            saved = replace(election, version=expected_version + 1)
            self._elections[election.id] = saved
            return saved

    async def list_by_team(self, team_id: str) -> list[Election]:
        return sorted(
            (e for e in self._elections.values() if e.team_id == team_id),
            key=lambda e: (e.start_date, e.id),
        )

    def clear(self) -> None:
        """Clear all stored data (for test cleanup)."""
        self._elections.clear()


class BallotRepositoryStub:
    """In-memory stub implementation of BallotRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize empty stub."""
        # Key: (election_id, voter), Value: Ballot
        self._ballots: dict[tuple[UUID, str], Ballot] = {}

    async def upsert(self, ballot: Ballot) -> bool:
        key = (ballot.election_id, ballot.voter)
        replaced = key in self._ballots
        self._ballots[key] = ballot
        return replaced

    async def get(self, election_id: UUID, voter: str) -> Ballot | None:
        return self._ballots.get((election_id, voter))

    async def list_for_election(self, election_id: UUID) -> list[Ballot]:
        return sorted(
            (b for (eid, _), b in self._ballots.items() if eid == election_id),
            key=lambda b: b.voter,
        )

    async def count(self, election_id: UUID) -> int:
        return sum(1 for eid, _ in self._ballots if eid == election_id)

    def clear(self) -> None:
        """Clear all stored data (for test cleanup)."""
        self._ballots.clear()
