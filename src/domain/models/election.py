"""Election domain models.

This module defines the board-election aggregate:
- Election: the voting window, seats, candidates and published result
- Candidate: a registered candidate and its registration time
- Ballot: one voter's choices (at most one per election and voter)
- TallyResult: the frozen outcome of an election

Phases (derived from the clock, never stored):
    SCHEDULED -> OPEN -> CLOSED -> PUBLISHED

The voting window is half-open: a vote at exactly start_date is
accepted, a vote at exactly end_date is not.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

import blake3


class ElectionPhase(Enum):
    """Phase of an election relative to a point in time."""

    SCHEDULED = "scheduled"
    OPEN = "open"
    CLOSED = "closed"
    PUBLISHED = "published"

    def accepts_candidates(self) -> bool:
        return self in (ElectionPhase.SCHEDULED, ElectionPhase.OPEN)

    def accepts_votes(self) -> bool:
        return self is ElectionPhase.OPEN


@dataclass(frozen=True, eq=True)
class Candidate:
    """A candidate registered for an election.

    Attributes:
        candidate_id: Member address of the candidate.
        registered_at: Registration time; earlier wins ties.
    """

    candidate_id: str
    registered_at: datetime


@dataclass(frozen=True, eq=True)
class Ballot:
    """A voter's ballot in one election.

    Each listed candidate receives one vote. Re-casting replaces the
    previous ballot of the same voter.

    Attributes:
        election_id: Election the ballot belongs to.
        voter: Address of the voter.
        choices: Distinct candidate ids, in the order the voter gave them.
        cast_at: When this version of the ballot was cast.
    """

    election_id: UUID
    voter: str
    choices: tuple[str, ...]
    cast_at: datetime


@dataclass(frozen=True, eq=True)
class CandidateTotal:
    """Vote total for one candidate in a tally.

    Attributes:
        candidate_id: Candidate address.
        votes: Number of ballots naming the candidate.
        registered_at: Registration time, the first tie-breaker.
    """

    candidate_id: str
    votes: int
    registered_at: datetime


@dataclass(frozen=True, eq=True)
class TallyResult:
    """The published outcome of an election.

    Attributes:
        election_id: Election that was tallied.
        standings: All candidates in final order (winners first).
        winners: Candidate ids awarded a seat.
        ballots_counted: Number of ballots included.
        tallied_at: When the tally ran.
        content_hash: BLAKE3 digest of the canonical result.
    """

    election_id: UUID
    standings: tuple[CandidateTotal, ...]
    winners: tuple[str, ...]
    ballots_counted: int
    tallied_at: datetime
    content_hash: bytes = field(default=b"")

    @staticmethod
    def canonical_bytes(
        election_id: UUID,
        standings: tuple[CandidateTotal, ...],
        winners: tuple[str, ...],
        ballots_counted: int,
    ) -> bytes:
        """Return canonical bytes for hashing.

        The tally timestamp is excluded so two tallies of the same
        ballots produce the same digest.
        """
        payload = {
            "election_id": str(election_id),
            "standings": [
                [total.candidate_id, total.votes, total.registered_at.isoformat()]
                for total in standings
            ],
            "winners": list(winners),
            "ballots_counted": ballots_counted,
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")

    @classmethod
    def compute(
        cls,
        election_id: UUID,
        candidates: tuple[Candidate, ...],
        ballots: list[Ballot],
        seat_count: int,
        tallied_at: datetime,
    ) -> TallyResult:
        """Tally ballots into a deterministic result.

        Ordering: votes descending, then earliest registration, then
        candidate id ascending. The first seat_count candidates win.

        Args:
            election_id: Election being tallied.
            candidates: Registered candidates.
            ballots: One ballot per voter.
            seat_count: Number of seats to award.
            tallied_at: Timestamp recorded on the result.

        Returns:
            The TallyResult with its content hash filled in.
        """
        counts = {candidate.candidate_id: 0 for candidate in candidates}
        for ballot in ballots:
            for choice in ballot.choices:
                if choice in counts:
                    counts[choice] += 1

        standings = tuple(
            sorted(
                (
                    CandidateTotal(
                        candidate_id=candidate.candidate_id,
                        votes=counts[candidate.candidate_id],
                        registered_at=candidate.registered_at,
                    )
                    for candidate in candidates
                ),
                key=lambda total: (-total.votes, total.registered_at, total.candidate_id),
            )
        )
        winners = tuple(total.candidate_id for total in standings[:seat_count])
        digest = blake3.blake3(
            cls.canonical_bytes(election_id, standings, winners, len(ballots))
        ).digest()
        return cls(
            election_id=election_id,
            standings=standings,
            winners=winners,
            ballots_counted=len(ballots),
            tallied_at=tallied_at,
            content_hash=digest,
        )

    def to_dict(self) -> dict:
        return {
            "election_id": str(self.election_id),
            "standings": [
                {
                    "candidate_id": total.candidate_id,
                    "votes": total.votes,
                    "registered_at": total.registered_at.isoformat(),
                }
                for total in self.standings
            ],
            "winners": list(self.winners),
            "ballots_counted": self.ballots_counted,
            "tallied_at": self.tallied_at.isoformat(),
            "content_hash": self.content_hash.hex(),
        }


@dataclass(frozen=True, eq=True)
class Election:
    """A board election within a team.

    Attributes:
        id: UUIDv7 identifier.
        team_id: Owning team.
        title: Short title.
        description: Longer description.
        created_by: Member that created the election.
        start_date: Window start (inclusive, UTC).
        end_date: Window end (exclusive, UTC).
        seat_count: Number of winners.
        created_at: Creation timestamp.
        candidates: Registered candidates in registration order.
        eligible_voters: Members holding canVote when the election was created.
        result: Frozen tally once published.
        board_seated_at: When the winners were seated in the board role.
        version: Optimistic concurrency version.
    """

    id: UUID
    team_id: str
    title: str
    description: str
    created_by: str
    start_date: datetime
    end_date: datetime
    seat_count: int
    created_at: datetime
    candidates: tuple[Candidate, ...] = ()
    eligible_voters: frozenset[str] = field(default_factory=frozenset)
    result: TallyResult | None = None
    board_seated_at: datetime | None = None
    version: int = 0

    def __post_init__(self) -> None:
        if self.start_date.tzinfo is None or self.end_date.tzinfo is None:
            raise ValueError("Election window must be timezone-aware (UTC)")
        if self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")
        if self.seat_count < 1:
            raise ValueError(f"seat_count must be at least 1, got {self.seat_count}")

    @property
    def results_published(self) -> bool:
        return self.result is not None

    def phase_at(self, now: datetime) -> ElectionPhase:
        """Return the election phase at a point in time."""
        if self.result is not None:
            return ElectionPhase.PUBLISHED
        if now < self.start_date:
            return ElectionPhase.SCHEDULED
        if now < self.end_date:
            return ElectionPhase.OPEN
        return ElectionPhase.CLOSED

    def candidate(self, candidate_id: str) -> Candidate | None:
        for candidate in self.candidates:
            if candidate.candidate_id == candidate_id:
                return candidate
        return None

    def candidate_ids(self) -> frozenset[str]:
        return frozenset(candidate.candidate_id for candidate in self.candidates)

    def with_candidate(self, candidate: Candidate) -> Election:
        """Append a candidate; a known candidate keeps its original registration."""
        if self.candidate(candidate.candidate_id) is not None:
            return self
        return replace(self, candidates=self.candidates + (candidate,))

    def with_result(self, result: TallyResult) -> Election:
        if self.result is not None:
            raise ValueError(f"Election {self.id} results are already published")
        return replace(self, result=result)

    def with_board_seated(self, at: datetime) -> Election:
        """Record that the published winners now hold the board role."""
        if self.result is None:
            raise ValueError(f"Election {self.id} has no published result to seat")
        if self.board_seated_at is not None:
            return self
        return replace(self, board_seated_at=at)
