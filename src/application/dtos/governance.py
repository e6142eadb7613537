"""Governance DTOs returned by the application services.

Application layer defines its own DTOs. The API layer converts these
to Pydantic response models, keeping the application layer free of
any dependency on the API layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from src.domain.models.action import Action, ExecutionStatus
from src.domain.models.election import ElectionPhase, TallyResult


@dataclass(frozen=True)
class ApprovalResult:
    """Outcome of an approve call.

    Attributes:
        action_id: The approved action.
        approver: The member who approved.
        approval_count: Distinct approvals after the call.
        threshold: Team threshold at the time of the call.
        recorded: False when the approver had already approved (no-op).
    """

    action_id: UUID
    approver: str
    approval_count: int
    threshold: int
    recorded: bool

    @property
    def threshold_reached(self) -> bool:
        return self.approval_count >= self.threshold


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a successful execute call.

    Attributes:
        action: The action after execution.
        execution_status: Side-effect status (SUCCEEDED on this path).
        execution_reference: Collaborator reference, if reported.
    """

    action: Action
    execution_status: ExecutionStatus
    execution_reference: str | None


@dataclass(frozen=True)
class BallotReceipt:
    """Outcome of a cast_vote call.

    Attributes:
        election_id: Election voted in.
        voter: The voter.
        choices: Choices recorded.
        cast_at: When the ballot was recorded.
        replaced_previous: True if an earlier ballot was overwritten.
    """

    election_id: UUID
    voter: str
    choices: tuple[str, ...]
    cast_at: datetime
    replaced_previous: bool


@dataclass(frozen=True)
class ElectionSummary:
    """Read model of an election with its derived counters.

    Attributes:
        id: Election identifier.
        team_id: Owning team.
        title: Election title.
        description: Election description.
        created_by: Creating member.
        start_date: Window start (inclusive).
        end_date: Window end (exclusive).
        seat_count: Seats to fill.
        results_published: Whether the tally has been published.
        phase: Phase at the time of the query.
        votes_cast: Ballots on record.
        candidates: Number of registered candidates.
        voters: Number of eligible voters.
        result: Published tally, if any.
    """

    id: UUID
    team_id: str
    title: str
    description: str
    created_by: str
    start_date: datetime
    end_date: datetime
    seat_count: int
    results_published: bool
    phase: ElectionPhase
    votes_cast: int
    candidates: int
    voters: int
    result: TallyResult | None = None
