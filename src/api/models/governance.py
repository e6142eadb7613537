"""Governance API response models.

Pydantic models rendering application DTOs and domain models for the
HTTP layer. Routes are wired elsewhere; these models fix the response
shape and the RFC 7807 error document.

Developer Golden Rules:
1. CONVERT AT THE EDGE - services return dataclasses; from_domain() builds
   the response model
2. FAIL LOUD - every GovernanceFailure renders as RFC 7807 with its kind
3. TYPE SAFETY - all fields typed, no Any
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer

from src.application.dtos.governance import (
    ApprovalResult,
    BallotReceipt,
    ElectionSummary,
)
from src.domain.models.action import Action
from src.domain.models.election import TallyResult

# Custom datetime serializer for ISO 8601 with Z suffix (Pydantic v2)
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class ActionResponse(BaseModel):
    """A treasury action as seen by API clients.

    Attributes:
        id: Action identifier (UUIDv7).
        team_id: Owning team.
        proposer: Proposing member.
        target: Destination identifier.
        description: Human-readable purpose.
        data: Hex-encoded payload.
        state: proposed, executed or withdrawn.
        approval_count: Distinct approvals.
        approvers: Approving members, sorted.
        is_executed: Whether the action has executed.
        execution_status: Side-effect status.
        execution_reference: Collaborator reference, if any.
        created_at: Proposal time.
        executed_at: Execution time, if executed.
    """

    id: UUID
    team_id: str
    proposer: str
    target: str
    description: str
    data: str = Field(..., description="Hex-encoded payload")
    state: str
    approval_count: int = Field(..., ge=0)
    approvers: list[str]
    is_executed: bool
    execution_status: str
    execution_reference: str | None = None
    created_at: DateTimeWithZ
    executed_at: DateTimeWithZ | None = None

    @classmethod
    def from_domain(cls, action: Action) -> ActionResponse:
        return cls(
            id=action.id,
            team_id=action.team_id,
            proposer=action.proposer,
            target=action.target,
            description=action.description,
            data=action.data.hex(),
            state=action.state.value,
            approval_count=action.approval_count,
            approvers=sorted(action.approvers),
            is_executed=action.is_executed,
            execution_status=action.execution_status.value,
            execution_reference=action.execution_reference,
            created_at=action.created_at,
            executed_at=action.executed_at,
        )


class ApprovalResponse(BaseModel):
    """Response after an approve call."""

    action_id: UUID
    approver: str
    approval_count: int = Field(..., ge=0)
    threshold: int = Field(..., ge=1)
    threshold_reached: bool
    recorded: bool = Field(
        ..., description="False when the approver had already approved"
    )

    @classmethod
    def from_result(cls, result: ApprovalResult) -> ApprovalResponse:
        return cls(
            action_id=result.action_id,
            approver=result.approver,
            approval_count=result.approval_count,
            threshold=result.threshold,
            threshold_reached=result.threshold_reached,
            recorded=result.recorded,
        )


class BallotResponse(BaseModel):
    """Response after a cast_vote call."""

    election_id: UUID
    voter: str
    choices: list[str]
    cast_at: DateTimeWithZ
    replaced_previous: bool

    @classmethod
    def from_receipt(cls, receipt: BallotReceipt) -> BallotResponse:
        return cls(
            election_id=receipt.election_id,
            voter=receipt.voter,
            choices=list(receipt.choices),
            cast_at=receipt.cast_at,
            replaced_previous=receipt.replaced_previous,
        )


class CandidateTotalResponse(BaseModel):
    candidate_id: str
    votes: int = Field(..., ge=0)
    registered_at: DateTimeWithZ


class TallyResponse(BaseModel):
    """Published election result.

    Attributes:
        election_id: Tallied election.
        standings: All candidates in final order.
        winners: Seated candidates.
        ballots_counted: Ballots included.
        tallied_at: Tally time.
        content_hash: Hex BLAKE3 digest of the canonical result.
    """

    election_id: UUID
    standings: list[CandidateTotalResponse]
    winners: list[str]
    ballots_counted: int = Field(..., ge=0)
    tallied_at: DateTimeWithZ
    content_hash: str

    @classmethod
    def from_result(cls, result: TallyResult) -> TallyResponse:
        return cls(
            election_id=result.election_id,
            standings=[
                CandidateTotalResponse(
                    candidate_id=total.candidate_id,
                    votes=total.votes,
                    registered_at=total.registered_at,
                )
                for total in result.standings
            ],
            winners=list(result.winners),
            ballots_counted=result.ballots_counted,
            tallied_at=result.tallied_at,
            content_hash=result.content_hash.hex(),
        )


class ElectionResponse(BaseModel):
    """Election with derived counters, mirroring the election listing."""

    id: UUID
    team_id: str
    title: str
    description: str
    created_by: str
    start_date: DateTimeWithZ
    end_date: DateTimeWithZ
    seat_count: int = Field(..., ge=1)
    results_published: bool
    phase: str
    votes_cast: int = Field(..., ge=0)
    candidates: int = Field(..., ge=0)
    voters: int = Field(..., ge=0)
    result: TallyResponse | None = None

    @classmethod
    def from_summary(cls, summary: ElectionSummary) -> ElectionResponse:
        return cls(
            id=summary.id,
            team_id=summary.team_id,
            title=summary.title,
            description=summary.description,
            created_by=summary.created_by,
            start_date=summary.start_date,
            end_date=summary.end_date,
            seat_count=summary.seat_count,
            results_published=summary.results_published,
            phase=summary.phase.value,
            votes_cast=summary.votes_cast,
            candidates=summary.candidates,
            voters=summary.voters,
            result=(
                TallyResponse.from_result(summary.result)
                if summary.result is not None
                else None
            ),
        )


class GovernanceErrorResponse(BaseModel):
    """Error response for governance operations (RFC 7807).

    Attributes:
        type: Error type URI (urn:governance:<kind>).
        title: Human-readable error title.
        status: HTTP status code.
        detail: Detailed error message.
        instance: Request path that caused the error.
        kind: Stable governance error kind.
        operation: Facade operation that failed.
    """

    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Human-readable error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Detailed error message")
    instance: str = Field(..., description="Request path that caused the error")
    kind: str = Field(..., description="Stable governance error kind")
    operation: str | None = Field(
        default=None,
        description="Facade operation that failed",
    )
