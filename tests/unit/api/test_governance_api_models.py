"""Unit tests for governance API response models."""

from datetime import datetime, timedelta, timezone

from uuid6 import uuid7

from src.api.models import (
    ActionResponse,
    ApprovalResponse,
    BallotResponse,
    ElectionResponse,
    TallyResponse,
)
from src.application.dtos.governance import (
    ApprovalResult,
    BallotReceipt,
    ElectionSummary,
)
from src.domain.models.action import Action
from src.domain.models.election import Ballot, Candidate, ElectionPhase, TallyResult

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def _action() -> Action:
    return Action(
        id=uuid7(),
        team_id="team-1",
        proposer="0xP",
        target="0xVault",
        description="Pay",
        data=b"\xca\xfe",
        created_at=NOW,
    )


def _tally() -> TallyResult:
    election_id = uuid7()
    return TallyResult.compute(
        election_id=election_id,
        candidates=(Candidate("0xX", NOW), Candidate("0xY", NOW + timedelta(seconds=1))),
        ballots=[Ballot(election_id, "0xV", ("0xY",), NOW)],
        seat_count=1,
        tallied_at=NOW,
    )


def test_action_response_from_domain() -> None:
    action = _action().with_approval("0xB").with_approval("0xA")

    response = ActionResponse.from_domain(action)

    assert response.data == "cafe"
    assert response.approvers == ["0xA", "0xB"]
    assert response.approval_count == 2
    assert response.state == "proposed"
    assert response.execution_status == "not_started"
    assert response.model_dump(mode="json")["created_at"] == "2026-01-01T12:00:00Z"


def test_approval_response_reports_threshold() -> None:
    result = ApprovalResult(
        action_id=uuid7(), approver="0xA", approval_count=2, threshold=2, recorded=True
    )

    response = ApprovalResponse.from_result(result)

    assert response.threshold_reached
    assert response.recorded


def test_ballot_response_from_receipt() -> None:
    receipt = BallotReceipt(
        election_id=uuid7(),
        voter="0xV",
        choices=("0xX", "0xY"),
        cast_at=NOW,
        replaced_previous=True,
    )

    response = BallotResponse.from_receipt(receipt)

    assert response.choices == ["0xX", "0xY"]
    assert response.replaced_previous


def test_tally_response_hex_hash() -> None:
    result = _tally()

    response = TallyResponse.from_result(result)

    assert response.winners == ["0xY"]
    assert response.content_hash == result.content_hash.hex()
    assert [s.candidate_id for s in response.standings] == ["0xY", "0xX"]


def test_election_response_with_result() -> None:
    result = _tally()
    summary = ElectionSummary(
        id=result.election_id,
        team_id="team-1",
        title="Board",
        description="",
        created_by="0xO",
        start_date=NOW - timedelta(days=7),
        end_date=NOW,
        seat_count=1,
        results_published=True,
        phase=ElectionPhase.PUBLISHED,
        votes_cast=1,
        candidates=2,
        voters=3,
        result=result,
    )

    response = ElectionResponse.from_summary(summary)

    assert response.phase == "published"
    assert response.result is not None
    assert response.result.winners == ["0xY"]
    assert response.model_dump(mode="json")["end_date"] == "2026-01-01T12:00:00Z"
