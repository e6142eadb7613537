"""Unit tests for the Election aggregate and deterministic tallying."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from src.domain.models.election import (
    Ballot,
    Candidate,
    Election,
    ElectionPhase,
    TallyResult,
)

START = datetime(2026, 2, 1, tzinfo=timezone.utc)
END = START + timedelta(days=7)


def _election(**overrides: object) -> Election:
    values: dict[str, object] = {
        "id": uuid4(),
        "team_id": "team-1",
        "title": "Board 2026",
        "description": "",
        "created_by": "0xOfficer",
        "start_date": START,
        "end_date": END,
        "seat_count": 1,
        "created_at": START - timedelta(days=1),
    }
    values.update(overrides)
    return Election(**values)  # type: ignore[arg-type]


def _ballot(election_id, voter: str, *choices: str) -> Ballot:
    return Ballot(election_id=election_id, voter=voter, choices=choices, cast_at=START)


class TestElectionPhase:
    def test_window_is_half_open(self) -> None:
        election = _election()

        assert election.phase_at(START - timedelta(microseconds=1)) is ElectionPhase.SCHEDULED
        assert election.phase_at(START) is ElectionPhase.OPEN
        assert election.phase_at(END - timedelta(microseconds=1)) is ElectionPhase.OPEN
        assert election.phase_at(END) is ElectionPhase.CLOSED

    def test_published_overrides_clock(self) -> None:
        election = _election()
        result = TallyResult.compute(election.id, (), [], 1, END)

        assert election.with_result(result).phase_at(START) is ElectionPhase.PUBLISHED

    def test_phase_capabilities(self) -> None:
        assert ElectionPhase.SCHEDULED.accepts_candidates()
        assert ElectionPhase.OPEN.accepts_candidates()
        assert not ElectionPhase.CLOSED.accepts_candidates()
        assert ElectionPhase.OPEN.accepts_votes()
        assert not ElectionPhase.SCHEDULED.accepts_votes()
        assert not ElectionPhase.PUBLISHED.accepts_votes()


class TestElectionValidation:
    def test_start_must_precede_end(self) -> None:
        with pytest.raises(ValueError, match="before end_date"):
            _election(start_date=END, end_date=START)

    def test_equal_dates_rejected(self) -> None:
        with pytest.raises(ValueError, match="before end_date"):
            _election(end_date=START)

    def test_naive_dates_rejected(self) -> None:
        with pytest.raises(ValueError, match="timezone-aware"):
            _election(start_date=datetime(2026, 2, 1))

    def test_seat_count_positive(self) -> None:
        with pytest.raises(ValueError, match="seat_count"):
            _election(seat_count=0)


class TestCandidates:
    def test_re_registration_keeps_first_timestamp(self) -> None:
        election = _election().with_candidate(Candidate("0xX", START))

        again = election.with_candidate(Candidate("0xX", START + timedelta(hours=1)))

        assert again is election
        assert election.candidate("0xX").registered_at == START  # type: ignore[union-attr]

    def test_candidate_ids(self) -> None:
        election = _election().with_candidate(Candidate("0xX", START)).with_candidate(
            Candidate("0xY", START)
        )

        assert election.candidate_ids() == frozenset({"0xX", "0xY"})
        assert election.candidate("0xZ") is None

    def test_result_published_once(self) -> None:
        election = _election()
        result = TallyResult.compute(election.id, (), [], 1, END)
        published = election.with_result(result)

        assert published.results_published
        with pytest.raises(ValueError, match="already published"):
            published.with_result(result)

    def test_board_seated_once_after_publication(self) -> None:
        election = _election()
        with pytest.raises(ValueError, match="no published result"):
            election.with_board_seated(END)

        published = election.with_result(TallyResult.compute(election.id, (), [], 1, END))
        seated = published.with_board_seated(END)

        assert published.board_seated_at is None
        assert seated.board_seated_at == END
        assert seated.with_board_seated(END + timedelta(hours=1)) is seated


class TestTally:
    def test_tie_broken_by_registration_order(self) -> None:
        election_id = uuid4()
        candidates = (
            Candidate("0xX", START),
            Candidate("0xY", START + timedelta(minutes=5)),
        )
        ballots = [
            _ballot(election_id, "v1", "0xX"),
            _ballot(election_id, "v2", "0xX"),
            _ballot(election_id, "v3", "0xY"),
            _ballot(election_id, "v4", "0xY"),
        ]

        result = TallyResult.compute(election_id, candidates, ballots, 1, END)

        assert result.winners == ("0xX",)
        assert [t.votes for t in result.standings] == [2, 2]

    def test_tie_on_registration_broken_by_candidate_id(self) -> None:
        election_id = uuid4()
        candidates = (Candidate("0xB", START), Candidate("0xA", START))

        result = TallyResult.compute(election_id, candidates, [], 1, END)

        assert result.winners == ("0xA",)

    def test_votes_dominate_registration_order(self) -> None:
        election_id = uuid4()
        candidates = (Candidate("0xEarly", START), Candidate("0xLate", END))
        ballots = [_ballot(election_id, "v1", "0xLate")]

        result = TallyResult.compute(election_id, candidates, ballots, 1, END)

        assert result.winners == ("0xLate",)

    def test_each_choice_counts_one_vote(self) -> None:
        election_id = uuid4()
        candidates = (Candidate("0xA", START), Candidate("0xB", START), Candidate("0xC", START))
        ballots = [
            _ballot(election_id, "v1", "0xA", "0xB"),
            _ballot(election_id, "v2", "0xB"),
        ]

        result = TallyResult.compute(election_id, candidates, ballots, 2, END)

        assert result.winners == ("0xB", "0xA")
        assert {t.candidate_id: t.votes for t in result.standings} == {
            "0xA": 1,
            "0xB": 2,
            "0xC": 0,
        }
        assert result.ballots_counted == 2

    def test_fewer_candidates_than_seats(self) -> None:
        election_id = uuid4()

        result = TallyResult.compute(election_id, (Candidate("0xA", START),), [], 3, END)

        assert result.winners == ("0xA",)

    def test_hash_is_deterministic_and_ignores_tally_time(self) -> None:
        election_id = uuid4()
        candidates = (Candidate("0xA", START), Candidate("0xB", START))
        ballots = [_ballot(election_id, "v1", "0xA")]

        first = TallyResult.compute(election_id, candidates, ballots, 1, END)
        second = TallyResult.compute(
            election_id, candidates, list(reversed(ballots)), 1, END + timedelta(days=1)
        )

        assert first.content_hash == second.content_hash
        assert len(first.content_hash) == 32

    def test_hash_changes_with_votes(self) -> None:
        election_id = uuid4()
        candidates = (Candidate("0xA", START), Candidate("0xB", START))

        first = TallyResult.compute(election_id, candidates, [_ballot(election_id, "v", "0xA")], 1, END)
        second = TallyResult.compute(election_id, candidates, [_ballot(election_id, "v", "0xB")], 1, END)

        assert first.content_hash != second.content_hash

    def test_to_dict_is_json_safe(self) -> None:
        election_id = uuid4()
        result = TallyResult.compute(election_id, (Candidate("0xA", START),), [], 1, END)

        payload = result.to_dict()

        assert payload["election_id"] == str(election_id)
        assert payload["winners"] == ["0xA"]
        assert payload["content_hash"] == result.content_hash.hex()
        assert payload["standings"][0]["registered_at"] == START.isoformat()
