"""Unit tests for ElectionEngineService.

Phases are driven entirely by FakeTimeAuthority, so the half-open window
[start_date, end_date) is tested at its exact edges.
"""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from uuid6 import uuid7

from src.application.services.election_engine_service import ElectionEngineService
from src.domain.errors import (
    ElectionNotClosedError,
    ElectionNotFoundError,
    InsufficientCandidatesError,
    InvalidArgumentError,
    InvalidChoiceError,
    InvalidWindowError,
    MemberNotFoundError,
    UnauthorizedError,
    WindowClosedError,
)
from src.domain.models.election import Election, ElectionPhase
from src.domain.models.role import ELECTION_OFFICER_ROLE, MEMBER_ROLE
from tests.helpers import FakeTimeAuthority, GovernanceHarness
from tests.helpers.governance_harness import OWNER

OFFICER = "0xOfficer"
X, Y, Z = "0xX", "0xY", "0xZ"
VOTERS = ("0xV1", "0xV2", "0xV3")


@pytest.fixture
async def team(harness: GovernanceHarness) -> str:
    members: dict[str, tuple[str, ...]] = {
        OFFICER: (ELECTION_OFFICER_ROLE,),
        X: (MEMBER_ROLE,),
        Y: (MEMBER_ROLE,),
        Z: (MEMBER_ROLE,),
        "0xQuiet": (),
    }
    members.update({voter: (MEMBER_ROLE,) for voter in VOTERS})
    return await harness.seed_team(members)


@pytest.fixture
def engine(harness: GovernanceHarness) -> ElectionEngineService:
    return harness.engine


@pytest.fixture
def window(fake_time_authority: FakeTimeAuthority) -> tuple[datetime, datetime]:
    start = fake_time_authority.utcnow() + timedelta(days=1)
    return start, start + timedelta(days=7)


async def _create(
    engine: ElectionEngineService,
    team: str,
    window: tuple[datetime, datetime],
    seat_count: int = 1,
) -> Election:
    start, end = window
    return await engine.create(team, OFFICER, "Board 2026", "Annual board", start, end, seat_count)


class TestCreate:
    async def test_create_schedules_election(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        harness: GovernanceHarness,
    ) -> None:
        election = await _create(engine, team, window, seat_count=3)

        summary = await engine.get_election(election.id)
        assert summary.phase is ElectionPhase.SCHEDULED
        assert summary.seat_count == 3
        assert summary.votes_cast == 0
        assert summary.candidates == 0
        assert not summary.results_published
        assert harness.publisher.event_types() == ["governance.election.created"]

    async def test_eligible_voters_snapshot(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        election = await _create(engine, team, window)

        assert OWNER in election.eligible_voters
        assert set(VOTERS) <= election.eligible_voters
        assert "0xQuiet" not in election.eligible_voters
        assert (await engine.get_election(election.id)).voters == len(election.eligible_voters)

    async def test_requires_run_election_permission(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        start, end = window
        with pytest.raises(UnauthorizedError):
            await engine.create(team, X, "Board", "", start, end, 1)

    async def test_start_equal_to_end_rejected(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        start, _ = window
        with pytest.raises(InvalidWindowError):
            await engine.create(team, OFFICER, "Board", "", start, start, 1)

    async def test_start_after_end_rejected(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        start, end = window
        with pytest.raises(InvalidWindowError):
            await engine.create(team, OFFICER, "Board", "", end, start, 1)

    async def test_naive_dates_rejected(
        self, engine: ElectionEngineService, team: str
    ) -> None:
        with pytest.raises(InvalidWindowError, match="timezone-aware"):
            await engine.create(
                team, OFFICER, "Board", "", datetime(2026, 2, 1), datetime(2026, 2, 8), 1
            )

    @pytest.mark.parametrize("seat_count", [0, -1, 2, 4])
    async def test_seat_count_must_be_positive_and_odd(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        seat_count: int,
    ) -> None:
        with pytest.raises(InvalidArgumentError, match="seat_count"):
            await _create(engine, team, window, seat_count=seat_count)

    async def test_blank_title_rejected(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        start, end = window
        with pytest.raises(InvalidArgumentError, match="title"):
            await engine.create(team, OFFICER, "   ", "", start, end, 1)

    async def test_team_without_voters_rejected(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        harness: GovernanceHarness,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(
            harness.registry, "members_with", AsyncMock(return_value=frozenset())
        )

        with pytest.raises(InvalidArgumentError, match="eligible_voters"):
            await _create(engine, team, window)

        assert await engine.list_elections(team) == []


class TestCandidates:
    async def test_register_before_and_during_window(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window)
        await engine.register_candidate(election.id, X)
        fake_time_authority.set_time(window[0])

        await engine.register_candidate(election.id, Y)

        assert [c.candidate_id for c in await engine.list_candidates(election.id)] == [X, Y]

    async def test_reregistration_keeps_original_time(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window)
        await engine.register_candidate(election.id, X)
        first = (await engine.list_candidates(election.id))[0]
        fake_time_authority.advance(hours=1)

        await engine.register_candidate(election.id, X)

        assert await engine.list_candidates(election.id) == (first,)

    async def test_register_after_close_rejected(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window)
        fake_time_authority.set_time(window[1])

        with pytest.raises(WindowClosedError):
            await engine.register_candidate(election.id, X)

    async def test_candidate_must_be_member(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        election = await _create(engine, team, window)

        with pytest.raises(MemberNotFoundError):
            await engine.register_candidate(election.id, "0xStranger")

    async def test_unknown_election(self, engine: ElectionEngineService, team: str) -> None:
        with pytest.raises(ElectionNotFoundError):
            await engine.register_candidate(uuid7(), X)


class TestVoting:
    @pytest.fixture
    async def election(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> Election:
        election = await _create(engine, team, window, seat_count=1)
        for candidate in (X, Y, Z):
            await engine.register_candidate(election.id, candidate)
        return election

    async def test_vote_before_start_rejected(
        self, engine: ElectionEngineService, election: Election
    ) -> None:
        with pytest.raises(WindowClosedError) as exc_info:
            await engine.cast_vote(election.id, VOTERS[0], [X])

        assert exc_info.value.phase == "scheduled"

    async def test_vote_at_exact_start_accepted(
        self,
        engine: ElectionEngineService,
        election: Election,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        fake_time_authority.set_time(election.start_date)

        receipt = await engine.cast_vote(election.id, VOTERS[0], [X])

        assert receipt.cast_at == election.start_date
        assert not receipt.replaced_previous
        assert await engine.has_voted(election.id, VOTERS[0])

    async def test_vote_at_exact_end_rejected(
        self,
        engine: ElectionEngineService,
        election: Election,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        fake_time_authority.set_time(election.end_date)

        with pytest.raises(WindowClosedError) as exc_info:
            await engine.cast_vote(election.id, VOTERS[0], [X])

        assert exc_info.value.phase == "closed"

    async def test_vote_just_before_end_accepted(
        self,
        engine: ElectionEngineService,
        election: Election,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        fake_time_authority.set_time(election.end_date - timedelta(microseconds=1))

        await engine.cast_vote(election.id, VOTERS[0], [X])

    async def test_recast_replaces_ballot(
        self,
        engine: ElectionEngineService,
        election: Election,
        fake_time_authority: FakeTimeAuthority,
        harness: GovernanceHarness,
    ) -> None:
        fake_time_authority.set_time(election.start_date)
        await engine.cast_vote(election.id, VOTERS[0], [X])
        fake_time_authority.advance(seconds=30)

        receipt = await engine.cast_vote(election.id, VOTERS[0], [Y])

        assert receipt.replaced_previous
        ballot = await harness.ballots.get(election.id, VOTERS[0])
        assert ballot is not None
        assert ballot.choices == (Y,)
        assert (await engine.get_election(election.id)).votes_cast == 1

    async def test_voter_needs_vote_permission(
        self,
        engine: ElectionEngineService,
        election: Election,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        fake_time_authority.set_time(election.start_date)

        with pytest.raises(UnauthorizedError):
            await engine.cast_vote(election.id, "0xQuiet", [X])

    @pytest.mark.parametrize(
        ("choices", "reason"),
        [
            ([], "no candidate"),
            (["0xX", "0xX"], "more than once"),
            (["0xX", "0xY"], "seat"),
            (["0xNobody"], "unregistered"),
        ],
    )
    async def test_invalid_choices_rejected(
        self,
        engine: ElectionEngineService,
        election: Election,
        fake_time_authority: FakeTimeAuthority,
        choices: list[str],
        reason: str,
    ) -> None:
        fake_time_authority.set_time(election.start_date)

        with pytest.raises(InvalidChoiceError, match=reason):
            await engine.cast_vote(election.id, VOTERS[0], choices)

        assert not await engine.has_voted(election.id, VOTERS[0])

    async def test_concurrent_votes_keep_one_ballot_per_voter(
        self,
        engine: ElectionEngineService,
        election: Election,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        fake_time_authority.set_time(election.start_date)

        await asyncio.gather(
            *(engine.cast_vote(election.id, voter, [X]) for voter in VOTERS),
            engine.cast_vote(election.id, VOTERS[0], [Y]),
        )

        assert (await engine.get_election(election.id)).votes_cast == len(VOTERS)


class TestTally:
    async def test_tally_before_close_rejected(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window)
        fake_time_authority.set_time(election.start_date)

        with pytest.raises(ElectionNotClosedError):
            await engine.tally(election.id)

    async def test_tie_goes_to_earlier_registration(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window, seat_count=1)
        await engine.register_candidate(election.id, Y)
        fake_time_authority.advance(seconds=1)
        await engine.register_candidate(election.id, X)
        fake_time_authority.set_time(election.start_date)
        await engine.cast_vote(election.id, VOTERS[0], [X])
        await engine.cast_vote(election.id, VOTERS[1], [Y])
        fake_time_authority.set_time(election.end_date)

        result = await engine.tally(election.id)

        assert result.winners == (Y,)
        assert [(t.candidate_id, t.votes) for t in result.standings] == [(Y, 1), (X, 1)]

    async def test_most_votes_win_seats(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
        harness: GovernanceHarness,
    ) -> None:
        election = await _create(engine, team, window, seat_count=3)
        for candidate in (X, Y, Z, VOTERS[0]):
            await engine.register_candidate(election.id, candidate)
        fake_time_authority.set_time(election.start_date)
        await engine.cast_vote(election.id, VOTERS[0], [Z, Y])
        await engine.cast_vote(election.id, VOTERS[1], [Z])
        await engine.cast_vote(election.id, VOTERS[2], [Y])
        fake_time_authority.set_time(election.end_date)

        result = await engine.tally(election.id)

        assert result.winners == (Y, Z, VOTERS[0])
        assert result.ballots_counted == 3
        assert await engine.get_winners(election.id) == (Y, Z, VOTERS[0])
        assert "governance.election.published" in harness.publisher.event_types()

    async def test_tally_is_frozen(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
        harness: GovernanceHarness,
    ) -> None:
        election = await _create(engine, team, window)
        await engine.register_candidate(election.id, X)
        fake_time_authority.set_time(election.end_date)
        first = await engine.tally(election.id)
        fake_time_authority.advance(days=1)

        again = await engine.tally(election.id)

        assert again == first
        assert again.tallied_at == election.end_date
        assert harness.publisher.event_types().count("governance.election.published") == 1

    async def test_published_election_refuses_ballots_and_candidates(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window)
        await engine.register_candidate(election.id, Y)
        fake_time_authority.set_time(election.end_date)
        await engine.tally(election.id)

        summary = await engine.get_election(election.id)
        assert summary.phase is ElectionPhase.PUBLISHED
        assert summary.results_published
        with pytest.raises(WindowClosedError):
            await engine.register_candidate(election.id, X)
        with pytest.raises(WindowClosedError):
            await engine.cast_vote(election.id, VOTERS[0], [X])

    async def test_tally_with_no_ballots(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window)
        await engine.register_candidate(election.id, X)
        fake_time_authority.set_time(election.end_date)

        result = await engine.tally(election.id)

        assert result.ballots_counted == 0
        assert result.winners == (X,)

    async def test_tally_needs_a_candidate_for_every_seat(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
        harness: GovernanceHarness,
    ) -> None:
        election = await _create(engine, team, window, seat_count=3)
        await engine.register_candidate(election.id, X)
        fake_time_authority.set_time(election.end_date)

        with pytest.raises(InsufficientCandidatesError) as exc_info:
            await engine.tally(election.id)

        assert (exc_info.value.candidates, exc_info.value.seat_count) == (1, 3)
        summary = await engine.get_election(election.id)
        assert not summary.results_published
        assert summary.phase is ElectionPhase.CLOSED
        assert "governance.election.published" not in harness.publisher.event_types()

    async def test_mark_board_seated_after_publication(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        election = await _create(engine, team, window)
        await engine.register_candidate(election.id, X)
        fake_time_authority.set_time(election.end_date)
        with pytest.raises(ElectionNotClosedError):
            await engine.mark_board_seated(election.id)
        await engine.tally(election.id)

        seated = await engine.mark_board_seated(election.id)
        fake_time_authority.advance(hours=1)
        again = await engine.mark_board_seated(election.id)

        assert seated.board_seated_at == election.end_date
        assert again.board_seated_at == election.end_date

    async def test_winners_empty_until_published(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        election = await _create(engine, team, window)

        assert await engine.get_winners(election.id) == ()

    async def test_concurrent_tallies_publish_once(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
        fake_time_authority: FakeTimeAuthority,
        harness: GovernanceHarness,
    ) -> None:
        election = await _create(engine, team, window)
        await engine.register_candidate(election.id, X)
        fake_time_authority.set_time(election.end_date)

        results = await asyncio.gather(*(engine.tally(election.id) for _ in range(4)))

        assert len(set(results)) == 1
        assert harness.publisher.event_types().count("governance.election.published") == 1


class TestQueries:
    async def test_list_elections_by_start(
        self,
        engine: ElectionEngineService,
        team: str,
        window: tuple[datetime, datetime],
    ) -> None:
        later = await _create(
            engine, team, (window[0] + timedelta(days=30), window[1] + timedelta(days=30))
        )
        sooner = await _create(engine, team, window)

        assert [e.id for e in await engine.list_elections(team)] == [sooner.id, later.id]
        assert await engine.list_elections("ghost") == []

    async def test_has_voted_unknown_election(
        self, engine: ElectionEngineService, team: str
    ) -> None:
        with pytest.raises(ElectionNotFoundError):
            await engine.has_voted(uuid7(), X)
