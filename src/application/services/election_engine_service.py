"""Election engine service - candidate registration, ballots and tallying.

Manages board elections inside a half-open voting window
[start_date, end_date). The phase of an election is always derived from
the time authority; it is never stored.

Invariants:
- at most one ballot per (election, voter); re-casting replaces it
- ballots are accepted only while OPEN
- seat_count is odd, and an election needs at least one eligible voter
- tally runs only once the window has closed and needs at least
  seat_count candidates; its first result is frozen: later calls return
  the stored result without recounting
- register_candidate, cast_vote and tally on one election are
  serialized by a per-election lock
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from structlog import get_logger
from uuid6 import uuid7

from src.application.dtos.governance import BallotReceipt, ElectionSummary
from src.application.services.governance_notification_service import (
    GovernanceNotificationService,
)
from src.application.services.keyed_lock import KeyedLock
from src.application.services.optimistic_retry import retry_on_conflict
from src.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from src.domain.errors import (
    ElectionNotClosedError,
    ElectionNotFoundError,
    InsufficientCandidatesError,
    InvalidArgumentError,
    InvalidChoiceError,
    InvalidWindowError,
    MemberNotFoundError,
    WindowClosedError,
)
from src.domain.events.governance import (
    ElectionCreatedEvent,
    ElectionPublishedEvent,
    VoteCastEvent,
)
from src.domain.models.election import (
    Ballot,
    Candidate,
    Election,
    ElectionPhase,
    TallyResult,
)
from src.domain.models.role import Permission

if TYPE_CHECKING:
    from src.application.ports.election_repository import (
        BallotRepositoryProtocol,
        ElectionRepositoryProtocol,
    )
    from src.application.ports.time_authority import TimeAuthorityProtocol
    from src.application.services.entitlement_registry_service import (
        EntitlementRegistryService,
    )

logger = get_logger(__name__)


class ElectionEngineService:
    """Runs board elections for teams.

    Example:
        >>> engine = ElectionEngineService(
        ...     elections=election_repo,
        ...     ballots=ballot_repo,
        ...     registry=registry,
        ...     time_authority=clock,
        ... )
        >>> election = await engine.create(
        ...     "team-1", "0xA", "Board 2025", "", start, end, seat_count=3
        ... )
        >>> await engine.register_candidate(election.id, "0xB")
        >>> await engine.cast_vote(election.id, "0xC", ["0xB"])
        >>> result = await engine.tally(election.id)
    """

    def __init__(
        self,
        elections: ElectionRepositoryProtocol,
        ballots: BallotRepositoryProtocol,
        registry: EntitlementRegistryService,
        time_authority: TimeAuthorityProtocol,
        notifier: GovernanceNotificationService | None = None,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
        locks: KeyedLock | None = None,
    ) -> None:
        """Initialize the election engine.

        Args:
            elections: Election persistence with CAS saves.
            ballots: Ballot persistence keyed by (election, voter).
            registry: Entitlement registry for permission checks.
            time_authority: The only source of "now" for phase decisions.
            notifier: Fire-and-forget event delivery.
            config: Engine configuration (CAS retry budget).
            locks: Per-election lock registry.
        """
        self._elections = elections
        self._ballots = ballots
        self._registry = registry
        self._time = time_authority
        self._notifier = notifier or GovernanceNotificationService()
        self._config = config
        self._locks = locks or KeyedLock()

    # =========================================================================
    # Commands
    # =========================================================================

    async def create(
        self,
        team_id: str,
        created_by: str,
        title: str,
        description: str,
        start_date: datetime,
        end_date: datetime,
        seat_count: int,
    ) -> Election:
        """Schedule an election.

        Members holding canVote at this moment are recorded as the
        election's eligible voters.

        Args:
            team_id: Team running the election.
            created_by: Caller; must hold canRunElection.
            title: Short title.
            description: Longer description.
            start_date: Window start, inclusive, timezone-aware.
            end_date: Window end, exclusive, timezone-aware.
            seat_count: Number of seats to fill.

        Returns:
            The new election.

        Raises:
            UnauthorizedError: Caller lacks canRunElection.
            InvalidWindowError: Naive dates or start_date >= end_date.
            InvalidArgumentError: seat_count not a positive odd number, empty
                title, or no member of the team holds canVote.
        """
        log = logger.bind(team_id=team_id, created_by=created_by)
        await self._registry.require(team_id, created_by, Permission.CAN_RUN_ELECTION)

        if start_date.tzinfo is None or end_date.tzinfo is None:
            raise InvalidWindowError(start_date, end_date, "dates must be timezone-aware")
        if start_date >= end_date:
            log.warning(
                "Election window rejected",
                start_date=start_date.isoformat(),
                end_date=end_date.isoformat(),
            )
            raise InvalidWindowError(start_date, end_date)
        if seat_count < 1 or seat_count % 2 == 0:
            raise InvalidArgumentError(
                "seat_count", f"must be a positive odd number, got {seat_count}"
            )
        if not title.strip():
            raise InvalidArgumentError("title", "must be non-empty")

        eligible_voters = await self._registry.members_with(team_id, Permission.CAN_VOTE)
        if not eligible_voters:
            raise InvalidArgumentError(
                "eligible_voters", f"team {team_id} has no member holding canVote"
            )

        now = self._time.utcnow()
        election = Election(
            id=uuid7(),
            team_id=team_id,
            title=title,
            description=description,
            created_by=created_by,
            start_date=start_date,
            end_date=end_date,
            seat_count=seat_count,
            created_at=now,
            eligible_voters=eligible_voters,
        )
        await self._elections.add(election)
        log.info(
            "Election created",
            election_id=str(election.id),
            seat_count=seat_count,
            eligible_voters=len(election.eligible_voters),
        )

        await self._notifier.publish(
            ElectionCreatedEvent(
                team_id=team_id,
                actor=created_by,
                occurred_at=now,
                election_id=election.id,
                title=title,
                start_date=start_date,
                end_date=end_date,
                seat_count=seat_count,
            )
        )
        return election

    async def register_candidate(self, election_id: UUID, candidate: str) -> Election:
        """Register a team member as a candidate.

        Registering a known candidate again is a no-op; the original
        registration time is kept.

        Raises:
            ElectionNotFoundError: Election is unknown.
            WindowClosedError: Election is closed or published.
            MemberNotFoundError: Candidate is not a member of the team.
        """

        async def attempt() -> Election:
            election = await self.get(election_id)
            phase = election.phase_at(self._time.utcnow())
            if not phase.accepts_candidates():
                raise WindowClosedError(election_id, "register_candidate", phase.value)
            if not await self._registry.is_member(election.team_id, candidate):
                raise MemberNotFoundError(election.team_id, candidate)

            updated = election.with_candidate(
                Candidate(candidate_id=candidate, registered_at=self._time.utcnow())
            )
            if updated is election:
                return election
            return await self._elections.save(updated, expected_version=election.version)

        async with self._locks.hold(election_id):
            election = await retry_on_conflict(
                attempt,
                max_attempts=self._config.cas_max_retries,
                operation_name="register_candidate",
            )
        logger.info(
            "Candidate registered",
            election_id=str(election_id),
            candidate=candidate,
            candidates=len(election.candidates),
        )
        return election

    async def cast_vote(
        self,
        election_id: UUID,
        voter: str,
        choices: Sequence[str],
    ) -> BallotReceipt:
        """Record a voter's ballot, replacing any earlier one.

        Each listed candidate receives one vote. Choices must be
        non-empty, distinct, at most seat_count long and all registered.

        Args:
            election_id: Election to vote in.
            voter: Caller; must currently hold canVote in the team.
            choices: Candidate ids.

        Returns:
            BallotReceipt telling whether an earlier ballot was replaced.

        Raises:
            ElectionNotFoundError: Election is unknown.
            WindowClosedError: Election is not OPEN.
            UnauthorizedError: Voter lacks canVote.
            InvalidChoiceError: Malformed ballot or unregistered candidate.
        """
        log = logger.bind(election_id=str(election_id), voter=voter)
        picked = tuple(choices)

        async with self._locks.hold(election_id):
            election = await self.get(election_id)
            now = self._time.utcnow()
            phase = election.phase_at(now)
            if not phase.accepts_votes():
                log.warning("Ballot outside voting window", phase=phase.value)
                raise WindowClosedError(election_id, "cast_vote", phase.value)

            await self._registry.require(election.team_id, voter, Permission.CAN_VOTE)
            self._validate_choices(election, picked)

            replaced = await self._ballots.upsert(
                Ballot(election_id=election_id, voter=voter, choices=picked, cast_at=now)
            )

        log.info("Ballot recorded", replaced_previous=replaced, choices=len(picked))
        await self._notifier.publish(
            VoteCastEvent(
                team_id=election.team_id,
                actor=voter,
                occurred_at=now,
                election_id=election_id,
                replaced_previous=replaced,
            )
        )
        return BallotReceipt(
            election_id=election_id,
            voter=voter,
            choices=picked,
            cast_at=now,
            replaced_previous=replaced,
        )

    async def tally(self, election_id: UUID, tallied_by: str = "system") -> TallyResult:
        """Tally a closed election and publish the result.

        The first successful tally is stored on the election; every later
        call returns that stored result unchanged.

        Args:
            election_id: Election to tally.
            tallied_by: Actor recorded on the published event.

        Returns:
            The frozen TallyResult.

        Raises:
            ElectionNotFoundError: Election is unknown.
            ElectionNotClosedError: Voting window has not ended.
            InsufficientCandidatesError: Fewer candidates than seats; the
                election stays unpublished.
        """
        log = logger.bind(election_id=str(election_id))

        async def attempt() -> tuple[Election, TallyResult, bool]:
            election = await self.get(election_id)
            if election.result is not None:
                return election, election.result, False

            now = self._time.utcnow()
            if election.phase_at(now) is not ElectionPhase.CLOSED:
                raise ElectionNotClosedError(election_id, election.end_date)
            if len(election.candidates) < election.seat_count:
                log.warning(
                    "Tally rejected, not enough candidates",
                    candidates=len(election.candidates),
                    seat_count=election.seat_count,
                )
                raise InsufficientCandidatesError(
                    election_id, len(election.candidates), election.seat_count
                )

            result = TallyResult.compute(
                election_id=election_id,
                candidates=election.candidates,
                ballots=await self._ballots.list_for_election(election_id),
                seat_count=election.seat_count,
                tallied_at=now,
            )
            saved = await self._elections.save(
                election.with_result(result), expected_version=election.version
            )
            return saved, result, True

        async with self._locks.hold(election_id):
            election, result, published = await retry_on_conflict(
                attempt,
                max_attempts=self._config.cas_max_retries,
                operation_name="tally",
            )

        if not published:
            log.debug("Returning stored tally")
            return result

        log.info(
            "Election results published",
            winners=list(result.winners),
            ballots_counted=result.ballots_counted,
            content_hash=result.content_hash.hex(),
        )
        await self._notifier.publish(
            ElectionPublishedEvent(
                team_id=election.team_id,
                actor=tallied_by,
                occurred_at=result.tallied_at,
                election_id=election_id,
                winners=result.winners,
                content_hash=result.content_hash.hex(),
            )
        )
        return result

    async def mark_board_seated(self, election_id: UUID) -> Election:
        """Record that a published election's winners hold the board role.

        Idempotent: the first seating time is kept.

        Raises:
            ElectionNotFoundError: Election is unknown.
            ElectionNotClosedError: Results are not published yet.
        """

        async def attempt() -> Election:
            election = await self.get(election_id)
            if election.result is None:
                raise ElectionNotClosedError(election_id, election.end_date)
            updated = election.with_board_seated(self._time.utcnow())
            if updated is election:
                return election
            return await self._elections.save(updated, expected_version=election.version)

        async with self._locks.hold(election_id):
            election = await retry_on_conflict(
                attempt,
                max_attempts=self._config.cas_max_retries,
                operation_name="mark_board_seated",
            )
        logger.info(
            "Election winners seated",
            election_id=str(election_id),
            team_id=election.team_id,
        )
        return election

    # =========================================================================
    # Queries
    # =========================================================================

    async def get(self, election_id: UUID) -> Election:
        """Return an election.

        Raises:
            ElectionNotFoundError: If the election is unknown.
        """
        election = await self._elections.get(election_id)
        if election is None:
            raise ElectionNotFoundError(election_id)
        return election

    async def get_election(self, election_id: UUID) -> ElectionSummary:
        """Return an election with its phase and derived counters."""
        election = await self.get(election_id)
        return ElectionSummary(
            id=election.id,
            team_id=election.team_id,
            title=election.title,
            description=election.description,
            created_by=election.created_by,
            start_date=election.start_date,
            end_date=election.end_date,
            seat_count=election.seat_count,
            results_published=election.results_published,
            phase=election.phase_at(self._time.utcnow()),
            votes_cast=await self._ballots.count(election_id),
            candidates=len(election.candidates),
            voters=len(election.eligible_voters),
            result=election.result,
        )

    async def list_elections(self, team_id: str) -> list[Election]:
        return await self._elections.list_by_team(team_id)

    async def list_candidates(self, election_id: UUID) -> tuple[Candidate, ...]:
        return (await self.get(election_id)).candidates

    async def has_voted(self, election_id: UUID, voter: str) -> bool:
        await self.get(election_id)
        return await self._ballots.get(election_id, voter) is not None

    async def get_winners(self, election_id: UUID) -> tuple[str, ...]:
        """Return the winners, or an empty tuple until results are published."""
        election = await self.get(election_id)
        if election.result is None:
            return ()
        return election.result.winners

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _validate_choices(election: Election, choices: tuple[str, ...]) -> None:
        if not choices:
            raise InvalidChoiceError(election.id, choices, "ballot names no candidate")
        if len(set(choices)) != len(choices):
            raise InvalidChoiceError(election.id, choices, "candidate named more than once")
        if len(choices) > election.seat_count:
            raise InvalidChoiceError(
                election.id,
                choices,
                f"{len(choices)} choices for {election.seat_count} seat(s)",
            )
        unknown = sorted(set(choices) - election.candidate_ids())
        if unknown:
            raise InvalidChoiceError(
                election.id, choices, f"unregistered candidate(s): {', '.join(unknown)}"
            )
