"""Governance facade - single entry point for external callers.

Composes the entitlement registry, the action queue and the election
engine into one API. The facade holds no state of its own. It:

1. Checks the caller's permission where an operation is not already
   gated by the service it delegates to
2. Delegates to the owning service
3. Converts every domain error into a GovernanceFailure carrying a
   stable ErrorKind, so callers never depend on internal exception types

Error kinds are the external contract. Internal exception classes may
change; ErrorKind values may not.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from structlog import get_logger

from src.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from src.domain.errors import (
    ActionAlreadyExecutedError,
    ActionAlreadyWithdrawnError,
    ActionStateError,
    ConcurrentModificationError,
    DuplicateApprovalError,
    ElectionNotClosedError,
    ElectionTimingError,
    EntityNotFoundError,
    ExecutionNotAwaitingReviewError,
    ExternalExecutionFailedError,
    ExternalExecutionTimeoutError,
    InsufficientApprovalsError,
    InvalidArgumentError,
    InvalidChoiceError,
    InvalidWindowError,
    QuorumReachedError,
    RoleNotFoundError,
    UnauthorizedError,
    WindowClosedError,
)
from src.domain.exceptions import GovernanceError
from src.domain.models.role import Permission

if TYPE_CHECKING:
    from src.application.dtos.governance import (
        ApprovalResult,
        BallotReceipt,
        ElectionSummary,
        ExecutionResult,
    )
    from src.application.services.action_queue_service import ActionQueueService
    from src.application.services.election_engine_service import (
        ElectionEngineService,
    )
    from src.application.services.entitlement_registry_service import (
        EntitlementRegistryService,
    )
    from src.domain.models.action import Action
    from src.domain.models.election import Candidate, Election, TallyResult
    from src.domain.models.member import Member, TeamPolicy

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    """Stable external error taxonomy."""

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INVALID_WINDOW = "invalid_window"
    WINDOW_CLOSED = "window_closed"
    INVALID_CHOICE = "invalid_choice"
    DUPLICATE_APPROVAL = "duplicate_approval"
    ALREADY_EXECUTED = "already_executed"
    ALREADY_WITHDRAWN = "already_withdrawn"
    INSUFFICIENT_APPROVALS = "insufficient_approvals"
    EXTERNAL_EXECUTION_FAILED = "external_execution_failed"
    EXTERNAL_EXECUTION_TIMEOUT = "external_execution_timeout"
    QUORUM_REACHED = "quorum_reached"
    ELECTION_NOT_CLOSED = "election_not_closed"
    EXECUTION_NOT_AWAITING_REVIEW = "execution_not_awaiting_review"
    INVALID_ARGUMENT = "invalid_argument"
    CONFLICT = "conflict"


# Most specific classes first: the first isinstance match wins.
_ERROR_KINDS: tuple[tuple[type[GovernanceError], ErrorKind], ...] = (
    (UnauthorizedError, ErrorKind.UNAUTHORIZED),
    (EntityNotFoundError, ErrorKind.NOT_FOUND),
    (InvalidWindowError, ErrorKind.INVALID_WINDOW),
    (ElectionNotClosedError, ErrorKind.ELECTION_NOT_CLOSED),
    (WindowClosedError, ErrorKind.WINDOW_CLOSED),
    (ElectionTimingError, ErrorKind.WINDOW_CLOSED),
    (InvalidChoiceError, ErrorKind.INVALID_CHOICE),
    (DuplicateApprovalError, ErrorKind.DUPLICATE_APPROVAL),
    (ActionAlreadyExecutedError, ErrorKind.ALREADY_EXECUTED),
    (ActionAlreadyWithdrawnError, ErrorKind.ALREADY_WITHDRAWN),
    (InsufficientApprovalsError, ErrorKind.INSUFFICIENT_APPROVALS),
    (QuorumReachedError, ErrorKind.QUORUM_REACHED),
    (ActionStateError, ErrorKind.CONFLICT),
    (ExternalExecutionTimeoutError, ErrorKind.EXTERNAL_EXECUTION_TIMEOUT),
    (ExternalExecutionFailedError, ErrorKind.EXTERNAL_EXECUTION_FAILED),
    (ExecutionNotAwaitingReviewError, ErrorKind.EXECUTION_NOT_AWAITING_REVIEW),
    (InvalidArgumentError, ErrorKind.INVALID_ARGUMENT),
    (ConcurrentModificationError, ErrorKind.CONFLICT),
)


def classify(error: GovernanceError) -> ErrorKind:
    """Map a domain error to its external kind.

    Unlisted GovernanceError subclasses are reported as INVALID_ARGUMENT.
    """
    for error_type, kind in _ERROR_KINDS:
        if isinstance(error, error_type):
            return kind
    return ErrorKind.INVALID_ARGUMENT


class GovernanceFailure(Exception):
    """Typed failure returned to external callers.

    Attributes:
        kind: Stable error kind.
        message: Human-readable detail.
        operation: Facade operation that failed.
    """

    def __init__(self, kind: ErrorKind, message: str, operation: str) -> None:
        self.kind = kind
        self.message = message
        self.operation = operation
        super().__init__(f"{operation} failed ({kind.value}): {message}")


class GovernanceFacade:
    """Single entry point for the UI and HTTP layers.

    Example:
        >>> facade = GovernanceFacade(registry, action_queue, election_engine)
        >>> action = await facade.propose_action("team-1", "0xA", "0xVault", "Pay")
        >>> try:
        ...     await facade.execute_action(action.id, "0xA")
        ... except GovernanceFailure as failure:
        ...     assert failure.kind is ErrorKind.INSUFFICIENT_APPROVALS
    """

    def __init__(
        self,
        registry: EntitlementRegistryService,
        action_queue: ActionQueueService,
        election_engine: ElectionEngineService,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
    ) -> None:
        self._registry = registry
        self._actions = action_queue
        self._elections = election_engine
        self._config = config

    @contextmanager
    def _translate(self, operation: str) -> Iterator[None]:
        try:
            yield
        except GovernanceError as exc:
            kind = classify(exc)
            logger.info(
                "Governance operation failed",
                operation=operation,
                kind=kind.value,
                error=str(exc),
            )
            raise GovernanceFailure(kind, str(exc), operation) from exc

    # =========================================================================
    # Teams and roles
    # =========================================================================

    async def create_team(self, team_id: str, founder: str) -> Member:
        with self._translate("create_team"):
            return await self._registry.create_team(team_id, founder)

    async def join_team(self, team_id: str, member: str) -> Member:
        with self._translate("join_team"):
            return await self._registry.join(team_id, member)

    async def list_members(self, team_id: str) -> tuple[Member, ...]:
        with self._translate("list_members"):
            return await self._registry.list_members(team_id)

    async def grant_role(
        self,
        team_id: str,
        member: str,
        role: str,
        caller: str,
    ) -> frozenset[str]:
        with self._translate("grant_role"):
            return await self._registry.grant(team_id, member, role, granted_by=caller)

    async def revoke_role(
        self,
        team_id: str,
        member: str,
        role: str,
        caller: str,
    ) -> frozenset[str]:
        with self._translate("revoke_role"):
            return await self._registry.revoke(team_id, member, role, revoked_by=caller)

    async def list_roles(self, team_id: str, member: str) -> frozenset[str]:
        with self._translate("list_roles"):
            return await self._registry.list_roles(team_id, member)

    async def has_permission(
        self,
        team_id: str,
        member: str,
        permission: Permission,
    ) -> bool:
        return await self._registry.has(team_id, member, permission)

    async def set_approval_threshold(
        self,
        team_id: str,
        threshold: int,
        caller: str,
    ) -> TeamPolicy:
        with self._translate("set_approval_threshold"):
            return await self._actions.set_threshold(team_id, threshold, changed_by=caller)

    # =========================================================================
    # Actions
    # =========================================================================

    async def propose_action(
        self,
        team_id: str,
        caller: str,
        target: str,
        description: str,
        data: bytes = b"",
    ) -> Action:
        with self._translate("propose_action"):
            return await self._actions.propose(team_id, caller, target, description, data)

    async def approve_action(self, action_id: UUID, caller: str) -> ApprovalResult:
        with self._translate("approve_action"):
            return await self._actions.approve(action_id, caller)

    async def execute_action(self, action_id: UUID, caller: str) -> ExecutionResult:
        with self._translate("execute_action"):
            return await self._actions.execute(action_id, caller)

    async def withdraw_action(self, action_id: UUID, caller: str) -> Action:
        with self._translate("withdraw_action"):
            return await self._actions.withdraw(action_id, caller)

    async def reconcile_execution(
        self,
        action_id: UUID,
        caller: str,
        reference: str | None = None,
        note: str = "",
    ) -> Action:
        with self._translate("reconcile_execution"):
            return await self._actions.reconcile_execution(
                action_id, caller, reference=reference, note=note
            )

    async def get_action(self, action_id: UUID) -> Action:
        with self._translate("get_action"):
            return await self._actions.get_action(action_id)

    async def list_actions(
        self,
        team_id: str,
        is_executed: bool | None = None,
    ) -> list[Action]:
        with self._translate("list_actions"):
            return await self._actions.list_actions(team_id, is_executed=is_executed)

    async def has_approved(self, action_id: UUID, member: str) -> bool:
        with self._translate("has_approved"):
            return await self._actions.has_approved(action_id, member)

    # =========================================================================
    # Elections
    # =========================================================================

    async def create_election(
        self,
        team_id: str,
        caller: str,
        title: str,
        description: str,
        start_date: datetime,
        end_date: datetime,
        seat_count: int,
    ) -> Election:
        with self._translate("create_election"):
            return await self._elections.create(
                team_id, caller, title, description, start_date, end_date, seat_count
            )

    async def register_candidate(
        self,
        election_id: UUID,
        candidate: str,
        caller: str,
    ) -> Election:
        """Register a candidate.

        Members may nominate themselves; registering anyone else requires
        canRunElection.
        """
        with self._translate("register_candidate"):
            if caller != candidate:
                election = await self._elections.get(election_id)
                await self._registry.require(
                    election.team_id, caller, Permission.CAN_RUN_ELECTION
                )
            return await self._elections.register_candidate(election_id, candidate)

    async def cast_vote(
        self,
        election_id: UUID,
        caller: str,
        choices: Sequence[str],
    ) -> BallotReceipt:
        with self._translate("cast_vote"):
            return await self._elections.cast_vote(election_id, caller, choices)

    async def publish_results(self, election_id: UUID, caller: str) -> TallyResult:
        """Tally a closed election and seat its winners.

        When a board role is configured, the winners become exactly the
        holders of that role and the election records the seating. A call
        whose seating failed can be repeated: the stored result is seated
        again. Once seating is recorded, later calls return the stored
        result and change nothing.

        Raises:
            GovernanceFailure: UNAUTHORIZED without canRunElection,
                ELECTION_NOT_CLOSED before the window ends, NOT_FOUND for
                an unknown election or a board role missing from the
                catalog, INVALID_ARGUMENT with fewer candidates than seats.
        """
        with self._translate("publish_results"):
            election = await self._elections.get(election_id)
            await self._registry.require(
                election.team_id, caller, Permission.CAN_RUN_ELECTION
            )
            board_role = self._config.board_role
            if election.result is not None and (
                board_role is None or election.board_seated_at is not None
            ):
                return election.result
            if board_role is not None and board_role not in self._registry.catalog:
                raise RoleNotFoundError(board_role)

            result = await self._elections.tally(election_id, tallied_by=caller)
            if board_role is not None:
                await self._registry.seat_role_holders(
                    election.team_id, board_role, result.winners
                )
                await self._elections.mark_board_seated(election_id)
            return result

    async def get_election(self, election_id: UUID) -> ElectionSummary:
        with self._translate("get_election"):
            return await self._elections.get_election(election_id)

    async def list_elections(self, team_id: str) -> list[Election]:
        with self._translate("list_elections"):
            return await self._elections.list_elections(team_id)

    async def list_candidates(self, election_id: UUID) -> tuple[Candidate, ...]:
        with self._translate("list_candidates"):
            return await self._elections.list_candidates(election_id)

    async def has_voted(self, election_id: UUID, voter: str) -> bool:
        with self._translate("has_voted"):
            return await self._elections.has_voted(election_id, voter)

    async def get_winners(self, election_id: UUID) -> tuple[str, ...]:
        with self._translate("get_winners"):
            return await self._elections.get_winners(election_id)
