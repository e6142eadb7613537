"""Treasury action domain model.

An Action is a proposed treasury operation (payment, parameter change)
that executes against an on-chain target once enough distinct members
have approved it.

State Machine:
    PROPOSED -> EXECUTED   (threshold met, executor triggers)
    PROPOSED -> WITHDRAWN  (proposer cancels before quorum)

EXECUTED and WITHDRAWN are terminal. The approval count is never stored;
it is the size of the approver set, so re-approval by the same member
cannot double count.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import ClassVar
from uuid import UUID

from src.domain.errors.action import (
    ActionAlreadyExecutedError,
    ActionAlreadyWithdrawnError,
)


class ActionState(Enum):
    """Lifecycle state of an action."""

    PROPOSED = "proposed"
    EXECUTED = "executed"
    WITHDRAWN = "withdrawn"

    def is_terminal(self) -> bool:
        return self in TERMINAL_ACTION_STATES


TERMINAL_ACTION_STATES: frozenset[ActionState] = frozenset(
    {ActionState.EXECUTED, ActionState.WITHDRAWN}
)


class ExecutionStatus(Enum):
    """Progress of the external side effect of an executed action.

    States:
        NOT_STARTED: Action not executed yet.
        PENDING: Intent recorded; side effect dispatched or timed out.
        SUCCEEDED: Collaborator confirmed the side effect.
        FAILED: Collaborator reported failure; awaiting manual review.
        RECONCILED: A reviewer resolved a failed or pending side effect.
    """

    NOT_STARTED = "not_started"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RECONCILED = "reconciled"

    def awaits_review(self) -> bool:
        return self in (ExecutionStatus.PENDING, ExecutionStatus.FAILED)


@dataclass(frozen=True, eq=True)
class Action:
    """A proposed treasury action and its approval record.

    Attributes:
        id: UUIDv7 identifier assigned at proposal.
        team_id: Owning team.
        proposer: Address of the member that proposed it.
        target: Destination identifier (contract or wallet address).
        description: Human-readable purpose.
        data: Opaque payload executed against the target.
        created_at: Proposal timestamp (UTC).
        approvers: Distinct approving member addresses.
        state: Lifecycle state.
        execution_status: Progress of the external side effect.
        execution_reference: Collaborator reference (e.g. tx hash).
        executed_at: When execution was triggered.
        executed_by: Member that triggered execution.
        withdrawn_at: When the proposer withdrew the action.
        version: Optimistic concurrency version.
    """

    id: UUID
    team_id: str
    proposer: str
    target: str
    description: str
    data: bytes
    created_at: datetime
    approvers: frozenset[str] = field(default_factory=frozenset)
    state: ActionState = ActionState.PROPOSED
    execution_status: ExecutionStatus = ExecutionStatus.NOT_STARTED
    execution_reference: str | None = None
    executed_at: datetime | None = None
    executed_by: str | None = None
    withdrawn_at: datetime | None = None
    version: int = 0

    MAX_DESCRIPTION_LENGTH: ClassVar[int] = 10_000

    def __post_init__(self) -> None:
        if not self.target:
            raise ValueError("Action target must be non-empty")
        if len(self.description) > self.MAX_DESCRIPTION_LENGTH:
            raise ValueError(
                f"Action description exceeds {self.MAX_DESCRIPTION_LENGTH} characters"
            )
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware (UTC)")

    @property
    def approval_count(self) -> int:
        """Number of distinct approvers."""
        return len(self.approvers)

    @property
    def is_executed(self) -> bool:
        return self.state is ActionState.EXECUTED

    def has_approved(self, member: str) -> bool:
        return member in self.approvers

    def ensure_proposed(self) -> None:
        """Raise the matching terminal-state error unless still PROPOSED.

        Raises:
            ActionAlreadyExecutedError: Action is EXECUTED.
            ActionAlreadyWithdrawnError: Action is WITHDRAWN.
        """
        if self.state is ActionState.EXECUTED:
            raise ActionAlreadyExecutedError(self.id)
        if self.state is ActionState.WITHDRAWN:
            raise ActionAlreadyWithdrawnError(self.id)

    def with_approval(self, approver: str) -> Action:
        """Return a copy with the approver added to the approver set.

        Since Action is frozen, returns a new instance. Adding an existing
        approver returns an equal action.

        Raises:
            ActionAlreadyExecutedError: Action is EXECUTED.
            ActionAlreadyWithdrawnError: Action is WITHDRAWN.
        """
        self.ensure_proposed()
        return replace(self, approvers=self.approvers | {approver})

    def mark_executed(self, executor: str, at: datetime) -> Action:
        """Record execution intent: EXECUTED with a PENDING side effect.

        The threshold check belongs to the caller, which knows the team
        policy.
        """
        self.ensure_proposed()
        return replace(
            self,
            state=ActionState.EXECUTED,
            execution_status=ExecutionStatus.PENDING,
            executed_at=at,
            executed_by=executor,
        )

    def mark_withdrawn(self, at: datetime) -> Action:
        self.ensure_proposed()
        return replace(self, state=ActionState.WITHDRAWN, withdrawn_at=at)

    def with_execution_status(
        self,
        status: ExecutionStatus,
        reference: str | None = None,
    ) -> Action:
        """Return a copy with an updated side-effect status.

        Only meaningful for EXECUTED actions.
        """
        if self.state is not ActionState.EXECUTED:
            raise ValueError(
                f"Execution status only applies to executed actions (state={self.state.value})"
            )
        return replace(
            self,
            execution_status=status,
            execution_reference=reference if reference is not None else self.execution_reference,
        )
