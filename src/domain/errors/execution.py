"""External execution errors.

These are raised AFTER an action has been durably marked executed.
The action never reverts to Proposed; the errors signal that the
on-chain side effect needs manual review.
"""

from __future__ import annotations

from uuid import UUID

from src.domain.exceptions import GovernanceError


class ExternalExecutionFailedError(GovernanceError):
    """Raised when the execution collaborator reports a failure.

    Attributes:
        action_id: The executed action whose side effect failed.
        reason: Failure detail reported by the collaborator.
    """

    def __init__(self, action_id: UUID, reason: str) -> None:
        self.action_id = action_id
        self.reason = reason
        super().__init__(
            f"Action {action_id} is executed but its side effect failed: {reason}. "
            "Manual reconciliation required."
        )


class ExternalExecutionTimeoutError(ExternalExecutionFailedError):
    """Raised when the execution collaborator does not answer in time.

    The action stays executed with its side effect pending.

    Attributes:
        timeout_seconds: The timeout that elapsed.
    """

    def __init__(self, action_id: UUID, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            action_id,
            f"no response within {timeout_seconds}s (side effect pending)",
        )


class ExecutionNotAwaitingReviewError(GovernanceError):
    """Raised when reconciling an action whose side effect is not failed or pending.

    Attributes:
        action_id: The action that was targeted.
        execution_status: Its current execution status value.
    """

    def __init__(self, action_id: UUID, execution_status: str) -> None:
        self.action_id = action_id
        self.execution_status = execution_status
        super().__init__(
            f"Action {action_id} has execution status {execution_status}; "
            "only failed or pending executions can be reconciled"
        )
