"""Action queue errors.

Terminal-state violations, duplicate approvals and threshold failures
for the Proposed -> Executed | Withdrawn state machine.
"""

from __future__ import annotations

from uuid import UUID

from src.domain.exceptions import GovernanceError


class ActionStateError(GovernanceError):
    """Base class for operations rejected because of an action's state.

    Attributes:
        action_id: The action that rejected the operation.
    """

    def __init__(self, action_id: UUID, message: str) -> None:
        self.action_id = action_id
        super().__init__(message)


class ActionAlreadyExecutedError(ActionStateError):
    """Raised when mutating an action that has already been executed."""

    def __init__(self, action_id: UUID) -> None:
        super().__init__(
            action_id,
            f"Action {action_id} has already been executed. "
            "Executed actions cannot be modified.",
        )


class ActionAlreadyWithdrawnError(ActionStateError):
    """Raised when mutating an action its proposer has withdrawn."""

    def __init__(self, action_id: UUID) -> None:
        super().__init__(
            action_id,
            f"Action {action_id} has been withdrawn. "
            "Withdrawn actions cannot be modified.",
        )


class DuplicateApprovalError(ActionStateError):
    """Raised when an approver approves the same action twice.

    Only raised when duplicate approvals are configured to be rejected;
    otherwise a repeated approval is reported as a no-op success.

    Attributes:
        approver: Address that had already approved.
        approval_count: Current approval count (unchanged).
    """

    def __init__(self, action_id: UUID, approver: str, approval_count: int) -> None:
        self.approver = approver
        self.approval_count = approval_count
        super().__init__(
            action_id,
            f"Member {approver} has already approved action {action_id} "
            f"(approvals: {approval_count})",
        )


class InsufficientApprovalsError(ActionStateError):
    """Raised when execution is attempted below the team threshold.

    Attributes:
        approval_count: Distinct approvals recorded.
        threshold: Approvals required by the team policy.
    """

    def __init__(self, action_id: UUID, approval_count: int, threshold: int) -> None:
        self.approval_count = approval_count
        self.threshold = threshold
        super().__init__(
            action_id,
            f"Action {action_id} has {approval_count} of {threshold} "
            "required approvals",
        )


class QuorumReachedError(ActionStateError):
    """Raised when a proposer withdraws an action whose approvals meet the threshold.

    Once the quorum stands, the approvers' decision outranks the
    proposer's wish to cancel.

    Attributes:
        approval_count: Distinct approvals recorded.
        threshold: Approvals required by the team policy.
    """

    def __init__(self, action_id: UUID, approval_count: int, threshold: int) -> None:
        self.approval_count = approval_count
        self.threshold = threshold
        super().__init__(
            action_id,
            f"Action {action_id} cannot be withdrawn: {approval_count} approvals "
            f"already meet the threshold of {threshold}",
        )
