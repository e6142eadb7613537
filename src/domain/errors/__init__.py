"""Domain errors for the governance engine.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GovernanceError.
"""

from src.domain.errors.action import (
    ActionAlreadyExecutedError,
    ActionAlreadyWithdrawnError,
    ActionStateError,
    DuplicateApprovalError,
    InsufficientApprovalsError,
    QuorumReachedError,
)
from src.domain.errors.authorization import UnauthorizedError
from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.errors.election import (
    ElectionNotClosedError,
    ElectionTimingError,
    InsufficientCandidatesError,
    InvalidChoiceError,
    InvalidWindowError,
    WindowClosedError,
)
from src.domain.errors.execution import (
    ExecutionNotAwaitingReviewError,
    ExternalExecutionFailedError,
    ExternalExecutionTimeoutError,
)
from src.domain.errors.not_found import (
    ActionNotFoundError,
    ElectionNotFoundError,
    EntityNotFoundError,
    MemberNotFoundError,
    RoleNotFoundError,
    TeamNotFoundError,
)
from src.domain.errors.validation import InvalidArgumentError

__all__: list[str] = [
    # Not found
    "EntityNotFoundError",
    "TeamNotFoundError",
    "MemberNotFoundError",
    "RoleNotFoundError",
    "ActionNotFoundError",
    "ElectionNotFoundError",
    # Authorization
    "UnauthorizedError",
    # Action queue
    "ActionStateError",
    "ActionAlreadyExecutedError",
    "ActionAlreadyWithdrawnError",
    "DuplicateApprovalError",
    "InsufficientApprovalsError",
    "QuorumReachedError",
    # External execution
    "ExternalExecutionFailedError",
    "ExternalExecutionTimeoutError",
    "ExecutionNotAwaitingReviewError",
    # Elections
    "ElectionTimingError",
    "InvalidWindowError",
    "WindowClosedError",
    "ElectionNotClosedError",
    "InvalidChoiceError",
    "InsufficientCandidatesError",
    # Validation / concurrency
    "InvalidArgumentError",
    "ConcurrentModificationError",
]
