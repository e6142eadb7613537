"""Base exception classes for the governance domain layer."""


class GovernanceError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    The governance facade relies on this single root to translate
    failures into the external error taxonomy.

    Direct subclasses live in src/domain/errors/:
    - EntityNotFoundError
    - UnauthorizedError
    - ActionStateError
    - ElectionTimingError
    - ExternalExecutionFailedError
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
