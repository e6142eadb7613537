"""Argument validation errors for governance operations."""

from src.domain.exceptions import GovernanceError


class InvalidArgumentError(GovernanceError):
    """Raised when an operation argument is out of range or malformed.

    Attributes:
        field: Name of the offending argument.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")
