"""Election engine errors.

Timing errors cover the half-open voting window [start_date, end_date).
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from src.domain.errors.validation import InvalidArgumentError
from src.domain.exceptions import GovernanceError


class ElectionTimingError(GovernanceError):
    """Base class for election window violations."""

    pass


class InvalidWindowError(ElectionTimingError):
    """Raised when an election is created with start_date >= end_date.

    Attributes:
        start_date: Requested window start.
        end_date: Requested window end.
    """

    def __init__(self, start_date: datetime, end_date: datetime, reason: str = "") -> None:
        self.start_date = start_date
        self.end_date = end_date
        detail = reason or "start_date must be before end_date"
        super().__init__(
            f"Invalid election window [{start_date.isoformat()}, "
            f"{end_date.isoformat()}): {detail}"
        )


class WindowClosedError(ElectionTimingError):
    """Raised when an operation falls outside the phase that permits it.

    Attributes:
        election_id: The election concerned.
        operation: The rejected operation (e.g. "cast_vote").
        phase: The election phase at the time of the call.
    """

    def __init__(self, election_id: UUID, operation: str, phase: str) -> None:
        self.election_id = election_id
        self.operation = operation
        self.phase = phase
        super().__init__(
            f"Cannot {operation} for election {election_id}: election is {phase}"
        )


class ElectionNotClosedError(ElectionTimingError):
    """Raised when tallying an election whose window has not ended.

    Attributes:
        election_id: The election concerned.
        end_date: When the window closes.
    """

    def __init__(self, election_id: UUID, end_date: datetime) -> None:
        self.election_id = election_id
        self.end_date = end_date
        super().__init__(
            f"Election {election_id} cannot be tallied before {end_date.isoformat()}"
        )


class InvalidChoiceError(GovernanceError):
    """Raised when a ballot is malformed or names an unregistered candidate.

    Attributes:
        election_id: The election concerned.
        choices: The rejected choices.
        reason: Why the ballot was rejected.
    """

    def __init__(self, election_id: UUID, choices: tuple[str, ...], reason: str) -> None:
        self.election_id = election_id
        self.choices = choices
        self.reason = reason
        super().__init__(f"Invalid ballot for election {election_id}: {reason}")


class InsufficientCandidatesError(InvalidArgumentError):
    """Raised when tallying an election with fewer candidates than seats.

    Attributes:
        election_id: The election concerned.
        candidates: Number of registered candidates.
        seat_count: Number of seats to fill.
    """

    def __init__(self, election_id: UUID, candidates: int, seat_count: int) -> None:
        self.election_id = election_id
        self.candidates = candidates
        self.seat_count = seat_count
        super().__init__(
            "candidates",
            f"election {election_id} has {candidates} candidate(s) for {seat_count} seat(s)",
        )
