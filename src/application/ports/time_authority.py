"""Time Authority Protocol - interface for consistent timestamp provisioning.

All services that need the current time (election phases, action
timestamps, tally timestamps) MUST inject a TimeAuthorityProtocol
implementation instead of calling datetime.now() directly.

Benefits:
1. **Consistency**: Every election phase decision uses the same clock
2. **Testability**: Tests inject FakeTimeAuthority to sit exactly on a
   window boundary
3. **Auditability**: Timestamps come from a single source
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            def process(self) -> None:
                now = self._time.utcnow()  # NOT datetime.now()

    For production:
        Use SystemTimeAuthority from src/infrastructure/adapters/

    For testing:
        Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current time with timezone awareness (UTC recommended)."""
        ...

    @abstractmethod
    def utcnow(self) -> datetime:
        """Return current UTC time.

        Returns:
            Current datetime in UTC timezone (always timezone-aware).
        """
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return monotonic clock value for measuring elapsed time.

        Note:
            Use this for measuring elapsed time, not for timestamps.
            Only differences between values are meaningful.
        """
        ...
