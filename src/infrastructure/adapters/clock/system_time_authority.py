"""System clock implementation of TimeAuthorityProtocol.

Production wiring uses this adapter; tests inject FakeTimeAuthority.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Reads the host clock. All datetimes are timezone-aware UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
