"""Team member and team policy domain models.

A Member is owned by a team and identified by a stable address. Its
role set is replaced wholesale on every grant or revoke, so readers
always see a consistent snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime


@dataclass(frozen=True, eq=True)
class Member:
    """A member of a team and the role names assigned to it.

    Attributes:
        team_id: Team the member belongs to.
        address: Stable member identifier (wallet address).
        roles: Names of the roles currently held. Possibly empty.
        joined_at: When the member joined the team (UTC).
        version: Optimistic concurrency version, bumped on every save.
    """

    team_id: str
    address: str
    joined_at: datetime
    roles: frozenset[str] = field(default_factory=frozenset)
    version: int = 0

    def __post_init__(self) -> None:
        if not self.address:
            raise ValueError("Member address must be non-empty")
        if self.joined_at.tzinfo is None:
            raise ValueError("joined_at must be timezone-aware (UTC)")

    def with_role(self, role: str) -> Member:
        """Return a copy holding one more role (same object if already held)."""
        if role in self.roles:
            return self
        return replace(self, roles=self.roles | {role})

    def without_role(self, role: str) -> Member:
        """Return a copy without a role (same object if not held)."""
        if role not in self.roles:
            return self
        return replace(self, roles=self.roles - {role})


@dataclass(frozen=True, eq=True)
class TeamPolicy:
    """Per-team governance settings.

    Attributes:
        team_id: Team the policy applies to.
        approval_threshold: Distinct approvals needed to execute an action.
        updated_at: When the policy last changed.
        updated_by: Address of the member who changed it.
    """

    team_id: str
    approval_threshold: int
    updated_at: datetime | None = None
    updated_by: str | None = None

    def __post_init__(self) -> None:
        if self.approval_threshold < 1:
            raise ValueError(
                f"approval_threshold must be at least 1, got {self.approval_threshold}"
            )
