"""Authorization errors raised by the entitlement registry."""

from __future__ import annotations

from src.domain.exceptions import GovernanceError


class UnauthorizedError(GovernanceError):
    """Raised when a member lacks the permission an operation requires.

    Also raised when an operation is reserved to a specific member
    (e.g. only the proposer may withdraw an action) and someone else
    attempts it.

    Attributes:
        team_id: Team in which the permission was checked.
        member: Address of the caller.
        permission: Name of the missing permission, or a short
            description of the ownership rule that was violated.
    """

    def __init__(self, team_id: str, member: str, permission: str) -> None:
        self.team_id = team_id
        self.member = member
        self.permission = permission
        super().__init__(
            f"Member {member} is not authorized for {permission} in team {team_id}"
        )
