"""Not-found errors for governance entities.

Every entity the engine addresses by identifier (team, member, role,
action, election) has a dedicated subclass so callers can tell which
reference was dangling, while the facade maps all of them to a single
NOT_FOUND kind.
"""

from __future__ import annotations

from uuid import UUID

from src.domain.exceptions import GovernanceError


class EntityNotFoundError(GovernanceError):
    """Base class for references to entities that do not exist.

    Attributes:
        entity: Kind of entity that was looked up (e.g. "action").
        identifier: The identifier that did not resolve.
    """

    entity: str = "entity"

    def __init__(self, identifier: str | UUID, message: str | None = None) -> None:
        self.identifier = str(identifier)
        super().__init__(message or f"{self.entity.capitalize()} not found: {identifier}")


class TeamNotFoundError(EntityNotFoundError):
    """Raised when a team identifier is not registered."""

    entity = "team"


class MemberNotFoundError(EntityNotFoundError):
    """Raised when an address is not a member of the given team.

    Attributes:
        team_id: Team that was searched.
        member: Address that was not found in the team.
    """

    entity = "member"

    def __init__(self, team_id: str, member: str) -> None:
        self.team_id = team_id
        self.member = member
        super().__init__(
            member,
            f"Member {member} not found in team {team_id}",
        )


class RoleNotFoundError(EntityNotFoundError):
    """Raised when a role name is absent from the role catalog."""

    entity = "role"


class ActionNotFoundError(EntityNotFoundError):
    """Raised when an action identifier is unknown."""

    entity = "action"


class ElectionNotFoundError(EntityNotFoundError):
    """Raised when an election identifier is unknown."""

    entity = "election"
