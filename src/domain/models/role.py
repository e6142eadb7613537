"""Role and permission domain models.

A Role is an immutable, named bundle of permissions. Members hold role
names; the RoleCatalog resolves those names to permission sets. Because
grants are validated against the catalog, a member can never hold a
role name that does not resolve.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Permission(Enum):
    """Permissions checked by privileged governance operations.

    Values match the external permission names used by the treasury
    frontend and API.
    """

    CAN_PROPOSE = "canPropose"
    CAN_APPROVE = "canApprove"
    CAN_EXECUTE = "canExecute"
    CAN_MANAGE_ROLES = "canManageRoles"
    CAN_RUN_ELECTION = "canRunElection"
    CAN_VOTE = "canVote"


@dataclass(frozen=True, eq=True)
class Role:
    """A named permission bundle.

    Attributes:
        name: Unique role name within a catalog.
        permissions: Permissions granted by holding this role.
        description: Optional human-readable summary.
    """

    name: str
    permissions: frozenset[Permission]
    description: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Role name must be non-empty")


class RoleCatalog:
    """Read-only registry of the roles that may be granted.

    Example:
        >>> catalog = RoleCatalog([Role("auditor", frozenset())])
        >>> catalog.get("auditor").name
        'auditor'
    """

    def __init__(self, roles: Iterable[Role]) -> None:
        by_name: dict[str, Role] = {}
        for role in roles:
            if role.name in by_name:
                raise ValueError(f"Duplicate role name in catalog: {role.name}")
            by_name[role.name] = role
        self._roles: Mapping[str, Role] = MappingProxyType(by_name)

    def get(self, name: str) -> Role | None:
        return self._roles.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._roles

    def permissions_for(self, role_names: Iterable[str]) -> frozenset[Permission]:
        """Union of permissions over the given role names.

        Names absent from the catalog contribute nothing.
        """
        granted: set[Permission] = set()
        for name in role_names:
            role = self._roles.get(name)
            if role is not None:
                granted |= role.permissions
        return frozenset(granted)


OWNER_ROLE = "owner"
ROLE_ADMIN_ROLE = "role_admin"
BOARD_MEMBER_ROLE = "board_member"
ELECTION_OFFICER_ROLE = "election_officer"
MEMBER_ROLE = "member"

DEFAULT_ROLE_CATALOG = RoleCatalog(
    [
        Role(
            OWNER_ROLE,
            frozenset(Permission),
            "Team founder; holds every permission",
        ),
        Role(
            ROLE_ADMIN_ROLE,
            frozenset({Permission.CAN_MANAGE_ROLES}),
            "Manages role assignments",
        ),
        Role(
            BOARD_MEMBER_ROLE,
            frozenset(
                {
                    Permission.CAN_PROPOSE,
                    Permission.CAN_APPROVE,
                    Permission.CAN_EXECUTE,
                    Permission.CAN_VOTE,
                }
            ),
            "Board of directors seat; approves and executes treasury actions",
        ),
        Role(
            ELECTION_OFFICER_ROLE,
            frozenset({Permission.CAN_RUN_ELECTION, Permission.CAN_VOTE}),
            "Creates elections and publishes their results",
        ),
        Role(
            MEMBER_ROLE,
            frozenset({Permission.CAN_PROPOSE, Permission.CAN_VOTE}),
            "Regular team member",
        ),
    ]
)
