"""Entitlement registry service.

The single source of truth for "who may act". Every privileged operation
in the action queue, the election engine and the facade consults this
registry before mutating anything.

Guarantees:
- A member always has a well-defined, possibly empty, role set
- Every role a member holds resolves in the role catalog
- grant and revoke are idempotent
- list_roles returns an immutable snapshot, never a live view
- Member updates are per-member compare-and-swap with retry
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from structlog import get_logger

from src.application.services.optimistic_retry import retry_on_conflict
from src.domain.errors import (
    MemberNotFoundError,
    RoleNotFoundError,
    TeamNotFoundError,
    UnauthorizedError,
)
from src.domain.models.member import Member
from src.domain.models.role import (
    DEFAULT_ROLE_CATALOG,
    OWNER_ROLE,
    Permission,
    RoleCatalog,
)

if TYPE_CHECKING:
    from src.application.ports.entitlement_store import EntitlementStoreProtocol
    from src.application.ports.time_authority import TimeAuthorityProtocol

logger = get_logger(__name__)

DEFAULT_CAS_MAX_RETRIES = 5


class EntitlementRegistryService:
    """Maps (team, member) to roles and answers permission queries.

    Example:
        >>> registry = EntitlementRegistryService(store=store, time_authority=clock)
        >>> await registry.create_team("team-1", founder="0xA")
        >>> await registry.join("team-1", "0xB")
        >>> await registry.grant("team-1", "0xB", "board_member", granted_by="0xA")
        >>> await registry.has("team-1", "0xB", Permission.CAN_APPROVE)
        True
    """

    def __init__(
        self,
        store: EntitlementStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        catalog: RoleCatalog = DEFAULT_ROLE_CATALOG,
        cas_max_retries: int = DEFAULT_CAS_MAX_RETRIES,
    ) -> None:
        """Initialize the registry.

        Args:
            store: Team and member persistence.
            time_authority: Clock for join timestamps.
            catalog: Roles that may be granted.
            cas_max_retries: Attempts per member update on CAS conflict.
        """
        self._store = store
        self._time = time_authority
        self._catalog = catalog
        self._cas_max_retries = cas_max_retries

    @property
    def catalog(self) -> RoleCatalog:
        return self._catalog

    # =========================================================================
    # Team membership
    # =========================================================================

    async def create_team(self, team_id: str, founder: str) -> Member:
        """Register a team with its founding member holding the owner role.

        Args:
            team_id: New team identifier.
            founder: Address of the founding member.

        Returns:
            The founder's member record.

        Raises:
            InvalidArgumentError: If the team already exists.
        """
        await self._store.create_team(team_id)
        founder_member = await self._store.add_member(
            Member(
                team_id=team_id,
                address=founder,
                joined_at=self._time.utcnow(),
                roles=frozenset({OWNER_ROLE}),
            )
        )
        logger.info("Team created", team_id=team_id, founder=founder)
        return founder_member

    async def join(self, team_id: str, member: str) -> Member:
        """Add a member with an empty role set (idempotent).

        Raises:
            TeamNotFoundError: If the team is not registered.
        """
        await self._require_team(team_id)
        stored = await self._store.add_member(
            Member(team_id=team_id, address=member, joined_at=self._time.utcnow())
        )
        logger.info("Member joined team", team_id=team_id, member=member)
        return stored

    async def list_members(self, team_id: str) -> tuple[Member, ...]:
        """Snapshot of a team's members ordered by join time.

        Raises:
            TeamNotFoundError: If the team is not registered.
        """
        await self._require_team(team_id)
        return tuple(await self._store.list_members(team_id))

    async def members_with(self, team_id: str, permission: Permission) -> frozenset[str]:
        """Addresses of the team members currently holding a permission."""
        if not await self._store.team_exists(team_id):
            return frozenset()
        members = await self._store.list_members(team_id)
        return frozenset(
            member.address
            for member in members
            if permission in self._catalog.permissions_for(member.roles)
        )

    async def is_member(self, team_id: str, member: str) -> bool:
        return await self._store.get_member(team_id, member) is not None

    # =========================================================================
    # Queries
    # =========================================================================

    async def has(self, team_id: str, member: str, permission: Permission) -> bool:
        """Check a permission. Never fails: unknown teams or members yield False."""
        record = await self._store.get_member(team_id, member)
        if record is None:
            return False
        return permission in self._catalog.permissions_for(record.roles)

    async def require(self, team_id: str, member: str, permission: Permission) -> None:
        """Raise unless the member holds the permission.

        Raises:
            UnauthorizedError: The member lacks the permission or is unknown.
        """
        if not await self.has(team_id, member, permission):
            logger.warning(
                "Permission denied",
                team_id=team_id,
                member=member,
                permission=permission.value,
            )
            raise UnauthorizedError(team_id, member, permission.value)

    async def list_roles(self, team_id: str, member: str) -> frozenset[str]:
        """Return the member's role names as an immutable snapshot.

        Raises:
            MemberNotFoundError: If the member is not in the team.
        """
        record = await self._store.get_member(team_id, member)
        if record is None:
            raise MemberNotFoundError(team_id, member)
        return frozenset(record.roles)

    async def list_permissions(self, team_id: str, member: str) -> frozenset[Permission]:
        """Return the union of permissions carried by the member's roles."""
        return self._catalog.permissions_for(await self.list_roles(team_id, member))

    # =========================================================================
    # Mutations
    # =========================================================================

    async def grant(
        self,
        team_id: str,
        member: str,
        role: str,
        granted_by: str,
    ) -> frozenset[str]:
        """Grant a role to a member (no-op if already held).

        Args:
            team_id: Team of the member.
            member: Address receiving the role.
            role: Role name from the catalog.
            granted_by: Caller; must hold canManageRoles.

        Returns:
            The member's role set after the call.

        Raises:
            RoleNotFoundError: Role is not in the catalog.
            TeamNotFoundError: Team is not registered.
            UnauthorizedError: Caller lacks canManageRoles.
            MemberNotFoundError: Member is not in the team.
        """
        await self._check_role_change(team_id, role, granted_by)
        roles = await self._update_member(
            team_id, member, lambda record: record.with_role(role)
        )
        logger.info(
            "Role granted",
            team_id=team_id,
            member=member,
            role=role,
            granted_by=granted_by,
        )
        return roles

    async def revoke(
        self,
        team_id: str,
        member: str,
        role: str,
        revoked_by: str,
    ) -> frozenset[str]:
        """Revoke a role from a member (no-op if not held).

        Same arguments, return value and errors as grant().
        """
        await self._check_role_change(team_id, role, revoked_by)
        roles = await self._update_member(
            team_id, member, lambda record: record.without_role(role)
        )
        logger.info(
            "Role revoked",
            team_id=team_id,
            member=member,
            role=role,
            revoked_by=revoked_by,
        )
        return roles

    async def seat_role_holders(
        self,
        team_id: str,
        role: str,
        holders: Iterable[str],
    ) -> frozenset[str]:
        """Make holders exactly the set of members holding role.

        System path used to install the winners of a published board
        election. It is not caller-gated; the facade authorizes the
        publication that triggers it.

        Args:
            team_id: Team to update.
            role: Role to reassign.
            holders: Addresses that must hold the role afterwards.

        Returns:
            The addresses holding the role after the call.

        Raises:
            RoleNotFoundError: Role is not in the catalog.
            TeamNotFoundError: Team is not registered.
            MemberNotFoundError: A holder is not in the team.
        """
        self._require_known_role(role)
        await self._require_team(team_id)
        wanted = frozenset(holders)
        for address in wanted:
            if await self._store.get_member(team_id, address) is None:
                raise MemberNotFoundError(team_id, address)

        for record in await self._store.list_members(team_id):
            if record.address in wanted and role not in record.roles:
                await self._update_member(
                    team_id, record.address, lambda current: current.with_role(role)
                )
            elif record.address not in wanted and role in record.roles:
                await self._update_member(
                    team_id, record.address, lambda current: current.without_role(role)
                )

        logger.info(
            "Role holders seated",
            team_id=team_id,
            role=role,
            holders=sorted(wanted),
        )
        return wanted

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_known_role(self, role: str) -> None:
        if role not in self._catalog:
            raise RoleNotFoundError(role)

    async def _require_team(self, team_id: str) -> None:
        if not await self._store.team_exists(team_id):
            raise TeamNotFoundError(team_id)

    async def _check_role_change(self, team_id: str, role: str, caller: str) -> None:
        self._require_known_role(role)
        await self._require_team(team_id)
        await self.require(team_id, caller, Permission.CAN_MANAGE_ROLES)

    async def _update_member(
        self,
        team_id: str,
        address: str,
        change: Callable[[Member], Member],
    ) -> frozenset[str]:
        """Apply change to a member with CAS retry; skip the write on no-ops."""

        async def attempt() -> frozenset[str]:
            record = await self._store.get_member(team_id, address)
            if record is None:
                raise MemberNotFoundError(team_id, address)
            updated = change(record)
            if updated is record:
                return record.roles
            saved = await self._store.save_member(updated, expected_version=record.version)
            return saved.roles

        return await retry_on_conflict(
            attempt,
            max_attempts=self._cas_max_retries,
            operation_name="member_update",
        )
