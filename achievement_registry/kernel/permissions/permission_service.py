"""
Permission gate for registry access control.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from achievement_registry.config import Settings
from achievement_registry.kernel.clock import LogicalClock
from achievement_registry.kernel.errors import (
    AdministratorRequired,
    InsufficientPermission,
    InvalidPermissionLevel,
    InvalidPrincipal,
)
from achievement_registry.kernel.events.event_store import EventStore
from achievement_registry.kernel.models.event_log import EventType
from achievement_registry.kernel.models.permission import (
    ASSIGNABLE_LEVELS,
    PermissionEntry,
    PermissionLevel,
)
from achievement_registry.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegistryPolicy:
    """
    Minimum permission levels per operation class.

    Permission management is not listed: it always requires the bootstrap
    administrator.
    """

    create_min_level: int = PermissionLevel.READ_WRITE
    archive_min_level: int = PermissionLevel.ADMIN
    read_requires_permission: bool = False

    @property
    def read_min_level(self) -> int:
        return PermissionLevel.READ if self.read_requires_permission else PermissionLevel.NONE

    @classmethod
    def from_settings(cls, settings: Settings) -> "RegistryPolicy":
        return cls(
            create_min_level=settings.create_min_level,
            archive_min_level=settings.archive_min_level,
            read_requires_permission=settings.read_requires_permission,
        )


def _is_level_value(level: object) -> bool:
    # bool is an int subclass; True must not pass as level 1
    return isinstance(level, int) and not isinstance(level, bool)


class PermissionGate:
    """
    Resolves a principal's permission level and enforces minimums.

    Levels come from two sources:
    1. The bootstrap administrator, fixed at construction, always level 3
    2. Stored permission entries; a principal without one is level 0

    The gate works inside the caller's session so a permission change
    commits or rolls back with the surrounding operation.
    """

    def __init__(
        self,
        session: AsyncSession,
        bootstrap_admin: str,
        null_principal: Optional[str] = None,
        clock: Optional[LogicalClock] = None,
    ):
        if not bootstrap_admin or not bootstrap_admin.strip():
            raise ValueError("bootstrap_admin must be a non-empty principal")
        self.session = session
        self.bootstrap_admin = bootstrap_admin
        self.null_principal = null_principal
        self.clock = clock
        self.event_store = EventStore(session)

    def _now(self) -> Optional[int]:
        return self.clock.now() if self.clock is not None else None

    def is_bootstrap_admin(self, principal: Optional[str]) -> bool:
        return principal is not None and principal == self.bootstrap_admin

    def is_null_principal(self, principal: Optional[str]) -> bool:
        """True for the reserved burn identity, None, or a blank string."""
        if principal is None or not principal.strip():
            return True
        return self.null_principal is not None and principal == self.null_principal

    async def _get_entry(self, principal: str) -> Optional[PermissionEntry]:
        query = select(PermissionEntry).where(PermissionEntry.principal == principal)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_permission_level(self, principal: Optional[str]) -> int:
        """
        Return the effective level of a principal.

        The bootstrap administrator is always 3; anyone else gets the stored
        level or 0. Never fails.
        """
        if self.is_bootstrap_admin(principal):
            return int(PermissionLevel.ADMIN)
        if principal is None:
            return int(PermissionLevel.NONE)

        entry = await self._get_entry(principal)
        return entry.level if entry else int(PermissionLevel.NONE)

    async def has_level(self, principal: Optional[str], minimum: int) -> bool:
        if minimum <= PermissionLevel.NONE:
            return True
        return await self.get_permission_level(principal) >= minimum

    async def require_level(
        self,
        principal: Optional[str],
        minimum: int,
        operation: str,
    ) -> None:
        """Raise InsufficientPermission unless the principal reaches ``minimum``."""
        if await self.has_level(principal, minimum):
            return

        level = await self.get_permission_level(principal)
        raise InsufficientPermission(
            f"{operation} requires permission level {minimum}, caller has {level}",
            operation=operation,
            required_level=minimum,
            level=level,
        )

    def require_administrator(self, caller: Optional[str], operation: str) -> None:
        if self.is_bootstrap_admin(caller):
            return
        raise AdministratorRequired(
            f"{operation} may only be called by the registry administrator",
            operation=operation,
        )

    async def set_permission_level(
        self,
        caller: str,
        target: str,
        level: int,
    ) -> PermissionEntry:
        """
        Insert or overwrite the level of ``target``.

        Checks run in order: administrator, level range, target identity.

        Returns:
            The stored PermissionEntry
        """
        self.require_administrator(caller, "set_permission_level")

        if not _is_level_value(level) or level not in ASSIGNABLE_LEVELS:
            raise InvalidPermissionLevel(
                f"Permission level must be one of 1, 2, 3; got {level!r}",
                level=level if _is_level_value(level) else repr(level),
            )

        if self.is_null_principal(target):
            raise InvalidPrincipal(
                "Cannot assign a permission level to the null principal",
                principal=target,
            )

        logical_time = self._now()
        entry = await self._get_entry(target)
        previous = entry.level if entry else None
        if entry is None:
            entry = PermissionEntry(
                principal=target,
                level=int(level),
                granted_by=caller,
                granted_at=logical_time,
            )
            self.session.add(entry)
        else:
            entry.level = int(level)
            entry.granted_by = caller
            entry.granted_at = logical_time

        await self.event_store.log(
            event_type=EventType.PERMISSION_GRANTED,
            entity_type="permission",
            entity_id=target,
            principal=caller,
            payload={"level": int(level), "previous_level": previous},
            logical_time=logical_time,
        )
        await self.session.flush()
        logger.info(
            "Permission level set",
            extra={"target": target, "level": int(level), "previous_level": previous},
        )
        return entry

    async def revoke_permission(
        self,
        caller: str,
        target: str,
    ) -> bool:
        """
        Remove the stored entry of ``target``.

        Returns:
            True if an entry was removed
        """
        self.require_administrator(caller, "revoke_permission")

        entry = await self._get_entry(target)
        if entry is None:
            return False

        logical_time = self._now()
        previous = entry.level
        await self.session.delete(entry)
        await self.event_store.log(
            event_type=EventType.PERMISSION_REVOKED,
            entity_type="permission",
            entity_id=target,
            principal=caller,
            payload={"previous_level": previous},
            logical_time=logical_time,
        )
        await self.session.flush()
        logger.info(
            "Permission revoked",
            extra={"target": target, "previous_level": previous},
        )
        return True
