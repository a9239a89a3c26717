"""
Permission models for the registry gate.
"""

from enum import IntEnum
from typing import Optional

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from achievement_registry.kernel.models.base import Base, WallClockMixin


class PermissionLevel(IntEnum):
    """Permission levels; higher levels include all lower ones."""
    NONE = 0
    READ = 1
    READ_WRITE = 2
    ADMIN = 3


# Levels an administrator may assign
ASSIGNABLE_LEVELS = frozenset({
    PermissionLevel.READ,
    PermissionLevel.READ_WRITE,
    PermissionLevel.ADMIN,
})


class PermissionEntry(Base, WallClockMixin):
    """
    Stored permission level for a principal.

    A principal without an entry is treated as level 0.
    """

    __tablename__ = "permission_entries"

    principal: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Grant metadata
    granted_by: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    granted_at: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<PermissionEntry {self.principal} level={self.level}>"
