"""
Immutable event log for audit trail.

Every successful mutation appends one entry in the same transaction as the
change itself.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from achievement_registry.kernel.models.base import Base, WallClockMixin


class EventType(str, Enum):
    """All event types for the audit log."""

    # Record events
    RECORD_CREATED = "record.created"
    RECORD_ARCHIVED = "record.archived"
    RECORD_RESTORED = "record.restored"

    # Permission events
    PERMISSION_GRANTED = "permission.granted"
    PERMISSION_REVOKED = "permission.revoked"


class EventLog(Base, WallClockMixin):
    """
    Append-only audit event.

    Rows are never updated or deleted.
    """

    __tablename__ = "event_logs"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    event_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    # Entity reference; record ids and principals are both stored as text
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Actor
    principal: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    logical_time: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
    )

    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
