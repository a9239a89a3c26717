"""
Academic record model.
"""

from enum import Enum

from sqlalchemy import BigInteger, Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from achievement_registry.kernel.models.base import Base


# Field limits
STUDENT_ID_MAX_LENGTH = 64
CATEGORY_MAX_LENGTH = 32
SCORE_MIN = 0
SCORE_MAX = 100

# Largest id a BigInteger column can hold; 0 is the "no record" sentinel
MAX_RECORD_ID = 2**63 - 1


class RecordState(str, Enum):
    """Lifecycle states of a record."""
    ACTIVE = "active"
    ARCHIVED = "archived"


class AcademicRecord(Base):
    """
    One academic achievement entry.

    Everything except ``archived`` is fixed at creation. ``archived`` only
    changes through the archive/restore transitions.
    """

    __tablename__ = "academic_records"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=False,
    )
    student_identifier: Mapped[str] = mapped_column(
        String(STUDENT_ID_MAX_LENGTH),
        nullable=False,
        index=True,
    )
    performance_score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    category: Mapped[str] = mapped_column(
        String(CATEGORY_MAX_LENGTH),
        nullable=False,
    )
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    archived: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_academic_records_category_archived", "category", "archived"),
    )

    def __repr__(self) -> str:
        return f"<AcademicRecord {self.id} {self.student_identifier}/{self.category} archived={self.archived}>"

    @property
    def state(self) -> RecordState:
        return RecordState.ARCHIVED if self.archived else RecordState.ACTIVE
