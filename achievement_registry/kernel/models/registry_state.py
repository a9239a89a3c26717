"""
Registry counters, stored as a single row.
"""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from achievement_registry.kernel.models.base import Base


REGISTRY_STATE_ID = 1


class RegistryState(Base):
    """
    Allocation and archive counters.

    ``next_record_id`` holds the last id handed out (0 before the first
    creation) and never goes down. ``archived_count`` tracks how many records
    are archived right now.
    """

    __tablename__ = "registry_state"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        default=REGISTRY_STATE_ID,
    )
    next_record_id: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )
    archived_count: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<RegistryState next={self.next_record_id} archived={self.archived_count}>"
