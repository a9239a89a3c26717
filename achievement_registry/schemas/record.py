"""Record schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from achievement_registry.kernel.models.record import (
    CATEGORY_MAX_LENGTH,
    SCORE_MAX,
    SCORE_MIN,
    STUDENT_ID_MAX_LENGTH,
    RecordState,
)


class RecordView(BaseModel):
    """Read-only copy of a stored record."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = Field(..., gt=0)
    student_identifier: str = Field(..., min_length=1, max_length=STUDENT_ID_MAX_LENGTH)
    performance_score: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    category: str = Field(..., min_length=1, max_length=CATEGORY_MAX_LENGTH)
    created_at: int = Field(..., ge=0)
    archived: bool = False

    @property
    def state(self) -> RecordState:
        return RecordState.ARCHIVED if self.archived else RecordState.ACTIVE


class RegistryStatistics(BaseModel):
    """Counters at the moment of the call."""

    model_config = ConfigDict(frozen=True)

    total_created: int
    archived_count: int
    active_count: int


class EventView(BaseModel):
    """One audit trail entry."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    event_type: str
    entity_type: str
    entity_id: str
    principal: Optional[str] = None
    payload: dict = Field(default_factory=dict)
    logical_time: Optional[int] = None
