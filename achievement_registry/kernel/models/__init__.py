"""
Kernel Data Models

SQLAlchemy models backing the registry: records, permissions, counters and
the audit log.
"""

from achievement_registry.kernel.models.base import Base, WallClockMixin
from achievement_registry.kernel.models.record import (
    AcademicRecord,
    RecordState,
    CATEGORY_MAX_LENGTH,
    MAX_RECORD_ID,
    SCORE_MAX,
    SCORE_MIN,
    STUDENT_ID_MAX_LENGTH,
)
from achievement_registry.kernel.models.permission import (
    ASSIGNABLE_LEVELS,
    PermissionEntry,
    PermissionLevel,
)
from achievement_registry.kernel.models.registry_state import REGISTRY_STATE_ID, RegistryState
from achievement_registry.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "WallClockMixin",
    # Records
    "AcademicRecord",
    "RecordState",
    "CATEGORY_MAX_LENGTH",
    "MAX_RECORD_ID",
    "SCORE_MAX",
    "SCORE_MIN",
    "STUDENT_ID_MAX_LENGTH",
    # Permissions
    "ASSIGNABLE_LEVELS",
    "PermissionEntry",
    "PermissionLevel",
    # Counters
    "REGISTRY_STATE_ID",
    "RegistryState",
    # Event Log
    "EventLog",
    "EventType",
]
