"""
Registry Kernel

Foundational components of the registry:
- Record storage with monotonic id allocation
- Permission gate (bootstrap administrator plus stored levels)
- Immutable event log (one entry per committed mutation)

Invariants:
- Record ids start at 1 and are never reused
- Only the archived flag of a record ever changes
- A failed operation commits nothing
"""

from achievement_registry.kernel.errors import (
    AdministratorRequired,
    AlreadyArchived,
    ClockRegression,
    InsufficientPermission,
    InvalidCategory,
    InvalidPermissionLevel,
    InvalidPrincipal,
    InvalidRecordId,
    InvalidStudentId,
    InvalidTransition,
    NotArchived,
    RecordNotFound,
    RegistryError,
    RegistryNotInitialized,
    ScoreOutOfRange,
)
from achievement_registry.kernel.clock import LogicalClock, MonotonicGuard, SequenceClock
from achievement_registry.kernel.models import PermissionLevel, RecordState
from achievement_registry.kernel.permissions import PermissionGate, RegistryPolicy
from achievement_registry.kernel.registry import AchievementRegistry

__all__ = [
    # Service
    "AchievementRegistry",
    "PermissionGate",
    "RegistryPolicy",
    # Clock
    "LogicalClock",
    "MonotonicGuard",
    "SequenceClock",
    # Enums
    "PermissionLevel",
    "RecordState",
    # Errors
    "RegistryError",
    "AdministratorRequired",
    "InsufficientPermission",
    "InvalidPermissionLevel",
    "InvalidPrincipal",
    "InvalidCategory",
    "InvalidStudentId",
    "ScoreOutOfRange",
    "InvalidRecordId",
    "RecordNotFound",
    "AlreadyArchived",
    "NotArchived",
    "InvalidTransition",
    "ClockRegression",
    "RegistryNotInitialized",
]
