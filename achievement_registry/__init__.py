"""
Academic Achievement Registry

Authenticated registry that creates, retrieves, archives and restores
academic achievement records behind an administrator-controlled permission
scheme.
"""

from achievement_registry.kernel import (
    AchievementRegistry,
    PermissionGate,
    PermissionLevel,
    RecordState,
    RegistryError,
    RegistryPolicy,
    SequenceClock,
)
from achievement_registry.schemas import EventView, RecordView, RegistryStatistics

__all__ = [
    "AchievementRegistry",
    "PermissionGate",
    "PermissionLevel",
    "RecordState",
    "RegistryError",
    "RegistryPolicy",
    "SequenceClock",
    "EventView",
    "RecordView",
    "RegistryStatistics",
]
