"""
Pydantic schemas returned by the registry.
"""

from achievement_registry.schemas.record import EventView, RecordView, RegistryStatistics

__all__ = [
    "EventView",
    "RecordView",
    "RegistryStatistics",
]
