"""
Append-only audit logging.
"""

from achievement_registry.kernel.events.event_store import EventStore

__all__ = ["EventStore"]
