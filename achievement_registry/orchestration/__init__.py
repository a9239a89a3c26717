"""Orchestration layer - record lifecycle state machine."""

from achievement_registry.orchestration.state_machine import (
    RecordStateMachine,
    can_transition,
    valid_transitions,
)
from achievement_registry.kernel.models.record import RecordState

__all__ = [
    "RecordStateMachine",
    "RecordState",
    "can_transition",
    "valid_transitions",
]
