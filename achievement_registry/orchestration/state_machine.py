"""
State machine for the academic record lifecycle.

Records start active, move to archived and back; there is no terminal state
and records are never deleted. Valid transitions and the error raised for
each misuse are defined here.
"""

from typing import Dict, List, Tuple, Type

from achievement_registry.kernel.errors import (
    AlreadyArchived,
    InvalidTransition,
    NotArchived,
    RegistryError,
)
from achievement_registry.kernel.models.event_log import EventType
from achievement_registry.kernel.models.record import AcademicRecord, RecordState


# Valid transitions: (from_state, to_state) -> audit event
_TRANSITIONS: Dict[Tuple[RecordState, RecordState], EventType] = {
    (RecordState.ACTIVE, RecordState.ARCHIVED): EventType.RECORD_ARCHIVED,
    (RecordState.ARCHIVED, RecordState.ACTIVE): EventType.RECORD_RESTORED,
}

# Error raised when the record is already in the requested state
_ALREADY_IN_STATE: Dict[RecordState, Tuple[Type[RegistryError], str]] = {
    RecordState.ARCHIVED: (AlreadyArchived, "Record {id} is already archived"),
    RecordState.ACTIVE: (NotArchived, "Record {id} is not archived"),
}


def valid_transitions(from_state: RecordState) -> List[RecordState]:
    """Return list of valid target states from given state."""
    return [t for (f, t) in _TRANSITIONS if f == from_state]


def can_transition(from_state: RecordState, to_state: RecordState) -> bool:
    return (from_state, to_state) in _TRANSITIONS


class RecordStateMachine:
    """Applies archive/restore transitions to a loaded record."""

    @staticmethod
    def transition(record: AcademicRecord, to_state: RecordState) -> EventType:
        """
        Move ``record`` to ``to_state`` in place.

        Returns:
            The audit event type for the transition

        Raises:
            AlreadyArchived: archiving an archived record
            NotArchived: restoring an active record
        """
        from_state = record.state
        if from_state == to_state:
            error, message = _ALREADY_IN_STATE[to_state]
            raise error(message.format(id=record.id), record_id=record.id)

        if not can_transition(from_state, to_state):
            raise InvalidTransition(
                f"Invalid transition: {from_state.value} -> {getattr(to_state, 'value', to_state)}",
                record_id=record.id,
            )

        record.archived = to_state == RecordState.ARCHIVED
        return _TRANSITIONS[(from_state, to_state)]

    @classmethod
    def archive(cls, record: AcademicRecord) -> EventType:
        return cls.transition(record, RecordState.ARCHIVED)

    @classmethod
    def restore(cls, record: AcademicRecord) -> EventType:
        return cls.transition(record, RecordState.ACTIVE)
