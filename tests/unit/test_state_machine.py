"""Unit tests for the record lifecycle state machine."""

import pytest

from achievement_registry.kernel.errors import AlreadyArchived, InvalidTransition, NotArchived
from achievement_registry.kernel.models.event_log import EventType
from achievement_registry.kernel.models.record import AcademicRecord, RecordState
from achievement_registry.orchestration.state_machine import (
    RecordStateMachine,
    can_transition,
    valid_transitions,
)


def _record(archived: bool = False) -> AcademicRecord:
    return AcademicRecord(
        id=1,
        student_identifier="alice",
        performance_score=92,
        category="math",
        created_at=1,
        archived=archived,
    )


class TestTransitionTable:
    """Declared transitions."""

    def test_active_can_only_be_archived(self):
        assert valid_transitions(RecordState.ACTIVE) == [RecordState.ARCHIVED]

    def test_archived_can_only_be_restored(self):
        assert valid_transitions(RecordState.ARCHIVED) == [RecordState.ACTIVE]

    def test_self_transitions_not_allowed(self):
        assert can_transition(RecordState.ACTIVE, RecordState.ACTIVE) is False
        assert can_transition(RecordState.ARCHIVED, RecordState.ARCHIVED) is False


class TestRecordStateMachine:
    """Applying transitions to records."""

    def test_archive_active_record(self):
        record = _record()
        event = RecordStateMachine.archive(record)
        assert record.archived is True
        assert record.state == RecordState.ARCHIVED
        assert event == EventType.RECORD_ARCHIVED

    def test_restore_archived_record(self):
        record = _record(archived=True)
        event = RecordStateMachine.restore(record)
        assert record.archived is False
        assert event == EventType.RECORD_RESTORED

    def test_archive_twice_fails(self):
        record = _record(archived=True)
        with pytest.raises(AlreadyArchived):
            RecordStateMachine.archive(record)
        assert record.archived is True

    def test_restore_active_fails(self):
        record = _record()
        with pytest.raises(NotArchived) as exc:
            RecordStateMachine.restore(record)
        assert exc.value.details["record_id"] == 1
        assert record.archived is False

    def test_unknown_target_state(self):
        record = _record()
        with pytest.raises(InvalidTransition):
            RecordStateMachine.transition(record, "deleted")
        assert record.archived is False
