"""Unit tests for record field validation."""

import pytest

from achievement_registry.kernel.errors import (
    InvalidCategory,
    InvalidRecordId,
    InvalidStudentId,
    ScoreOutOfRange,
)
from achievement_registry.kernel.models.record import MAX_RECORD_ID
from achievement_registry.kernel.registry.validation import (
    is_addressable_id,
    validate_new_record,
    validate_record_id,
)


class TestNewRecordValidation:
    """Boundaries of category, student identifier and score."""

    @pytest.mark.parametrize("length", [1, 32])
    def test_category_length_bounds_pass(self, length):
        validate_new_record("alice", "c" * length, 50)

    @pytest.mark.parametrize("length", [0, 33])
    def test_category_length_out_of_bounds(self, length):
        with pytest.raises(InvalidCategory):
            validate_new_record("alice", "c" * length, 50)

    @pytest.mark.parametrize("length", [1, 64])
    def test_student_id_length_bounds_pass(self, length):
        validate_new_record("s" * length, "math", 50)

    @pytest.mark.parametrize("length", [0, 65])
    def test_student_id_length_out_of_bounds(self, length):
        with pytest.raises(InvalidStudentId):
            validate_new_record("s" * length, "math", 50)

    @pytest.mark.parametrize("score", [0, 100])
    def test_score_bounds_pass(self, score):
        validate_new_record("alice", "math", score)

    @pytest.mark.parametrize("score", [-1, 101, 92.5, True, "92"])
    def test_score_rejected(self, score):
        with pytest.raises(ScoreOutOfRange):
            validate_new_record("alice", "math", score)

    def test_category_checked_before_student_id(self):
        """With every field wrong the category error wins."""
        with pytest.raises(InvalidCategory):
            validate_new_record("", "", 500)

    def test_student_id_checked_before_score(self):
        with pytest.raises(InvalidStudentId):
            validate_new_record("", "math", 500)

    def test_non_string_category(self):
        with pytest.raises(InvalidCategory) as exc:
            validate_new_record("alice", None, 10)
        assert exc.value.code == "invalid_category"


class TestRecordIdValidation:
    """The 0 sentinel and the column range."""

    @pytest.mark.parametrize("record_id", [0, -1, MAX_RECORD_ID + 1])
    def test_invalid_ids(self, record_id):
        assert is_addressable_id(record_id) is False
        with pytest.raises(InvalidRecordId):
            validate_record_id(record_id)

    @pytest.mark.parametrize("record_id", [1, 2, MAX_RECORD_ID])
    def test_valid_ids(self, record_id):
        assert is_addressable_id(record_id) is True
        validate_record_id(record_id)

    def test_non_integer_id(self):
        with pytest.raises(InvalidRecordId):
            validate_record_id("1")
