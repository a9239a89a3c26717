"""
Field validation for new records and record ids.

Checks run in a fixed order (category, student identifier, score) so the
reported error is deterministic when several fields are wrong.
"""

from achievement_registry.kernel.errors import (
    InvalidCategory,
    InvalidRecordId,
    InvalidStudentId,
    ScoreOutOfRange,
)
from achievement_registry.kernel.models.record import (
    CATEGORY_MAX_LENGTH,
    MAX_RECORD_ID,
    SCORE_MAX,
    SCORE_MIN,
    STUDENT_ID_MAX_LENGTH,
)


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_category(category: str) -> None:
    if not isinstance(category, str) or not 1 <= len(category) <= CATEGORY_MAX_LENGTH:
        raise InvalidCategory(
            f"Category must be 1-{CATEGORY_MAX_LENGTH} characters",
            length=len(category) if isinstance(category, str) else None,
        )


def validate_student_identifier(student_identifier: str) -> None:
    if (
        not isinstance(student_identifier, str)
        or not 1 <= len(student_identifier) <= STUDENT_ID_MAX_LENGTH
    ):
        raise InvalidStudentId(
            f"Student identifier must be 1-{STUDENT_ID_MAX_LENGTH} characters",
            length=len(student_identifier) if isinstance(student_identifier, str) else None,
        )


def validate_score(performance_score: int) -> None:
    if not _is_integer(performance_score) or not SCORE_MIN <= performance_score <= SCORE_MAX:
        raise ScoreOutOfRange(
            f"Performance score must be an integer in [{SCORE_MIN}, {SCORE_MAX}]",
            score=performance_score if _is_integer(performance_score) else repr(performance_score),
        )


def validate_new_record(student_identifier: str, category: str, performance_score: int) -> None:
    """Raise the first violated constraint of a new record."""
    validate_category(category)
    validate_student_identifier(student_identifier)
    validate_score(performance_score)


def is_addressable_id(record_id: object) -> bool:
    """True for ids the allocator could ever have handed out."""
    return _is_integer(record_id) and 0 < record_id <= MAX_RECORD_ID


def validate_record_id(record_id: int) -> None:
    """Reject the 0 sentinel, negatives and ids past the column range."""
    if not is_addressable_id(record_id):
        raise InvalidRecordId(
            f"Record id must be between 1 and {MAX_RECORD_ID}",
            record_id=record_id if _is_integer(record_id) else repr(record_id),
        )
