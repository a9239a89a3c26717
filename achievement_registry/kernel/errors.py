"""
Registry error taxonomy.

Every failure is a precondition violation raised to the caller with a stable
``code`` so integrators can branch on the kind. None are retried.
"""

from typing import Any, Dict, Optional


class RegistryError(Exception):
    """Base class for all registry errors."""

    code: str = "registry_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "detail": self.message, **self.details}


# Permission gate

class AdministratorRequired(RegistryError):
    code = "administrator_required"


class InsufficientPermission(RegistryError):
    code = "insufficient_permission"


class InvalidPermissionLevel(RegistryError):
    code = "invalid_permission_level"


class InvalidPrincipal(RegistryError):
    code = "invalid_principal"


# Record validation

class InvalidCategory(RegistryError):
    code = "invalid_category"


class InvalidStudentId(RegistryError):
    code = "invalid_student_id"


class ScoreOutOfRange(RegistryError):
    code = "score_out_of_range"


class InvalidRecordId(RegistryError):
    code = "invalid_record_id"


class RecordNotFound(RegistryError):
    code = "record_not_found"

    def __init__(self, record_id: int, message: Optional[str] = None):
        super().__init__(message or f"Record {record_id} not found", record_id=record_id)


# Lifecycle

class AlreadyArchived(RegistryError):
    code = "already_archived"


class NotArchived(RegistryError):
    code = "not_archived"


class InvalidTransition(RegistryError):
    code = "invalid_transition"


# Host integration

class ClockRegression(RegistryError):
    code = "clock_regression"


class RegistryNotInitialized(RegistryError):
    code = "registry_not_initialized"
