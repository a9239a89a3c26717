"""
Central logging configuration for the achievement registry.

Provides:
- Structured logging (JSON in production, human-readable in development)
- Operation context via contextvars: every registry call binds an id, the
  operation name and the calling principal, and each log line carries them
- Environment-aware log levels

Usage:
    from achievement_registry.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Record archived", extra={"record_id": record_id})
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterator, Optional

if TYPE_CHECKING:
    from achievement_registry.config import Settings


@dataclass(frozen=True)
class OperationContext:
    """Who is doing what, for the duration of one registry call."""

    operation_id: str
    operation: Optional[str] = None
    principal: Optional[str] = None


operation_context_var: ContextVar[Optional[OperationContext]] = ContextVar(
    "operation_context", default=None
)

# Fields the filter copies from the active context onto each log record
_CONTEXT_FIELDS = ("operation_id", "operation", "principal")


def get_operation_context() -> Optional[OperationContext]:
    return operation_context_var.get()


def get_operation_id() -> Optional[str]:
    """Get the current operation ID from context, if set."""
    context = operation_context_var.get()
    return context.operation_id if context is not None else None


@contextmanager
def operation_scope(
    operation: Optional[str] = None,
    principal: Optional[str] = None,
    *,
    operation_id: Optional[str] = None,
) -> Iterator[str]:
    """
    Bind an operation context to the current task.

    Nested scopes keep the outer ID, so gate and registry logs of one call
    share a single correlation value; unset fields fall back to the outer
    scope.
    """
    outer = operation_context_var.get()
    if outer is not None and operation_id is None:
        operation_id = outer.operation_id
        operation = operation or outer.operation
        principal = principal or outer.principal

    context = OperationContext(
        operation_id=operation_id or uuid.uuid4().hex,
        operation=operation,
        principal=principal,
    )
    token = operation_context_var.set(context)
    try:
        yield context.operation_id
    finally:
        operation_context_var.reset(token)


class OperationContextFilter(logging.Filter):
    """Copy the operation context onto log records; explicit extras win."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = operation_context_var.get()
        for field in _CONTEXT_FIELDS:
            if getattr(record, field, None) is None:
                value = getattr(context, field) if context is not None else None
                setattr(record, field, value or "-")
        return True


_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName",
) + _CONTEXT_FIELDS)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; operation context first, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value and value != "-":
                log_obj[field] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and value is not None:
                try:
                    json.dumps(value)
                    log_obj[key] = value
                except (TypeError, ValueError):
                    log_obj[key] = str(value)

        return json.dumps(log_obj)


def _create_dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(operation)s by %(principal)s "
        "(%(operation_id)s) %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure process-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'development' or 'production'
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates on reconfigure
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(OperationContextFilter())

    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(_create_dev_formatter())

    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def configure_logging_from_settings(settings: "Settings") -> None:
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Logs emitted inside operation_scope() carry operation_id, operation and
    principal. Use extra={} for additional structured fields:
        logger.info("Record created", extra={"record_id": 1, "category": "math"})
    """
    return logging.getLogger(name)
