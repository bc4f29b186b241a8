"""Custom exceptions for scrum-board.

All exceptions derive from :class:`ScrumError` so callers can catch the
entire family with a single ``except ScrumError`` clause.

Hierarchy::

    ScrumError
    ├── RecordNotFoundError
    ├── DanglingReferenceError
    ├── NoActiveProjectError
    ├── PersistenceError
    └── ConfigurationError

Store mutators only let :class:`DanglingReferenceError` and
:class:`NoActiveProjectError` escape when ``strict_references`` is enabled;
backends raise the others and the store logs them.
"""

from __future__ import annotations

from typing import Any


class ScrumError(Exception):
    """Base exception for all scrum-board errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class RecordNotFoundError(ScrumError):
    """Raised by a backend asked to update or delete a record it does not hold."""

    def __init__(
        self,
        kind: str,
        record_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"{kind} record not found"
        if record_id:
            message += f": {record_id!r}"
        super().__init__(message, details)
        self.kind = kind
        self.record_id = record_id


class DanglingReferenceError(ScrumError):
    """Raised when a task would reference a story or sprint that is missing
    or belongs to another project."""

    def __init__(
        self,
        field: str,
        reference: str,
        project_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"Dangling reference {field}={reference!r}"
        if project_id:
            message += f" (project: {project_id!r})"
        super().__init__(message, details)
        self.field = field
        self.reference = reference
        self.project_id = project_id


class NoActiveProjectError(ScrumError):
    """Raised when a record is added while no project is current."""

    def __init__(self, operation: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"No active project for {operation!r}", details)
        self.operation = operation


class PersistenceError(ScrumError):
    """Raised when a backend read or write fails."""

    def __init__(
        self,
        operation: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Persistence {operation!r} failed: {reason}", details)
        self.operation = operation
        self.reason = reason


class ConfigurationError(ScrumError):
    """Raised when :class:`~scrum_board.core.config.ScrumConfig` cannot build a backend."""

    def __init__(
        self,
        parameter: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Invalid configuration for {parameter!r}: {reason}", details)
        self.parameter = parameter
        self.reason = reason


__all__ = [
    "ConfigurationError",
    "DanglingReferenceError",
    "NoActiveProjectError",
    "PersistenceError",
    "RecordNotFoundError",
    "ScrumError",
]
