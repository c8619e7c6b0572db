"""Errors raised by the object-document mapping layer."""

from typing import Any


class ODMError(Exception):
    """Base exception for all mapping, query and repository errors."""


class MappingError(ODMError):
    """Raised when an entity type cannot be mapped to a document."""

    def __init__(self, message: str, entity_type: type | None = None) -> None:
        super().__init__(message)
        self.entity_type = entity_type


class UnknownFieldError(ODMError):
    """Raised when a query references a field that is not part of the mapping."""

    def __init__(self, field: str, entity_type: type | None = None) -> None:
        type_name = entity_type.__name__ if entity_type is not None else "<unknown>"
        super().__init__(f"Field '{field}' is not mapped for {type_name}")
        self.field = field
        self.entity_type = entity_type


class InvalidQueryError(ODMError):
    """Raised at translation time when a query is internally inconsistent."""


class IncompleteResultError(ODMError):
    """Raised when a store response lacks a required mapped field."""

    def __init__(self, message: str, hit: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.hit = hit


class OptimisticLockError(ODMError):
    """Raised when the store rejects a save because of a version conflict."""

    def __init__(self, message: str, document_id: Any = None, version: int | None = None) -> None:
        super().__init__(message)
        self.document_id = document_id
        self.version = version


class RequestTimeoutError(ODMError, TimeoutError):
    """Raised when the transport reports that the request deadline was exceeded."""
