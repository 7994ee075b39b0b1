"""Error taxonomy shared by stores, the index client and the routes."""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    VALIDATION = "VALIDATION"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    RECURRENCE_CONFIG = "RECURRENCE_CONFIG"
    NOT_FOUND = "NOT_FOUND"
    TRANSIENT_STORE = "TRANSIENT_STORE"
    INDEX_SYNC = "INDEX_SYNC"
    CONFIG = "CONFIG"


class CmsError(Exception):
    """Base error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(CmsError, ValueError):
    """Malformed input. Raised before any I/O happens."""

    code = ErrorCode.VALIDATION

    def __init__(self, errors: list[str] | str) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class InvalidArgumentError(ValidationError):
    code = ErrorCode.INVALID_ARGUMENT


class RecurrenceConfigError(ValidationError):
    code = ErrorCode.RECURRENCE_CONFIG


class NotFoundError(CmsError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class TransientStoreError(CmsError):
    code = ErrorCode.TRANSIENT_STORE


class IndexSyncError(CmsError):
    """Non-2xx or unexpected response from the search index service."""

    code = ErrorCode.INDEX_SYNC

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(f"{message}: {status} {body}".rstrip())
        self.status = status
        self.body = body


class ConfigError(CmsError):
    code = ErrorCode.CONFIG
