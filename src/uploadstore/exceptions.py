"""
Error types raised by the storage service.
"""
from __future__ import annotations

from enum import Enum


class StorageErrorReason(str, Enum):
    INIT = "init"
    EMPTY = "empty"
    PATH_TRAVERSAL = "path_traversal"
    WRITE = "write"
    READ = "read"
    NOT_FOUND = "not_found"


class StorageError(RuntimeError):
    """Raised when a storage operation cannot be completed."""

    def __init__(
        self,
        message: str,
        *,
        reason: StorageErrorReason,
        filename: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.filename = filename
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class StorageFileNotFoundError(StorageError):
    """Raised when a stored file is absent or cannot be read."""

    def __init__(self, message: str, *, filename: str | None = None, cause: BaseException | None = None):
        super().__init__(
            message,
            reason=StorageErrorReason.NOT_FOUND,
            filename=filename,
            cause=cause,
        )
