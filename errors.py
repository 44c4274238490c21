from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


class LibraryError(Exception):
    """Base class for errors raised by the catalog and account services.

    The API layer maps ``kind`` to an HTTP status; the message is returned
    to the client verbatim as ``{"error": message}``.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LibraryError):
    """Missing required fields, uncastable values or malformed ids."""

    kind = ErrorKind.VALIDATION


class NotFoundError(LibraryError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(LibraryError):
    """Duplicate ``email`` or ``isbn``."""

    kind = ErrorKind.CONFLICT


class StateError(ConflictError):
    """Operation not allowed in the book's current availability state."""


class AuthError(LibraryError):
    kind = ErrorKind.UNAUTHORIZED


class StorageError(LibraryError):
    kind = ErrorKind.INTERNAL
