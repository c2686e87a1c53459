"""
Book Catalog — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions, one per error kind.
Why:   Layers raise by kind and never pick HTTP status codes; the
       mapping to status codes lives in one place.
How:   Each exception carries a `kind`, a human-readable message and an
       optional context dict. Global exception handlers (registered in
       main.py) map them to HTTP status codes.
Who:   Raised by the repository and service layers; caught by the handlers.

Exception Hierarchy:
    BookCatalogError (base)
    ├── AlreadyCheckedOutError   → 400 Bad Request
    ├── AlreadyCheckedInError    → 400 Bad Request
    ├── ValidationError          → 400 Bad Request
    ├── ExistingRecordError      → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── UpdateError              → 500 Internal Server Error
    ├── StorageError             → 500 Internal Server Error
    ├── PersistError             → 500 Internal Server Error
    └── MissingEnvVariableError  → fatal at startup

Translation Chain:
    pymongo errors → StorageError / PersistError / NotFoundError (repository)
    → ValidationError / ExistingRecordError / AlreadyChecked* / UpdateError
    (service) → HTTP status code (exception handlers)
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Tag carried by every application error."""

    ALREADY_CHECKED_OUT = "AlreadyCheckedOut"
    ALREADY_CHECKED_IN = "AlreadyCheckedIn"
    UPDATE_ERROR = "UpdateError"
    VALIDATION_ERROR = "ValidationError"
    EXISTING_RECORD = "ExistingRecord"
    MISSING_ENV_VARIABLE = "MissingEnvVariable"
    STORAGE_ERROR = "StorageError"
    NOT_FOUND = "NotFoundError"
    PERSIST_ERROR = "PersistError"


class BookCatalogError(Exception):
    """
    Base exception for all Book Catalog application errors.

    Attributes:
        kind:     ErrorKind tag, used in API error bodies
        message:  Error description (safe to return in an API response)
        context:  Additional debug info (logged; only returned for 400s)
    """

    kind: ErrorKind = ErrorKind.STORAGE_ERROR

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AlreadyCheckedOutError(BookCatalogError):
    """Raised when checking out a book whose status is already CheckedOut."""

    kind = ErrorKind.ALREADY_CHECKED_OUT

    def __init__(self, book_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["book_id"] = book_id
        super().__init__(message=f"Book {book_id} is already checked out", context=ctx)
        self.book_id = book_id


class AlreadyCheckedInError(BookCatalogError):
    """Raised when checking in a book whose status is already CheckedIn."""

    kind = ErrorKind.ALREADY_CHECKED_IN

    def __init__(self, book_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["book_id"] = book_id
        super().__init__(message=f"Book {book_id} is already checked in", context=ctx)
        self.book_id = book_id


class UpdateError(BookCatalogError):
    """
    Raised when a state transition or rating update could not be written.

    The underlying StorageError message is kept as the message; the
    original error type is recorded in the context.
    """

    kind = ErrorKind.UPDATE_ERROR

    def __init__(
        self,
        message: str = "Book update failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(BookCatalogError):
    """
    Raised when a Book payload breaks one or more field rules.

    When:    Create, Update and Rate (after the new rating is merged in).
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "ValidationError",
            "message": "author: cannot be blank; rating: must be one of 0, 1, 2, 3",
            "details": {"fields": {"author": "cannot be blank", ...}}
        }
    """

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ExistingRecordError(BookCatalogError):
    """Raised by Create when author + title + publish_date is already stored."""

    kind = ErrorKind.EXISTING_RECORD

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Book already exists", context=context)


class MissingEnvVariableError(BookCatalogError):
    """
    Raised when a required environment variable is not set.

    Only raised while loading settings at startup, which aborts the
    application before it serves any request.
    """

    kind = ErrorKind.MISSING_ENV_VARIABLE

    def __init__(self, variable: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["variable"] = variable
        super().__init__(
            message=f"need to set {variable} environment variable",
            context=ctx,
        )
        self.variable = variable


class StorageError(BookCatalogError):
    """
    Raised when a MongoDB query, cursor or write fails.

    The driver's message is kept so operators can see what failed; the
    exception handler logs the context server-side.
    """

    kind = ErrorKind.STORAGE_ERROR

    def __init__(
        self,
        message: str = "A storage error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BookCatalogError):
    """
    Raised when an id does not resolve to a stored book.

    Malformed ids (not 24 hex characters) are reported the same way, so
    callers never see an ObjectId parse error.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, book_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["book_id"] = book_id
        super().__init__(message=f"Book {book_id} does not exist", context=ctx)
        self.book_id = book_id


class PersistError(BookCatalogError):
    """Raised when inserting a new book document fails."""

    kind = ErrorKind.PERSIST_ERROR

    def __init__(self, detail: str = "", context: Optional[Dict[str, Any]] = None):
        message = "Error saving book"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message=message, context=context)
