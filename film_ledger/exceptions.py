"""
Film Ledger — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the preference and ledger core.
How:   Each exception class carries a message and optional context dict.
       The request layer maps them to responses; the reconciler catches
       them per user and logs them.
Who:   Raised by services and repositories.

Exception Hierarchy:
    FilmLedgerError (base)
    ├── ValidationError   → bad command input (caller can fix)
    ├── NotFoundError     → user, content item or ledger entry is missing
    ├── ConflictError     → concurrent preference write detected
    └── StorageError      → persistence failure (transient)

Propagation:
    Single-entity operations let these propagate as-is. Batch reconciliation
    catches them per user, logs them and carries on. Nothing is retried here.
"""

from typing import Any, Dict, Optional


class FilmLedgerError(Exception):
    """
    Base exception for all Film Ledger errors.

    Attributes:
        message:  Human-readable error description (safe to show callers)
        context:  Additional debug info (logged, not meant for end users)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FilmLedgerError):
    """
    Raised when a command carries input the core cannot act on.

    When:    page/limit below 1, unknown asset kind.
    """

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


class NotFoundError(FilmLedgerError):
    """
    Raised when a referenced resource does not exist.

    SQLAlchemy returns None for missing rows; repositories convert that None
    into NotFoundError so services never branch on None.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(FilmLedgerError):
    """
    Raised when a conditional user write finds a newer version than it read.

    When:    Two preference updates on the same user race and this one lost.
    Recovery is the caller's business (re-read and re-apply, or report).
    """

    def __init__(
        self,
        user_id: Optional[int] = None,
        expected_version: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "The user was modified concurrently; re-read and try again"
        ctx = context or {}
        if user_id is not None:
            ctx["user_id"] = user_id
        if expected_version is not None:
            ctx["expected_version"] = expected_version
        super().__init__(message=message, context=ctx)
        self.user_id = user_id
        self.expected_version = expected_version


class StorageError(FilmLedgerError):
    """
    Raised when a database operation fails unexpectedly.

    What:    A query, insert or update failed (connection lost, deadlock, ...).
    The message stays generic; the original error type travels in context.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
