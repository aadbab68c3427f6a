"""
Custom exceptions for scheduling operations.

Provides structured error handling with retryable flags and enough
context to log the failing operation and its inputs.
"""

from typing import Any, Optional

from sqlalchemy.exc import OperationalError


class SchedulingError(Exception):
    """Base exception for scheduling operations."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.context = context or {}


class ValidationError(SchedulingError):
    """
    Malformed input, rejected before any side effect.

    Causes:
    - Unknown timezone identifier
    - Unparseable time of day or calendar date
    - Malformed weekday token or empty weekday set
    - Non-positive frequency or unknown frequency period
    """


class NotFoundError(SchedulingError):
    """
    Referenced entity does not exist.

    Causes:
    - Activity, preference or occurrence id is unknown
    - Series decline requested for an ad-hoc occurrence
    """


class PersistenceError(SchedulingError):
    """
    Transaction or connection failure.

    The in-flight transaction has been rolled back when this is raised.
    Callers decide on retry policy; nothing is retried internally.
    Lock and connection failures are flagged retryable, constraint
    violations are not.
    """

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, original_error=original_error, context=context)
        self.retryable = isinstance(original_error, OperationalError)
