"""Unified exception hierarchy for filesession.

All errors raised by the session engine inherit from FileSessionException,
so callers can catch one base class or target a specific failure.

Categories:
- BusinessException: data-level problems (corrupt session payloads)
- SecurityException: untrusted input rejected before it reaches the filesystem
- InfrastructureException: missing directories, failed writes, renames and deletes
- SessionNotStartedException: caller contract violations (accessor before init)
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class FileSessionException(Exception):
    """Base exception for all filesession errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_CONFIG").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Category Exceptions
# =============================================================================


class BusinessException(FileSessionException):
    """Data-level errors."""


class SecurityException(FileSessionException):
    """Untrusted input rejected by the engine."""


class InfrastructureException(FileSessionException):
    """Filesystem and environment failures."""


# =============================================================================
# Session Exceptions
# =============================================================================


class CorruptSessionDataException(BusinessException):
    """A session file exists but its contents cannot be decoded.

    Raised by codecs; the session store absorbs it and starts a fresh session.
    """

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_CORRUPT", context=context)


class InvalidSessionIdException(SecurityException):
    """A client-supplied session identifier contains disallowed characters."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_INVALID_ID", context=context)


class SessionConfigurationException(InfrastructureException):
    """Session settings are invalid or the save directory is unusable."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_CONFIG", context=context)


class SessionPersistenceException(InfrastructureException):
    """Writing, renaming or deleting a session file failed."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_PERSISTENCE", context=context)


class SessionNotStartedException(FileSessionException):
    """A session accessor was called before ``init()`` completed.

    This is a programming error in the caller, not a recoverable condition.
    """

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_NOT_STARTED", context=context)
