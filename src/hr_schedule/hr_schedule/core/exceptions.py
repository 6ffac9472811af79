from __future__ import annotations

from typing import Optional

from .enums import ConflictReason


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is malformed (empty or inverted ranges, bad ids)."""

    code = "VALIDATION_ERROR"


class AuthorizationError(DomainError):
    """Raised when an actor lacks the capability for an action."""

    code = "FORBIDDEN"


class NotFoundError(DomainError):
    """Raised when an employee schedule or request id is unknown."""

    code = "NOT_FOUND"


class ConflictError(DomainError):
    """Business-rule rejection. Never retried automatically."""

    code = "CONFLICT"

    def __init__(self, message: str, *, reason: Optional[ConflictReason] = None):
        super().__init__(message)
        self.reason = reason


class ScheduleConflictError(ConflictError):
    """Raised when a work schedule's effective range overlaps an existing one."""

    code = "SCHEDULE_CONFLICT"

    def __init__(self, message: str):
        super().__init__(message, reason=ConflictReason.SCHEDULE_OVERLAP)


class StaleConflictError(ConflictError):
    """Raised when the decision-time re-check fails."""

    code = "STALE_CONFLICT"


class TerminalStateError(DomainError):
    """Raised on any transition out of Approved/Rejected/Cancelled."""

    code = "TERMINAL_STATE"


class LockTimeoutError(DomainError):
    """The per-employee section could not be acquired in time.

    Nothing was written; the caller may retry with backoff.
    """

    code = "LOCK_TIMEOUT"
    retryable = True


class PersistenceError(DomainError):
    """Underlying store failure."""

    code = "PERSISTENCE_ERROR"
    retryable = True
