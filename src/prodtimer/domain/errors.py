"""Domain exceptions carrying a stable error code.

The service layer converts these into ``ServiceError(code, message)`` at the
dispatch boundary, so ``code`` values are part of the public contract.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for expected, user-facing failures."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class TimerStateError(DomainError):
    """A lifecycle operation is not allowed in the timer's current state."""

    code = "INVALID_TRANSITION"


class InvalidDateError(DomainError):
    """A stats date argument is neither a day offset nor a valid date string."""

    code = "INVALID_DATE_STRING"
