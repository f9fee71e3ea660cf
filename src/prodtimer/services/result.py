"""ServiceResult and ServiceError: the timer manager's reply contract.

INVARIANT: ``TimerManager.execute`` always returns a ServiceResult and never
raises. The CLI, the interactive shell, and tests consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one dispatched command.

    Attributes:
        ok: Whether the command succeeded.
        op: Lower-case command name (e.g. ``"create"``, ``"stats"``).
        data: Command-specific payload on success.
        warnings: Non-fatal issues encountered while executing.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str) -> ServiceResult:
        """Shorthand for a failed result with a single error."""
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message))

    @property
    def message(self) -> str | None:
        """The error message of a failed result, else None."""
        return self.error.message if self.error else None
