"""Typed payload contracts for ServiceResult ``data``.

These models validate payload shapes before they leave the service layer so
key regressions (``items`` vs ``timers``) fail fast in tests.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="json")


class TimerTotals(BaseModel):
    """Per-name totals inside :class:`AggregatedStats`."""

    count: int = 0
    description: str | None = None
    total_duration_ms: int = 0


class AggregatedStats(BaseModel):
    """Payload contract for ``STATS``.

    INVARIANT: overall totals equal the sums of the per-timer totals.
    """

    date: str
    timer_count: int = 0
    total_duration_ms: int = 0
    timers: dict[str, TimerTotals] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _totals_match(self) -> AggregatedStats:
        if self.timer_count != sum(t.count for t in self.timers.values()):
            msg = "timer_count does not match per-timer counts"
            raise ValueError(msg)
        if self.total_duration_ms != sum(t.total_duration_ms for t in self.timers.values()):
            msg = "total_duration_ms does not match per-timer durations"
            raise ValueError(msg)
        return self


class SavedTimerItem(BaseModel):
    """One saved timer row."""

    name: str
    description: str | None = None
    duration: int


class SavedTimerListData(BaseModel):
    """Payload contract for ``LIST_SAVED_TIMERS``."""

    count: int
    items: list[SavedTimerItem]


class TimerInfoData(BaseModel):
    """Payload contract for lifecycle commands that report the timer."""

    name: str
    description: str | None = None
    duration: int
    state: str
    started_at: int | None = None
    elapsed_ms: int
    remaining_ms: int
