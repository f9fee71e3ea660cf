"""Countdown timer: a single named timer with a four-state lifecycle.

Elapsed time is never accumulated by polling. While running, it is always
``elapsed_before_resume + (clock() - resumed_at)``, so a timer cannot drift
no matter how rarely it is inspected. Natural elapsation is scheduled on the
running asyncio loop with ``call_later`` and behaves exactly like ``end()``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from prodtimer.domain.errors import TimerStateError
from prodtimer.domain.timer_state import TimerState, is_valid_transition

logger = logging.getLogger(__name__)

DurationUnit = Literal["ms", "s", "m", "h"]

DEFAULT_UNIT: DurationUnit = "m"

# Unit -> multiplier in seconds (``ms`` is handled separately).
_SECONDS_PER_UNIT: dict[str, int] = {"s": 1, "m": 60, "h": 3600}


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TimerSpec(BaseModel):
    """User-supplied description of a timer to create or save."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    description: str | None = None
    duration: float = Field(gt=0)
    unit: DurationUnit = DEFAULT_UNIT

    @model_validator(mode="after")
    def _at_least_one_ms(self) -> TimerSpec:
        if self.duration_ms() < 1:
            msg = f"duration {self.duration}{self.unit} is shorter than 1ms"
            raise ValueError(msg)
        return self

    def duration_ms(self, ms_in_one_second: int = 1000) -> int:
        """Duration converted to whole milliseconds."""
        if self.unit == "ms":
            return round(self.duration)
        return round(self.duration * _SECONDS_PER_UNIT[self.unit] * ms_in_one_second)


class TimerBrief(BaseModel):
    """Identity fields of a timer, used for persistence and listing."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    duration: int = Field(gt=0)


class TimerInfo(TimerBrief):
    """Brief info plus the derived timing fields."""

    state: TimerState
    started_at: int | None = None
    elapsed_ms: int
    remaining_ms: int


CompletionCallback = Callable[[TimerInfo], Awaitable[None]]


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------


class CountdownTimer:
    """A countdown timer driven by wall-clock deltas.

    Args:
        name: Timer name (also the saved-timer key).
        duration_ms: Total duration in milliseconds, must be positive.
        description: Optional free text.
        callback: Awaited exactly once, with the final info, when the timer ends.
        clock: Monotonic clock in seconds (injectable for tests).
        wall_clock: Epoch clock in seconds, used for ``started_at``.
    """

    def __init__(
        self,
        *,
        name: str,
        duration_ms: int,
        description: str | None = None,
        callback: CompletionCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        if duration_ms <= 0:
            msg = f"Timer duration must be positive, got {duration_ms}ms"
            raise ValueError(msg)
        self.name = name
        self.description = description
        self.duration = int(duration_ms)
        self._callback = callback
        self._clock = clock
        self._wall_clock = wall_clock

        self._state = TimerState.CREATED
        self._elapsed_before_resume = 0.0
        self._resumed_at: float | None = None
        self._started_at: int | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._completion: asyncio.Task[None] | None = None
        self._ended = asyncio.Event()

    @classmethod
    def from_spec(
        cls,
        spec: TimerSpec,
        *,
        callback: CompletionCallback | None = None,
        ms_in_one_second: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> CountdownTimer:
        """Build a timer from a validated :class:`TimerSpec`.

        Raises:
            pydantic.ValidationError: the duration rounds below 1ms at this
                second length.
        """
        brief = TimerBrief(
            name=spec.name,
            description=spec.description,
            duration=spec.duration_ms(ms_in_one_second),
        )
        return cls(
            name=brief.name,
            description=brief.description,
            duration_ms=brief.duration,
            callback=callback,
            clock=clock,
            wall_clock=wall_clock,
        )

    # ------------------------------------------------------------------
    # Derived timing
    # ------------------------------------------------------------------

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def elapsed_ms(self) -> int:
        elapsed = self._elapsed_before_resume
        if self._resumed_at is not None:
            elapsed += (self._clock() - self._resumed_at) * 1000
        return min(self.duration, round(elapsed))

    @property
    def remaining_ms(self) -> int:
        return self.duration - self.elapsed_ms

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> TimerInfo:
        """Start or resume the countdown."""
        self._transition(TimerState.RUNNING)
        if self._started_at is None:
            self._started_at = round(self._wall_clock() * 1000)
        self._resumed_at = self._clock()
        self._schedule_elapsation()
        logger.debug("Timer %r running, %dms remaining", self.name, self.remaining_ms)
        return self.info()

    def pause(self) -> TimerInfo:
        """Freeze the elapsed/remaining split."""
        self._transition(TimerState.PAUSED)
        self._freeze()
        return self.info()

    def reset(self) -> TimerInfo:
        """Return to ``CREATED`` with the full duration remaining."""
        self._transition(TimerState.CREATED)
        self._cancel_elapsation()
        self._elapsed_before_resume = 0.0
        self._resumed_at = None
        self._started_at = None
        return self.info()

    async def end(self) -> TimerInfo:
        """End the timer early and run the completion callback."""
        self._transition(TimerState.ENDED)
        info = self._mark_ended()
        await self._complete(info)
        return info

    def info(self, *, brief: bool = False) -> TimerBrief | TimerInfo:
        """Snapshot of the timer. ``brief`` omits the derived timing fields."""
        if brief:
            return TimerBrief(name=self.name, description=self.description, duration=self.duration)
        elapsed = self.elapsed_ms
        return TimerInfo(
            name=self.name,
            description=self.description,
            duration=self.duration,
            state=self._state,
            started_at=self._started_at,
            elapsed_ms=elapsed,
            remaining_ms=self.duration - elapsed,
        )

    async def wait_ended(self) -> None:
        """Block until the timer ends and its completion callback has run."""
        await self._ended.wait()
        if self._completion is not None:
            await self._completion

    async def aclose(self) -> None:
        """Drop pending elapsation and wait for an in-flight completion callback."""
        self._cancel_elapsation()
        if self._completion is not None:
            await self._completion

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, target: TimerState) -> None:
        if not is_valid_transition(self._state, target):
            msg = f'Cannot {_VERBS[target]} a timer that is "{self._state}".'
            raise TimerStateError(msg)
        self._state = target

    def _freeze(self) -> None:
        if self._resumed_at is not None:
            self._elapsed_before_resume += (self._clock() - self._resumed_at) * 1000
            self._elapsed_before_resume = min(float(self.duration), self._elapsed_before_resume)
            self._resumed_at = None
        self._cancel_elapsation()

    def _mark_ended(self) -> TimerInfo:
        self._state = TimerState.ENDED
        self._freeze()
        self._ended.set()
        info = self.info()
        assert isinstance(info, TimerInfo)
        return info

    async def _complete(self, info: TimerInfo) -> None:
        logger.debug("Timer %r ended after %dms", self.name, info.elapsed_ms)
        if self._callback is not None:
            await self._callback(info)

    def _schedule_elapsation(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; timer %r will not self-end", self.name)
            return
        self._handle = loop.call_later(self.remaining_ms / 1000, self._on_elapsed)

    def _cancel_elapsation(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_elapsed(self) -> None:
        self._handle = None
        if self._state is not TimerState.RUNNING:
            return
        # Pin elapsed to the full duration; the loop may fire a little early.
        self._resumed_at = None
        self._elapsed_before_resume = float(self.duration)
        info = self._mark_ended()
        self._completion = asyncio.get_running_loop().create_task(self._complete(info))


_VERBS: dict[TimerState, str] = {
    TimerState.CREATED: "reset",
    TimerState.RUNNING: "start",
    TimerState.PAUSED: "pause",
    TimerState.ENDED: "end",
}
