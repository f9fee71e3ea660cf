"""Countdown timer lifecycle states and transitions.

A timer moves ``created -> running <-> paused -> ended``. Reset returns any
non-ended timer to ``created``. ``ended`` is terminal: the only way out is
creating a new timer.
"""

from __future__ import annotations

from enum import StrEnum


class TimerState(StrEnum):
    """Lifecycle state of a countdown timer."""

    CREATED = "CREATED"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    ENDED = "ENDED"


# --- Transition map ---

TIMER_TRANSITIONS: dict[str, list[str]] = {
    "CREATED": ["RUNNING", "CREATED"],
    "RUNNING": ["PAUSED", "ENDED", "CREATED"],
    "PAUSED": ["RUNNING", "ENDED", "CREATED"],
    "ENDED": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = TIMER_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
