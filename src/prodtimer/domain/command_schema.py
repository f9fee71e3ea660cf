"""Declarative command schemas: one validation table per command.

Each :class:`CommandSchema` lists the options a command accepts (type,
optionality, default, coercion), short option aliases, and the arity of its
positional arguments. A single interpreter in :mod:`prodtimer.domain.normalize`
evaluates every schema; commands never carry their own parsing code.

Coercion functions are pure and raise ``ValueError`` on bad input.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from prodtimer.domain.timer import DEFAULT_UNIT


class CommandName(StrEnum):
    """Canonical command names understood by the timer manager."""

    CREATE = "CREATE"
    START = "START"
    PAUSE = "PAUSE"
    RESET = "RESET"
    END = "END"
    INFO = "INFO"
    SAVE = "SAVE"
    UPDATE_CONFIG = "UPDATE_CONFIG"
    LIST_SAVED_TIMERS = "LIST_SAVED_TIMERS"
    DELETE_SAVED_TIMER = "DELETE_SAVED_TIMER"
    STATS = "STATS"
    STOP_BEEPING = "STOP_BEEPING"


class OptionType(StrEnum):
    """Runtime type an option value must have before coercion."""

    STRING = "string"
    NUMBER = "number"
    ARRAY = "array"


Coercer = Callable[[Any], Any]


@dataclass(frozen=True)
class OptionSpec:
    """One named option of a command."""

    type: OptionType
    optional: bool = False
    default: Any = None
    coerce: Coercer | None = None


@dataclass(frozen=True)
class ArgumentSpec:
    """Positional argument arity: ``count`` total, of which ``optional`` may be omitted."""

    count: int
    optional: int = 0
    coerce: Coercer | None = None

    def __post_init__(self) -> None:
        if self.count < 1 or not 0 <= self.optional <= self.count:
            msg = f"Invalid argument arity: count={self.count}, optional={self.optional}"
            raise ValueError(msg)

    @property
    def required(self) -> int:
        return self.count - self.optional


@dataclass(frozen=True)
class CommandSchema:
    """Validation table for a single command.

    INVARIANT: every ``option_aliases`` target is a key of ``options``.
    """

    options: Mapping[str, OptionSpec] = field(default_factory=dict)
    option_aliases: Mapping[str, str] = field(default_factory=dict)
    arguments: ArgumentSpec | None = None

    def __post_init__(self) -> None:
        for alias, target in self.option_aliases.items():
            if target not in self.options:
                msg = f'Option alias "{alias}" points to undeclared option "{target}"'
                raise ValueError(msg)


# ---------------------------------------------------------------------------
# Coercion functions
# ---------------------------------------------------------------------------

_UNIT_ALIASES: dict[str, str] = {
    "ms": "ms",
    "s": "s",
    "sec": "s",
    "m": "m",
    "min": "m",
    "h": "h",
    "hr": "h",
}


def to_number(value: Any) -> int | float:
    """Coerce a numeric string (or number) to ``int`` when integral, else ``float``."""
    if isinstance(value, bool):
        msg = f"Expected a number, got {value!r}"
        raise ValueError(msg)
    if isinstance(value, int | float):
        number: int | float = value
    else:
        text = str(value).strip()
        try:
            number = int(text)
        except ValueError:
            number = float(text)
    if not math.isfinite(number):
        msg = f"Expected a finite number, got {value!r}"
        raise ValueError(msg)
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def to_unit(value: Any) -> str:
    """Normalize a duration unit (``ms``, ``s``, ``m``, ``h`` and short aliases)."""
    unit = _UNIT_ALIASES.get(str(value).strip().lower())
    if unit is None:
        msg = f"Unknown duration unit {value!r}; use one of: ms, s, m, h"
        raise ValueError(msg)
    return unit


def to_name(value: Any) -> str:
    """Strip surrounding whitespace; names must not be empty."""
    name = str(value).strip()
    if not name:
        msg = "Name must not be empty"
        raise ValueError(msg)
    return name


def to_days_or_date(value: Any) -> Any:
    """Turn an all-digit string into a day offset; leave anything else alone."""
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

_TIMER_SPEC_OPTIONS: dict[str, OptionSpec] = {
    "name": OptionSpec(type=OptionType.STRING, coerce=to_name),
    "duration": OptionSpec(type=OptionType.NUMBER, coerce=to_number),
    "unit": OptionSpec(
        type=OptionType.STRING, optional=True, default=DEFAULT_UNIT, coerce=to_unit
    ),
    "description": OptionSpec(type=OptionType.STRING, optional=True),
}

_TIMER_SPEC_ALIASES: dict[str, str] = {
    "n": "name",
    "d": "duration",
    "u": "unit",
    "desc": "description",
}

COMMAND_SCHEMAS: dict[CommandName, CommandSchema] = {
    CommandName.CREATE: CommandSchema(
        options=_TIMER_SPEC_OPTIONS,
        option_aliases=_TIMER_SPEC_ALIASES,
    ),
    CommandName.SAVE: CommandSchema(
        options=_TIMER_SPEC_OPTIONS,
        option_aliases=_TIMER_SPEC_ALIASES,
    ),
    CommandName.START: CommandSchema(arguments=ArgumentSpec(count=1, optional=1)),
    CommandName.PAUSE: CommandSchema(),
    CommandName.RESET: CommandSchema(),
    CommandName.END: CommandSchema(),
    CommandName.INFO: CommandSchema(),
    CommandName.UPDATE_CONFIG: CommandSchema(),
    CommandName.LIST_SAVED_TIMERS: CommandSchema(),
    CommandName.DELETE_SAVED_TIMER: CommandSchema(arguments=ArgumentSpec(count=1)),
    CommandName.STATS: CommandSchema(
        arguments=ArgumentSpec(count=1, optional=1, coerce=to_days_or_date),
    ),
    CommandName.STOP_BEEPING: CommandSchema(),
}

COMMAND_ALIASES: dict[str, CommandName] = {
    "ct": CommandName.CREATE,
    "s": CommandName.START,
    "p": CommandName.PAUSE,
    "r": CommandName.RESET,
    "e": CommandName.END,
    "i": CommandName.INFO,
    "sv": CommandName.SAVE,
    "uc": CommandName.UPDATE_CONFIG,
    "ls": CommandName.LIST_SAVED_TIMERS,
    "rm": CommandName.DELETE_SAVED_TIMER,
    "st": CommandName.STATS,
    "sb": CommandName.STOP_BEEPING,
}

ALL_COMMANDS: tuple[str, ...] = tuple(str(name) for name in CommandName)
