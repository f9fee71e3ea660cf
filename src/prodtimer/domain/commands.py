"""Typed command variants: one model per command name.

:func:`parse_command` turns a :class:`NormalizedCommand` into exactly one of
the variants in :data:`Command`, discriminated by ``command``. The timer
manager dispatches on these with ``match``.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from prodtimer.domain.normalize import (
    CommandError,
    NormalizedCommand,
    NormalizeErrorCode,
)
from prodtimer.domain.timer import TimerSpec


class _BaseCommand(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class CreateCommand(_BaseCommand):
    command: Literal["CREATE"] = "CREATE"
    argument: TimerSpec


class StartCommand(_BaseCommand):
    command: Literal["START"] = "START"
    argument: str | None = None


class PauseCommand(_BaseCommand):
    command: Literal["PAUSE"] = "PAUSE"


class ResetCommand(_BaseCommand):
    command: Literal["RESET"] = "RESET"


class EndCommand(_BaseCommand):
    command: Literal["END"] = "END"


class InfoCommand(_BaseCommand):
    command: Literal["INFO"] = "INFO"


class SaveCommand(_BaseCommand):
    command: Literal["SAVE"] = "SAVE"
    argument: TimerSpec | None = None


class UpdateConfigCommand(_BaseCommand):
    command: Literal["UPDATE_CONFIG"] = "UPDATE_CONFIG"


class ListSavedTimersCommand(_BaseCommand):
    command: Literal["LIST_SAVED_TIMERS"] = "LIST_SAVED_TIMERS"


class DeleteSavedTimerCommand(_BaseCommand):
    command: Literal["DELETE_SAVED_TIMER"] = "DELETE_SAVED_TIMER"
    argument: str = Field(min_length=1)


class StatsCommand(_BaseCommand):
    command: Literal["STATS"] = "STATS"
    # int: days before today; str: US date string; None: today.
    argument: int | str | None = None


class StopBeepingCommand(_BaseCommand):
    command: Literal["STOP_BEEPING"] = "STOP_BEEPING"


Command = Annotated[
    CreateCommand
    | StartCommand
    | PauseCommand
    | ResetCommand
    | EndCommand
    | InfoCommand
    | SaveCommand
    | UpdateConfigCommand
    | ListSavedTimersCommand
    | DeleteSavedTimerCommand
    | StatsCommand
    | StopBeepingCommand,
    Field(discriminator="command"),
]

_COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(normalized: NormalizedCommand) -> Command | CommandError:
    """Validate a normalized command into its typed variant."""
    try:
        return _COMMAND_ADAPTER.validate_python(normalized.to_dict())
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first["loc"][1:]) or "command"
        return CommandError(
            code=NormalizeErrorCode.INVALID_ARGUMENT,
            message=f'Invalid argument for "{normalized.command}" ({where}): {first["msg"]}',
        )
