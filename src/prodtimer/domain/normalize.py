"""Command normalizer: raw ``(command, options, arguments)`` to a canonical command.

Example: ``prodtimer shell`` reads ``ct --name coding -d 20 -u m`` and
produces the raw object::

    {"command": "ct", "options": {"name": ["coding"], "d": ["20"], "u": ["m"]}, "arguments": []}

which normalizes to::

    {"command": "CREATE", "argument": {"name": "coding", "duration": 20, "unit": "m"}}

``ct`` is a command alias for ``CREATE``; ``d`` and ``u`` are option aliases
for ``duration`` and ``unit``; the string ``"20"`` is coerced by the
``duration`` option's coercion function.

INVARIANT: :func:`normalize_command_object` is pure and never raises for
bad input. Failures come back as a :class:`CommandError` value.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from prodtimer.domain.command_schema import (
    ALL_COMMANDS,
    COMMAND_ALIASES,
    COMMAND_SCHEMAS,
    ArgumentSpec,
    CommandSchema,
    OptionType,
)


class NormalizeErrorCode(StrEnum):
    """Stable codes for validation faults."""

    UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
    MISSING_PROPERTY = "MISSING_PROPERTY"
    INVALID_COMMAND_OBJECT = "INVALID_COMMAND_OBJECT"
    INVALID_COMMAND = "INVALID_COMMAND"
    INVALID_OPTIONS_OBJECT = "INVALID_OPTIONS_OBJECT"
    INVALID_MAIN_ARGUMENTS = "INVALID_MAIN_ARGUMENTS"
    MISSING_REQUIRED_MAIN_ARGUMENTS = "MISSING_REQUIRED_MAIN_ARGUMENT(S)"
    UNKNOWN_OPTION = "UNKNOWN_OPTION"
    MISSING_REQUIRED_OPTION = "MISSING_REQUIRED_OPTION"
    OPTION_TYPE_MISMATCH = "OPTION_TYPE_MISMATCH"
    INVALID_OPTION_VALUE = "INVALID_OPTION_VALUE"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"


class CommandError(BaseModel):
    """A validation fault: stable code plus a human-readable message."""

    model_config = {"frozen": True}

    code: str
    message: str


class NormalizedCommand(BaseModel):
    """Canonical ``{command, argument?}`` pair."""

    model_config = {"frozen": True}

    command: str
    argument: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Plain dict form, omitting ``argument`` for bare commands."""
        if self.argument is None:
            return {"command": self.command}
        return {"command": self.command, "argument": self.argument}


_Scalar = str | int | float | bool | None


def normalize_command_object(
    command_object: Any,
    *,
    aliases: Mapping[str, str] = COMMAND_ALIASES,
    all_commands: Collection[str] = ALL_COMMANDS,
    schemas: Mapping[str, CommandSchema] = COMMAND_SCHEMAS,
) -> NormalizedCommand | CommandError:
    """Normalize a raw command object against the command schemas."""
    error = _check_command_object(command_object)
    if error is not None:
        return error

    raw_name: str = command_object["command"]
    if raw_name in aliases:
        command = str(aliases[raw_name])
    elif raw_name.upper() in all_commands:
        command = raw_name.upper()
    else:
        return CommandError(
            code=NormalizeErrorCode.UNKNOWN_COMMAND,
            message=f'Unknown command "{raw_name}".',
        )

    schema = schemas.get(command) or CommandSchema()
    options: Mapping[str, Any] = command_object["options"]

    argument: Any
    if schema.options and options:
        argument = _normalize_options(command, options, schema)
    elif schema.arguments is not None:
        argument = _normalize_arguments(command, command_object.get("arguments"), schema.arguments)
    else:
        return NormalizedCommand(command=command)

    if isinstance(argument, CommandError):
        return argument
    return NormalizedCommand(command=command, argument=argument)


# ---------------------------------------------------------------------------
# Raw object validation
# ---------------------------------------------------------------------------


def _check_command_object(command_object: Any) -> CommandError | None:
    if not isinstance(command_object, Mapping):
        return CommandError(
            code=NormalizeErrorCode.INVALID_COMMAND_OBJECT,
            message='The "commandObject" must be a plain object.',
        )
    if "command" not in command_object or "options" not in command_object:
        return CommandError(
            code=NormalizeErrorCode.MISSING_PROPERTY,
            message='The "command" or the "options" property is missing.',
        )

    command = command_object["command"]
    if not isinstance(command, str) or not command:
        return CommandError(
            code=NormalizeErrorCode.INVALID_COMMAND,
            message='The "command" property is missing or invalid.',
        )

    if not _is_flat_mapping(command_object["options"]):
        return CommandError(
            code=NormalizeErrorCode.INVALID_OPTIONS_OBJECT,
            message='The "options" must be a flat key-value object.',
        )

    arguments = command_object.get("arguments")
    if arguments is not None and not (
        isinstance(arguments, list) and all(isinstance(arg, str) for arg in arguments)
    ):
        return CommandError(
            code=NormalizeErrorCode.INVALID_MAIN_ARGUMENTS,
            message="The main arguments of a command must be an array of strings.",
        )
    return None


def _is_flat_mapping(options: Any) -> bool:
    if not isinstance(options, Mapping):
        return False
    for key, value in options.items():
        if not isinstance(key, str):
            return False
        if isinstance(value, list):
            if not all(isinstance(item, _Scalar) for item in value):
                return False
        elif not isinstance(value, _Scalar):
            return False
    return True


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


def _normalize_options(
    command: str,
    options: Mapping[str, Any],
    schema: CommandSchema,
) -> dict[str, Any] | CommandError:
    supplied: dict[str, Any] = {}
    for key, value in options.items():
        name = schema.option_aliases.get(key, key)
        if name not in schema.options:
            return CommandError(
                code=NormalizeErrorCode.UNKNOWN_OPTION,
                message=f'Unknown option "{key}" for command "{command}".',
            )
        supplied[name] = value

    normalized: dict[str, Any] = {}
    for name, spec in schema.options.items():
        if name not in supplied:
            if spec.default is not None:
                normalized[name] = spec.default
            elif not spec.optional:
                return CommandError(
                    code=NormalizeErrorCode.MISSING_REQUIRED_OPTION,
                    message=f'The property "{name}" is required.',
                )
            continue

        value = supplied[name]
        if spec.type is OptionType.ARRAY:
            if not isinstance(value, list):
                return CommandError(
                    code=NormalizeErrorCode.OPTION_TYPE_MISMATCH,
                    message=f'The value of "{name}" must be an array.',
                )
        else:
            # {"name": ["coding"]} normalizes to {"name": "coding"}
            if isinstance(value, list):
                value = value[0] if value else None
            if not _matches_type(value, spec.type):
                return CommandError(
                    code=NormalizeErrorCode.OPTION_TYPE_MISMATCH,
                    message=f'The property "{name}" must be of type: "{spec.type}".',
                )

        if spec.coerce is not None:
            try:
                value = spec.coerce(value)
            except (TypeError, ValueError) as exc:
                return CommandError(
                    code=NormalizeErrorCode.INVALID_OPTION_VALUE,
                    message=f'Invalid value for "{name}": {exc}',
                )
        normalized[name] = value

    return normalized


def _matches_type(value: Any, option_type: OptionType) -> bool:
    if option_type is OptionType.STRING:
        return isinstance(value, str)
    if option_type is OptionType.NUMBER:
        # Numeric strings are accepted and left to the coercion function.
        return isinstance(value, int | float | str) and not isinstance(value, bool)
    return isinstance(value, list)


# ---------------------------------------------------------------------------
# Positional arguments
# ---------------------------------------------------------------------------


def _normalize_arguments(
    command: str,
    arguments: list[str] | None,
    spec: ArgumentSpec,
) -> Any:
    if spec.required == 0 and not arguments:
        return None

    if arguments is None or len(arguments) < spec.required:
        return CommandError(
            code=NormalizeErrorCode.MISSING_REQUIRED_MAIN_ARGUMENTS,
            message=(
                f'The command "{command}" is missing {spec.required} required main argument(s).'
            ),
        )

    kept: list[Any] = list(arguments[: spec.count])
    if spec.coerce is not None:
        try:
            kept = [spec.coerce(arg) for arg in kept]
        except (TypeError, ValueError) as exc:
            return CommandError(
                code=NormalizeErrorCode.INVALID_MAIN_ARGUMENTS,
                message=f'Invalid main argument for "{command}": {exc}',
            )

    # ["coding"] for START becomes {"command": "START", "argument": "coding"}
    return kept[0] if len(kept) == 1 else kept
