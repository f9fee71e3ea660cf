"""Command: interactive session against one long-lived timer manager.

Each line is one raw command: a command name or alias, then positional
arguments, then ``--option value`` pairs::

    prodtimer> ct --name coding -d 20 -u m
    prodtimer> s
    prodtimer> st 1

An option collects every value up to the next option, so positional
arguments must come before the first option.
"""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from prodtimer.commands._base import PtCommand
from prodtimer.domain.command_schema import COMMAND_ALIASES

if TYPE_CHECKING:
    from prodtimer.commands._context import AppContext
    from prodtimer.services.result import ServiceResult

_EXIT_WORDS = frozenset({"exit", "quit", "q"})
_HELP_WORDS = frozenset({"help", "?"})


def split_command_line(line: str) -> dict[str, Any]:
    """Tokenize one shell line into a raw ``{command, options, arguments}`` object.

    Raises:
        ValueError: the line is empty or its quoting is unbalanced.
    """
    tokens = shlex.split(line)
    if not tokens:
        msg = "Empty command line"
        raise ValueError(msg)

    command, *rest = tokens
    options: dict[str, list[str]] = {}
    arguments: list[str] = []
    values: list[str] | None = None
    for token in rest:
        if _is_flag(token):
            key, sep, inline = token.lstrip("-").partition("=")
            values = options.setdefault(key, [])
            if sep:
                values.append(inline)
        elif values is not None:
            values.append(token)
        else:
            arguments.append(token)

    return {"command": command, "options": options, "arguments": arguments}


def _is_flag(token: str) -> bool:
    if not token.startswith("-") or token == "-":
        return False
    try:
        float(token)
    except ValueError:
        return True
    return False


def _help_text() -> str:
    lines = ["Commands (alias: name):"]
    lines.extend(f"  {alias:<4} {name}" for alias, name in COMMAND_ALIASES.items())
    lines.append("  exit | quit | Ctrl-D to leave")
    return "\n".join(lines)


@click.command(
    cls=PtCommand,
    examples="""\
  prodtimer shell
  prodtimer shell --prompt '> '
  printf 'ct -n tea -d 3\\ns\\ni\\n' | prodtimer shell""",
)
@click.option("--prompt", default="prodtimer> ", show_default=True, help="Prompt string.")
@click.pass_obj
def shell(app: AppContext, prompt: str) -> None:
    """Interactive session: timers keep running between commands."""
    failed = asyncio.run(shell_session(app, prompt=prompt))
    if failed is not None:
        app.emit(failed)


async def shell_session(
    app: AppContext,
    *,
    prompt: str = "prodtimer> ",
    read_line: Callable[[str], str] = input,
) -> ServiceResult | None:
    """Read, execute, and render commands until EOF or an exit word.

    Lines are read on a worker thread so running timers keep elapsing
    while the prompt waits. Returns the failed result when the manager
    cannot start, None after a normal exit.
    """
    manager = app.manager
    failed = await manager.try_init()
    if failed is not None:
        return failed
    try:
        while True:
            try:
                line = (await asyncio.to_thread(read_line, prompt)).strip()
            except EOFError:
                break
            if not line:
                continue
            if line in _EXIT_WORDS:
                break
            if line in _HELP_WORDS:
                click.echo(_help_text())
                continue

            try:
                command_object = split_command_line(line)
            except ValueError as exc:
                click.echo(f"ERROR: {exc}", err=True)
                continue
            result = await manager.execute_raw(command_object)
            click.echo(app.render(result), err=not result.ok)
    finally:
        await manager.close()
    return None
