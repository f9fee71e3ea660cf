"""Command group: saved timer templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from prodtimer.commands._base import PtGroup, raw_command, timer_spec_options

if TYPE_CHECKING:
    from prodtimer.commands._context import AppContext

_SAVED_EXAMPLES = """\
  prodtimer saved list
  prodtimer saved add --name coding --duration 25 --unit m
  prodtimer saved delete coding"""


@click.group(cls=PtGroup, examples=_SAVED_EXAMPLES)
@click.pass_obj
def saved(app: AppContext) -> None:
    """Manage saved timer templates."""


@saved.command(
    "list",
    examples="""\
  prodtimer saved list
  prodtimer -q saved list          # names only""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List saved timers."""
    app.emit(app.run(raw_command("list_saved_timers")))


@saved.command(
    examples="""\
  prodtimer saved add --name coding --duration 25
  prodtimer saved add -n reading -d 1 -u h --description 'Books, not feeds'""",
)
@timer_spec_options
@click.pass_obj
def add(
    app: AppContext,
    name: str | None,
    duration: str | None,
    unit: str | None,
    description: str | None,
) -> None:
    """Save a timer template (replaces one with the same name)."""
    if name is None or duration is None:
        msg = "Pass both --name and --duration."
        raise click.UsageError(msg)
    options = {"name": name, "duration": duration, "unit": unit, "description": description}
    app.emit(app.run(raw_command("save", options)))


@saved.command(
    examples="""\
  prodtimer saved delete coding""",
)
@click.argument("name")
@click.pass_obj
def delete(app: AppContext, name: str) -> None:
    """Delete a saved timer by name."""
    app.emit(app.run(raw_command("delete_saved_timer", arguments=[name])))
