"""Command: per-day session totals from the timer log."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from prodtimer.commands._base import PtCommand, raw_command

if TYPE_CHECKING:
    from prodtimer.commands._context import AppContext


@click.command(
    cls=PtCommand,
    examples="""\
  prodtimer stats                 # today
  prodtimer stats 1               # yesterday
  prodtimer stats 03-14-2026      # a specific day (mm-dd-yyyy or mm/dd/yyyy)
  prodtimer --json stats 7""",
)
@click.argument("days_or_date", required=False)
@click.pass_obj
def stats(app: AppContext, days_or_date: str | None) -> None:
    """Show how long each timer ran on a given day."""
    arguments = [days_or_date] if days_or_date else []
    app.emit(app.run(raw_command("stats", arguments=arguments)))
