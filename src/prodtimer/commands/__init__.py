"""Subcommand modules for prodtimer.

Provides register_commands() which uses deferred imports to keep
``prodtimer --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``saved`` group and the standalone commands on the root group."""
    # --- Groups ---
    from prodtimer.commands.saved import saved

    cli.add_command(saved)

    # --- Standalone commands ---
    from prodtimer.commands.run import run
    from prodtimer.commands.shell import shell
    from prodtimer.commands.stats import stats

    cli.add_command(run)
    cli.add_command(shell)
    cli.add_command(stats)
