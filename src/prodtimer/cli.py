"""prodtimer entry point: global flags, settings, and the command tree."""

from __future__ import annotations

from pathlib import Path

import click

from prodtimer import __version__
from prodtimer.commands import register_commands
from prodtimer.commands._context import AppContext
from prodtimer.config.settings import TimerSettings


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog="Saved timers and session logs live under the data directory.",
)
@click.version_option(version=__version__, prog_name="prodtimer")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the essentials.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs on stderr.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    metavar="FILE",
    help="Use this prodtimer.toml instead of searching for one.",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Store timers and logs here (overrides [storage] data_dir).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    data_dir: Path | None,
) -> None:
    """prodtimer: Pomodoro-style productivity timer."""
    overrides = {"storage": {"data_dir": data_dir}} if data_dir is not None else {}
    settings = TimerSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        **overrides,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
