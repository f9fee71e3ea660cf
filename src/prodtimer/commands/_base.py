"""Click base classes with --examples support.

``PtCommand`` and ``PtGroup`` accept an ``examples`` parameter. Passing
``--examples`` prints them and exits, which keeps ``--help`` short.
"""

from __future__ import annotations

from typing import Any

import click


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class PtCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class PtGroup(click.Group):
    """Click Group whose subcommands default to :class:`PtCommand`."""

    command_class = PtCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def timer_spec_options(func: Any) -> Any:
    """Decorate a command with the --name/--duration/--unit/--description options.

    Values are passed through as strings; the command normalizer validates
    and coerces them.
    """
    options = [
        click.option("-n", "--name", default=None, help="Timer name."),
        click.option("-d", "--duration", default=None, help="Timer duration (number)."),
        click.option("-u", "--unit", default=None, help="Duration unit: ms, s, m (default), h."),
        click.option("--description", default=None, help="Free-text description."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def raw_command(
    command: str,
    options: dict[str, Any] | None = None,
    arguments: list[str] | None = None,
) -> dict[str, Any]:
    """Build a raw command object, dropping options the user left unset."""
    return {
        "command": command,
        "options": {k: v for k, v in (options or {}).items() if v is not None},
        "arguments": list(arguments or []),
    }
