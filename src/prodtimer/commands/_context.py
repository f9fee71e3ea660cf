"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns the process's single :class:`TimerManager`
(built lazily, so ``--help`` never touches the data directory) and
centralizes result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import click

from prodtimer.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from prodtimer.config.settings import TimerSettings
    from prodtimer.services.result import ServiceResult
    from prodtimer.services.timer_manager import TimerManager


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: TimerSettings) -> None:
        self.settings = settings
        self._manager: TimerManager | None = None

        from prodtimer.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json
        )

    @property
    def manager(self) -> TimerManager:
        """The timer manager (created lazily on first access)."""
        if self._manager is None:
            from prodtimer.services.timer_manager import build_timer_manager

            self._manager = build_timer_manager(self.settings)
        return self._manager

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def run(self, command_object: dict[str, Any]) -> ServiceResult:
        """Execute one raw command in a fresh event loop."""
        return asyncio.run(self._run_once(command_object))

    async def _run_once(self, command_object: dict[str, Any]) -> ServiceResult:
        manager = self.manager
        failed = await manager.try_init()
        if failed is not None:
            return failed
        try:
            return await manager.execute_raw(command_object)
        finally:
            await manager.close()

    def render(self, result: ServiceResult) -> str:
        return format_result(result, settings=self.output_settings)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout; warnings go to stderr outside JSON mode.
        * Failure: writes to stderr, exits with code 1.
        """
        output = self.render(result)
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
