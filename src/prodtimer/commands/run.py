"""Command: run a timer in the foreground until it ends."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

import click

from prodtimer.commands._base import PtCommand, raw_command, timer_spec_options
from prodtimer.domain.commands import EndCommand, InfoCommand
from prodtimer.domain.dates import format_duration_hms

if TYPE_CHECKING:
    from prodtimer.commands._context import AppContext
    from prodtimer.services.result import ServiceResult

_BEEP_POLL_SECONDS = 0.05


@click.command(
    cls=PtCommand,
    examples="""\
  prodtimer run coding                        # start the saved timer "coding"
  prodtimer run --name tea --duration 3       # ad-hoc three minute timer
  prodtimer run -n focus -d 90 -u s --description "Inbox zero"
  prodtimer --json run coding                 # final snapshot as JSON""",
)
@click.argument("saved_name", required=False)
@timer_spec_options
@click.pass_obj
def run(
    app: AppContext,
    saved_name: str | None,
    name: str | None,
    duration: str | None,
    unit: str | None,
    description: str | None,
) -> None:
    """Run a timer until it elapses. Ctrl-C ends it early.

    With SAVED_NAME, starts a saved timer; otherwise builds one from the
    --name/--duration options. The session is logged either way.
    """
    ad_hoc = {"name": name, "duration": duration, "unit": unit, "description": description}
    if saved_name and any(v is not None for v in ad_hoc.values()):
        msg = "Pass either SAVED_NAME or --name/--duration, not both."
        raise click.UsageError(msg)
    if not saved_name and (name is None or duration is None):
        msg = "Pass SAVED_NAME, or both --name and --duration."
        raise click.UsageError(msg)

    if saved_name:
        commands = [raw_command("start", arguments=[saved_name])]
    else:
        commands = [raw_command("create", ad_hoc), raw_command("start")]

    app.emit(asyncio.run(run_session(app, commands)))


async def run_session(
    app: AppContext,
    commands: list[dict[str, Any]],
    *,
    interrupt: asyncio.Event | None = None,
) -> ServiceResult:
    """Execute *commands*, then block until the active timer ends.

    Setting *interrupt* (Ctrl-C does) ends the timer early. After a natural
    end the call also waits for the completion beep to finish.
    """
    manager = app.manager
    stop = interrupt or asyncio.Event()
    failed = await manager.try_init()
    if failed is not None:
        return failed
    try:
        result: ServiceResult | None = None
        for command in commands:
            result = await manager.execute_raw(command)
            if not result.ok:
                return result
        assert result is not None
        _announce(app, result)

        with _interrupt_on_sigint(stop):
            if not await _first_done(manager.wait_for_active_timer(), stop.wait()):
                return await manager.execute(EndCommand())
            while manager.is_beeping and not stop.is_set():
                await asyncio.sleep(_BEEP_POLL_SECONDS)
        return await manager.execute(InfoCommand())
    finally:
        await manager.close()


async def _first_done(ended: Any, interrupted: Any) -> bool:
    """Await both coroutines until one finishes; True when *ended* won."""
    end_task = asyncio.ensure_future(ended)
    stop_task = asyncio.ensure_future(interrupted)
    done, pending = await asyncio.wait({end_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await asyncio.gather(*pending)
    return end_task in done


@contextlib.contextmanager
def _interrupt_on_sigint(stop: asyncio.Event) -> Iterator[None]:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, stop.set)
    except (NotImplementedError, RuntimeError, ValueError):
        # No signal support here (Windows, or not the main thread).
        yield
        return
    try:
        yield
    finally:
        loop.remove_signal_handler(signal.SIGINT)


def _announce(app: AppContext, started: ServiceResult) -> None:
    if app.settings.json_output or app.settings.quiet:
        return
    data = started.data
    remaining = format_duration_hms(data.get("remaining_ms", 0))
    click.echo(f"Running {data.get('name', '?')}: {remaining} left (Ctrl-C to end)", err=True)
