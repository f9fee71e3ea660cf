"""Audible feedback driver: rings the terminal bell for a fixed duration.

The beep runs as an asyncio task so the caller is never blocked.
``on_callback`` fires when a beep episode starts and ``off_callback`` when it
stops, whether it ran out or was cancelled by :meth:`Speaker.off`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

import click

logger = logging.getLogger(__name__)

Bell = Callable[[], None]


def terminal_bell() -> None:
    """Write the ASCII bell to stderr (terminals may have it muted)."""
    click.echo("\a", nl=False, err=True)


class Speaker:
    """Beep loop with on/off hooks."""

    def __init__(
        self,
        *,
        on_callback: Callable[[], None] | None = None,
        off_callback: Callable[[], None] | None = None,
        interval_ms: int = 500,
        bell: Bell = terminal_bell,
    ) -> None:
        self._on_callback = on_callback
        self._off_callback = off_callback
        self._interval_s = max(interval_ms, 1) / 1000
        self._bell = bell
        self._task: asyncio.Task[None] | None = None

    @property
    def is_on(self) -> bool:
        return self._task is not None and not self._task.done()

    async def on(self, duration_ms: int) -> None:
        """Start beeping for *duration_ms*, replacing any running episode."""
        await self.off()
        task = asyncio.create_task(self._beep_loop(duration_ms))
        task.add_done_callback(self._episode_done)
        self._task = task
        if self._on_callback is not None:
            self._on_callback()

    async def off(self) -> None:
        """Stop the current episode, if any."""
        task = self._task
        if task is None:
            return
        self._task = None
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _beep_loop(self, duration_ms: int) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(duration_ms, 0) / 1000
        while (remaining := deadline - loop.time()) > 0:
            self._bell()
            await asyncio.sleep(min(self._interval_s, remaining))

    def _episode_done(self, task: asyncio.Task[None]) -> None:
        # Runs even when the task was cancelled before its first step.
        if self._task is task:
            self._task = None
        logger.debug("Beep episode finished")
        if self._off_callback is not None:
            self._off_callback()
