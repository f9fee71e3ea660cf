"""Append-only session log, one JSON-lines file per calendar day.

Layout::

    {logs_dir}/2026-10-19.jsonl
    {logs_dir}/2026-10-20.jsonl

Each line is one :class:`LogEntry`. Files are only ever appended to; the
stats aggregator reads a whole day at a time.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from pydantic import BaseModel, ValidationError

from prodtimer.domain.timer import TimerInfo

logger = logging.getLogger(__name__)


class LogEntry(BaseModel):
    """One completed (or ended) timer session."""

    model_config = {"frozen": True}

    name: str
    description: str | None = None
    elapsed_time_ms: int
    timestamp: int


def log_file_for(logs_dir: Path, day: date) -> Path:
    """Path of the log file holding entries for *day*."""
    return logs_dir / f"{day.isoformat()}.jsonl"


class TimerLogger:
    """Writes and reads :class:`LogEntry` records under *logs_dir*.

    File I/O runs in a worker thread so the event loop keeps ticking the
    active timer while a log is written.
    """

    def __init__(
        self,
        logs_dir: Path,
        *,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self.logs_dir = logs_dir
        self._wall_clock = wall_clock

    async def init(self) -> None:
        await asyncio.to_thread(self.logs_dir.mkdir, parents=True, exist_ok=True)

    async def log(self, info: TimerInfo) -> LogEntry:
        """Append one entry for a finished timer session."""
        now = self._wall_clock()
        entry = LogEntry(
            name=info.name,
            description=info.description,
            elapsed_time_ms=info.elapsed_ms,
            timestamp=round(now * 1000),
        )
        path = log_file_for(self.logs_dir, datetime.fromtimestamp(now).date())
        line = entry.model_dump_json() + "\n"
        await asyncio.to_thread(_append_line, path, line)
        logger.debug("Logged session %r (%dms) to %s", entry.name, entry.elapsed_time_ms, path)
        return entry

    async def get_logs(self, day: date) -> list[LogEntry]:
        """All entries recorded on *day*, oldest first."""
        path = log_file_for(self.logs_dir, day)
        return await asyncio.to_thread(_read_entries, path)


def _append_line(path: Path, line: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(line)


def _read_entries(path: Path) -> list[LogEntry]:
    if not path.is_file():
        return []
    entries: list[LogEntry] = []
    for lineno, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not raw.strip():
            continue
        try:
            entries.append(LogEntry.model_validate(json.loads(raw)))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("Skipping malformed log line %s:%d", path, lineno)
    return entries
