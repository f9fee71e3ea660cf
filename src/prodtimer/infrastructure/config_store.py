"""Saved-timer store: beep duration and named timer templates in one JSON file.

The file lives at ``{data_dir}/timers.json``::

    {
      "saved_timers": {
        "coding": {"name": "coding", "description": null, "duration": 1500000}
      }
    }

Saved timers are stored as brief info with the duration already in
milliseconds. Untrusted input is validated as a :class:`TimerSpec` first;
trusted input (a snapshot of a live timer) is stored as-is.

prodtimer never adds ``beep_duration_ms`` to the file. When a user puts it
there by hand it overrides the configured default for that data directory
and is kept on rewrite; otherwise the setting applies on every load.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from prodtimer.domain.errors import DomainError
from prodtimer.domain.timer import TimerBrief, TimerSpec

logger = logging.getLogger(__name__)

STORE_FILENAME = "timers.json"


class SavedTimerNotFoundError(DomainError):
    """No saved timer has the requested name."""

    code = "SAVED_TIMER_NOT_FOUND"


class ConfigStoreError(DomainError):
    """The store file exists but cannot be parsed."""

    code = "INVALID_CONFIG"


class TimerStoreConfig(BaseModel):
    """Validated contents of the store file."""

    model_config = {"frozen": True}

    beep_duration_ms: int = Field(default=2000, ge=0)
    saved_timers: dict[str, TimerBrief] = Field(default_factory=dict)


class ConfigManager:
    """Reads and writes the saved-timer store.

    ``init`` is idempotent. ``get_config`` returns the snapshot loaded by the
    last ``init``/``update_config``; writes update that snapshot in place.
    """

    def __init__(
        self,
        path: Path,
        *,
        default_beep_duration_ms: int = 2000,
        ms_in_one_second: int = 1000,
    ) -> None:
        self.path = path
        self._default_beep_duration_ms = default_beep_duration_ms
        self._ms_in_one_second = ms_in_one_second
        self._config = TimerStoreConfig(beep_duration_ms=default_beep_duration_ms)
        self._beep_pinned = False
        self._initialized = False

    async def init(self) -> None:
        if self._initialized:
            return
        if not await asyncio.to_thread(self.path.is_file):
            logger.debug("Creating timer store at %s", self.path)
            await self._write(self._config)
        await self.update_config()
        self._initialized = True

    async def update_config(self) -> None:
        """Re-read the store file from disk."""
        self._config, self._beep_pinned = await asyncio.to_thread(self._load)

    async def get_config(self) -> TimerStoreConfig:
        return self._config

    async def save_timer(
        self,
        timer_info: TimerSpec | TimerBrief | dict[str, Any],
        *,
        is_trusted: bool = False,
    ) -> TimerBrief:
        """Add or replace a saved timer, returning what was stored."""
        if is_trusted:
            brief = (
                timer_info
                if isinstance(timer_info, TimerBrief)
                else TimerBrief.model_validate(_as_dict(timer_info))
            )
        else:
            spec = (
                timer_info
                if isinstance(timer_info, TimerSpec)
                else TimerSpec.model_validate(_as_dict(timer_info))
            )
            brief = TimerBrief(
                name=spec.name,
                description=spec.description,
                duration=spec.duration_ms(self._ms_in_one_second),
            )

        saved = {**self._config.saved_timers, brief.name: brief}
        updated = self._config.model_copy(update={"saved_timers": saved})
        await self._write(updated)
        self._config = updated
        logger.debug("Saved timer %r", brief.name)
        return brief

    async def delete_saved_timer(self, name: str) -> None:
        if name not in self._config.saved_timers:
            msg = f'No saved timer with name: "{name}"'
            raise SavedTimerNotFoundError(msg)
        saved = {k: v for k, v in self._config.saved_timers.items() if k != name}
        updated = self._config.model_copy(update={"saved_timers": saved})
        await self._write(updated)
        self._config = updated
        logger.debug("Deleted saved timer %r", name)

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _load(self) -> tuple[TimerStoreConfig, bool]:
        """Return the parsed store and whether it pins ``beep_duration_ms``."""
        if not self.path.is_file():
            return TimerStoreConfig(beep_duration_ms=self._default_beep_duration_ms), False
        raw = self.path.read_text(encoding="utf-8")
        try:
            data = json.loads(raw) if raw.strip() else {}
            if not isinstance(data, dict):
                msg = "top-level value must be an object"
                raise ValueError(msg)
            pinned = "beep_duration_ms" in data
            data.setdefault("beep_duration_ms", self._default_beep_duration_ms)
            return TimerStoreConfig.model_validate(data), pinned
        except (ValueError, ValidationError) as exc:
            msg = f"Invalid timer store {self.path}: {exc}"
            raise ConfigStoreError(msg) from exc

    async def _write(self, config: TimerStoreConfig) -> None:
        document = config.model_dump(mode="json")
        if not self._beep_pinned:
            del document["beep_duration_ms"]
        payload = json.dumps(document, indent=2) + "\n"
        await asyncio.to_thread(_atomic_write, self.path, payload)


def _as_dict(timer_info: BaseModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(timer_info, BaseModel):
        return timer_info.model_dump()
    return dict(timer_info)


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(content, encoding="utf-8")
    os.replace(tmp, path)
