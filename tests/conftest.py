"""Shared pytest fixtures and test helpers for prodtimer tests."""

from __future__ import annotations

import functools
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from prodtimer.config.models import StorageConfig
from prodtimer.config.settings import TimerSettings
from prodtimer.infrastructure.config_store import ConfigManager
from prodtimer.infrastructure.speaker import Speaker
from prodtimer.infrastructure.timer_log import TimerLogger
from prodtimer.services.timer_manager import TimerManager

# 2026-03-14 09:30 local time
FIXED_NOW = datetime(2026, 3, 14, 9, 30)
FIXED_TS = FIXED_NOW.timestamp()


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run ``@pytest.mark.anyio`` tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep every test away from the user's real config and data directory.

    ``PRODTIMER_CONFIG`` points at a file that does not exist, which turns
    config discovery off.
    """
    for var in ("PRODTIMER_JSON_OUTPUT", "PRODTIMER_QUIET", "PRODTIMER_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("PRODTIMER_CONFIG", str(tmp_path / "no-such-config.toml"))
    monkeypatch.setenv("PRODTIMER_STORAGE__DATA_DIR", str(data_dir))


@pytest.fixture
def settings(data_dir: Path) -> TimerSettings:
    return TimerSettings.from_cli(storage=StorageConfig(data_dir=data_dir))


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bells() -> list[int]:
    """Records each terminal bell a speaker would have rung."""
    return []


@pytest.fixture
def make_manager(data_dir: Path, bells: list[int]) -> Callable[..., TimerManager]:
    """Factory for managers wired to temp files, a silent bell, and a fixed date."""

    def _make(
        *,
        clock: Callable[[], float] | None = None,
        beep_duration_ms: int = 2000,
        beep_interval_ms: int = 10,
    ) -> TimerManager:
        kwargs = {"clock": clock} if clock is not None else {}
        return TimerManager(
            config_manager=ConfigManager(
                data_dir / "timers.json",
                default_beep_duration_ms=beep_duration_ms,
            ),
            timer_logger=TimerLogger(data_dir / "logs", wall_clock=lambda: FIXED_TS),
            speaker_factory=functools.partial(
                Speaker,
                interval_ms=beep_interval_ms,
                bell=lambda: bells.append(1),
            ),
            wall_clock=lambda: FIXED_TS,
            now=lambda: FIXED_NOW,
            **kwargs,
        )

    return _make


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def raw(command: str, *arguments: str, **options: object) -> dict[str, object]:
    """Build a raw command object the way the shell does (option values as lists)."""
    return {
        "command": command,
        "options": {k: v if isinstance(v, list) else [v] for k, v in options.items()},
        "arguments": list(arguments),
    }
