"""Tests for the stats command."""

from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path

import pytest
from click.testing import CliRunner

from prodtimer.cli import cli
from prodtimer.infrastructure.timer_log import LogEntry, log_file_for


def _write_log(data_dir: Path, day: date, *entries: tuple[str, int]) -> None:
    path = log_file_for(data_dir / "logs", day)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "".join(
            LogEntry(name=name, elapsed_time_ms=ms, timestamp=0).model_dump_json() + "\n"
            for name, ms in entries
        )
    )


class TestStats:
    def test_empty_today(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["stats"])
        assert result.exit_code == 0, result.output
        assert f"Stats for {date.today().isoformat()}" in result.output
        assert "no sessions recorded" in result.output

    def test_today_with_sessions(self, cli_runner: CliRunner, data_dir: Path) -> None:
        _write_log(data_dir, date.today(), ("coding", 1_500_000), ("coding", 300_000))
        result = cli_runner.invoke(cli, ["stats"])
        assert result.exit_code == 0, result.output
        assert "coding" in result.output
        assert "2 sessions" in result.output
        assert "00h 30m 00s total" in result.output

    def test_days_back_json(self, cli_runner: CliRunner, data_dir: Path) -> None:
        day = date.today() - timedelta(days=2)
        _write_log(data_dir, day, ("a", 1000), ("b", 500))
        result = cli_runner.invoke(cli, ["--json", "stats", "2"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["op"] == "stats"
        assert data["data"]["date"] == day.isoformat()
        assert data["data"]["total_duration_ms"] == 1500

    def test_us_date(self, cli_runner: CliRunner, data_dir: Path) -> None:
        _write_log(data_dir, date(2026, 1, 31), ("a", 3_723_000))
        result = cli_runner.invoke(cli, ["-q", "stats", "01/31/2026"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "01:02:03"

    @pytest.mark.parametrize("arg", ["24/22/2022", "2022/01/01", "yesterday"])
    def test_invalid_date(self, cli_runner: CliRunner, arg: str) -> None:
        result = cli_runner.invoke(cli, ["stats", arg])
        assert result.exit_code == 1
        assert "Invalid date string" in result.output
