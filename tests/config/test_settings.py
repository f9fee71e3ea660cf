"""Tests for TimerSettings and its TOML source."""

from pathlib import Path

import click
import pytest

from prodtimer.config import settings as settings_module
from prodtimer.config.models import StorageConfig
from prodtimer.config.settings import TimerSettings, load_toml_sections


class TestTimerSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        monkeypatch.delenv("PRODTIMER_STORAGE__DATA_DIR")
        monkeypatch.setattr(settings_module, "user_app_dir", lambda: tmp_path / "app")
        settings = TimerSettings.from_cli()
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.verbose is False
        assert settings.log_json is False
        assert settings.timer.beep_duration_ms == 2000
        assert settings.data_dir == tmp_path / "app"

    def test_derived_paths(self, data_dir: Path) -> None:
        settings = TimerSettings.from_cli()
        assert settings.data_dir == data_dir
        assert settings.store_path == data_dir / "timers.json"
        assert settings.logs_dir == data_dir / "logs"

    def test_frozen(self) -> None:
        settings = TimerSettings.from_cli()
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        toml = tmp_path / "prodtimer.toml"
        toml.write_text('[timer]\nbeep_duration_ms = 100\n[storage]\nlogs_subdir = "sessions"\n')
        settings = TimerSettings.from_cli(config_path=str(toml))
        assert settings.config_path == toml
        assert settings.timer.beep_duration_ms == 100
        assert settings.timer.beep_interval_ms == 500  # default preserved
        assert settings.storage.logs_subdir == "sessions"

    def test_discovered_from_start_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PRODTIMER_CONFIG")
        (tmp_path / "prodtimer.toml").write_text("[timer]\nbeep_interval_ms = 50\n")
        child = tmp_path / "sub"
        child.mkdir()
        settings = TimerSettings.from_cli(start_dir=child)
        assert settings.timer.beep_interval_ms == 50

    def test_empty_toml_uses_defaults(self, tmp_path: Path) -> None:
        toml = tmp_path / "prodtimer.toml"
        toml.write_text("")
        settings = TimerSettings.from_cli(config_path=str(toml))
        assert settings.timer.beep_duration_ms == 2000

    def test_missing_explicit_path_ignored(self, tmp_path: Path) -> None:
        settings = TimerSettings.from_cli(config_path=str(tmp_path / "nope.toml"))
        assert settings.config_path is None

    def test_invalid_toml(self, tmp_path: Path) -> None:
        toml = tmp_path / "prodtimer.toml"
        toml.write_text("[timer\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            TimerSettings.from_cli(config_path=str(toml))


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        toml = tmp_path / "prodtimer.toml"
        toml.write_text("[timer]\nbeep_duration_ms = 100\n")
        monkeypatch.setenv("PRODTIMER_TIMER__BEEP_DURATION_MS", "300")
        settings = TimerSettings.from_cli(config_path=str(toml))
        assert settings.timer.beep_duration_ms == 300

    def test_cli_beats_env(self, tmp_path: Path) -> None:
        settings = TimerSettings.from_cli(storage=StorageConfig(data_dir=tmp_path / "cli"))
        assert settings.data_dir == tmp_path / "cli"

    def test_cli_flags(self) -> None:
        settings = TimerSettings.from_cli(json_output=True, quiet=True, verbose=True)
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True


class TestTomlSections:
    def test_relative_data_dir_resolves_against_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("PRODTIMER_STORAGE__DATA_DIR")
        toml = tmp_path / "prodtimer.toml"
        toml.write_text('[storage]\ndata_dir = "state"\n')
        settings = TimerSettings.from_cli(config_path=str(toml))
        assert settings.data_dir == tmp_path / "state"

    def test_unknown_tables_dropped(self, tmp_path: Path) -> None:
        toml = tmp_path / "prodtimer.toml"
        toml.write_text("[display]\nname = 'x'\n[timer]\nbeep_duration_ms = 10\n")
        assert load_toml_sections(toml) == {"timer": {"beep_duration_ms": 10}}
