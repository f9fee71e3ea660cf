"""Settings for one prodtimer invocation: CLI flags, env vars, and TOML.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``PRODTIMER_*`` prefix (``__`` for nested sections)
  3. TOML file: ``prodtimer.toml`` found by :func:`find_config`
  4. Code defaults from the section models
"""

from __future__ import annotations

import logging
import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from prodtimer.config.discovery import find_config, user_app_dir
from prodtimer.config.models import StorageConfig, TimerConfig
from prodtimer.infrastructure.config_store import STORE_FILENAME

logger = logging.getLogger(__name__)

TOML_SECTIONS = ("timer", "storage")

# Set by TimerSettings.from_cli for the duration of one construction.
_toml_path: ContextVar[Path | None] = ContextVar("prodtimer_toml_path", default=None)


def load_toml_sections(toml_path: Path) -> dict[str, Any]:
    """Parse *toml_path* and keep the ``[timer]`` and ``[storage]`` tables.

    Other top-level keys are logged and dropped. A relative
    ``storage.data_dir`` is resolved against the file's directory.

    Raises:
        click.ClickException: the file is not valid TOML.
    """
    try:
        document = tomllib.loads(toml_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {toml_path}: {exc}"
        raise click.ClickException(msg) from exc

    for key in sorted(set(document) - set(TOML_SECTIONS)):
        logger.warning("Ignoring unknown key %r in %s", key, toml_path)
    sections = {key: document[key] for key in TOML_SECTIONS if key in document}

    storage = sections.get("storage")
    if isinstance(storage, dict) and isinstance(storage.get("data_dir"), str):
        data_dir = Path(storage["data_dir"]).expanduser()
        if not data_dir.is_absolute():
            data_dir = toml_path.parent / data_dir
        sections["storage"] = {**storage, "data_dir": data_dir}
    return sections


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by :func:`load_toml_sections`."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._sections = load_toml_sections(toml_path) if toml_path else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._sections.get(field_name), field_name, field_name in self._sections

    def __call__(self) -> dict[str, Any]:
        return dict(self._sections)


class TimerSettings(BaseSettings):
    """Frozen settings for the whole CLI, stored on the Click context.

    Attributes:
        config_path: The TOML file in effect, or None when running on defaults.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PRODTIMER_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    timer: TimerConfig = Field(default_factory=TimerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @property
    def data_dir(self) -> Path:
        """Directory holding the timer store and the session logs."""
        return self.storage.data_dir or user_app_dir()

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / self.storage.logs_subdir

    @property
    def store_path(self) -> Path:
        return self.data_dir / STORE_FILENAME

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """CLI kwargs, then env vars, then the TOML file; no dotenv or secrets."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _toml_path.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start_dir: Path | None = None,
        **cli_flags: Any,
    ) -> TimerSettings:
        """Construct settings from a CLI invocation.

        An explicit *config_path* wins over discovery; a path that does not
        exist is ignored. Remaining keyword arguments are CLI flags and
        section overrides.
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(start_dir)

        token = _toml_path.set(toml_path)
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _toml_path.reset(token)
