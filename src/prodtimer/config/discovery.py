"""Config file discovery.

Lookup order: ``PRODTIMER_CONFIG`` env var, then a walk-up from the current
directory for ``prodtimer.toml`` (like git finding ``.git/``), then the
per-user app directory.
"""

from __future__ import annotations

import os
from pathlib import Path

import click

APP_NAME = "prodtimer"
CONFIG_FILENAME = "prodtimer.toml"
CONFIG_ENV_VAR = "PRODTIMER_CONFIG"


def user_app_dir() -> Path:
    """Per-user data/config directory (``~/.config/prodtimer`` on Linux)."""
    return Path(click.get_app_dir(APP_NAME))


def find_config(start: Path | None = None) -> Path | None:
    """Return the first ``prodtimer.toml`` found, or None.

    When ``PRODTIMER_CONFIG`` is set it is authoritative: a missing file
    there yields None rather than falling back to discovery.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    user_config = user_app_dir() / CONFIG_FILENAME
    if user_config.is_file():
        return user_config
    return None
