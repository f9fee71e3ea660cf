"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``prodtimer.toml`` only contains
overrides. A fresh install needs no config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class TimerConfig(BaseModel):
    """[timer] section."""

    model_config = {"frozen": True}

    beep_duration_ms: int = Field(default=2000, ge=0)
    beep_interval_ms: int = Field(default=500, gt=0)
    ms_in_one_second: int = Field(default=1000, gt=0)


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    data_dir: Path | None = None
    logs_subdir: str = "logs"
