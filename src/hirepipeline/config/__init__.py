"""Configuration management utilities."""

from __future__ import annotations

from pathlib import Path

import yaml

from ..schemas.config import AppConfig, load_config


def load_settings(path: str | Path | None) -> AppConfig:
    """Load and validate a YAML settings file; ``None`` yields the defaults."""
    if path is None:
        return AppConfig()
    with Path(path).open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle)
    return load_config(raw if raw is not None else {})


__all__ = ["AppConfig", "load_settings"]
