"""Utilities for loading the review console settings template."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_SETTINGS_PATH = Path("config/review.yml")

# Environment overrides win over the YAML file
ENV_OVERRIDES = {
    "HR_REVIEW_API_URL": "api_base_url",
    "HR_REVIEW_API_TOKEN": "api_token",
}


@dataclass(slots=True)
class ReviewSettings:
    """Connection, navigation and export defaults for one operator."""

    api_base_url: str = "http://127.0.0.1:8000"
    api_token: str | None = None
    request_timeout_s: float = 10.0
    primary_channel: str = "heart_rate"
    axis_padding: float = 0.05  # Fraction of the visible span added on each side
    timeline_zoom_points: int = 10
    export_delimiter: str = ","
    export_dir: str = "exports"
    chart_height: int = 600
    log_level: str = "INFO"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Cast YAML scalars to the type of the default value."""

    if value is None:
        return None if name == "api_token" else default
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def settings_from_mapping(data: Mapping[str, Any]) -> ReviewSettings:
    """Merge a mapping onto the defaults, ignoring unknown keys."""

    defaults = ReviewSettings()
    values: dict[str, Any] = {}
    for entry in fields(ReviewSettings):
        if entry.name not in data:
            continue
        values[entry.name] = _coerce(entry.name, data[entry.name], getattr(defaults, entry.name))
    return ReviewSettings(**values)


def _apply_env(settings: ReviewSettings) -> ReviewSettings:
    for env_name, attr in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            setattr(settings, attr, value)
    return settings


def load_settings(path: Path | None = None, *, strict: bool = False) -> ReviewSettings:
    """Read the YAML settings file and merge it onto the defaults."""

    source = path or DEFAULT_SETTINGS_PATH
    if not source.exists():
        if strict:
            raise FileNotFoundError(f"Settings file not found: {source}")
        return _apply_env(ReviewSettings())

    data = yaml.safe_load(source.read_text(encoding="utf-8"))
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid settings format: {source}")

    return _apply_env(settings_from_mapping(data))


def save_settings(settings: ReviewSettings, path: Path | None = None) -> Path:
    """Write settings to YAML, creating the parent folder if needed."""

    target = path or DEFAULT_SETTINGS_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_dict(), f, default_flow_style=False, allow_unicode=True)
    return target


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "ReviewSettings",
    "load_settings",
    "save_settings",
    "settings_from_mapping",
]
