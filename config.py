"""
config.py

Typed configuration loading and validation for notefall.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)
- Gameplay timing constants are fixed in gameplay_models and are not configurable

Config file location
- If NOTEFALL_CONFIG_PATH is set, that file is used (and must exist).
- Otherwise notefall searches these paths in order and uses the first one that exists:
  1) ./notefall_config.json (current working directory)
  2) <user config dir>/notefall/notefall_config.json
- If none exists, built-in defaults are used.

Example config file (notefall_config.json)
{
  "chart": {
    "path": "Charts/SleepingBeauty.csv",
    "seed": 1
  },
  "input": {
    "lane_keys": {"green": "H", "red": "J", "blue": "K", "yellow": "L"}
  },
  "window": {
    "width": 200,
    "height": 400,
    "frame_interval_ms": 4
  },
  "logging": {
    "level": "INFO"
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

_LANE_NAMES = ("green", "red", "blue", "yellow")
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ChartConfig(BaseModel):
    path: Optional[str] = Field(default=None, description="CSV chart file. Empty means the built-in demo chart.")
    seed: int = Field(default=1, ge=0, description="Initial seed for filler note generation.")

    @field_validator("path")
    @classmethod
    def normalize_path(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class InputConfig(BaseModel):
    lane_keys: Dict[str, str] = Field(
        default_factory=lambda: {"green": "H", "red": "J", "blue": "K", "yellow": "L"},
        description="Lane name -> Qt key name (Qt.Key suffix, for example H or Left).",
    )

    @field_validator("lane_keys")
    @classmethod
    def validate_lane_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        normalized = {str(lane).strip().lower(): str(key).strip() for lane, key in value.items()}
        if set(normalized.keys()) != set(_LANE_NAMES):
            raise ValueError("lane_keys must map exactly: green, red, blue, yellow")
        if any(not key for key in normalized.values()):
            raise ValueError("lane_keys values must be non-empty key names")
        if len(set(normalized.values())) != len(_LANE_NAMES):
            raise ValueError("lane_keys must use four distinct keys")
        return normalized


class WindowConfig(BaseModel):
    width: int = Field(default=200, ge=100, le=4000, description="Playfield width in pixels.")
    height: int = Field(default=400, ge=400, le=4000, description="Playfield height in pixels.")
    frame_interval_ms: int = Field(default=4, ge=1, le=100, description="How often the harness pumps the event loop.")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="CRITICAL, ERROR, WARNING, INFO or DEBUG")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        if normalized == "WARN":
            normalized = "WARNING"
        if normalized not in _LOG_LEVELS:
            raise ValueError("level must be one of: CRITICAL, ERROR, WARNING, INFO, DEBUG")
        return normalized


class AppConfig(BaseModel):
    chart: ChartConfig = Field(default_factory=ChartConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    window: WindowConfig = Field(default_factory=WindowConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("notefall", appauthor=False))
    return [
        Path.cwd() / "notefall_config.json",
        config_directory / "notefall_config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("NOTEFALL_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - NOTEFALL_CHART_PATH
    - NOTEFALL_SEED
    - NOTEFALL_FRAME_INTERVAL_MS
    - NOTEFALL_LOG_LEVEL
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    chart_section = ensure_nested(updated_config, "chart")
    window_section = ensure_nested(updated_config, "window")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            return

    override_string("NOTEFALL_CHART_PATH", chart_section, "path")
    override_int("NOTEFALL_SEED", chart_section, "seed")
    override_int("NOTEFALL_FRAME_INTERVAL_MS", window_section, "frame_interval_ms")
    override_string("NOTEFALL_LOG_LEVEL", logging_section, "level")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict: Dict[str, Any] = {}
    if resolved_path is not None:
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "defaults and environment"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(), ensure_ascii=False, indent=2)


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": json.loads(to_json(config)),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
