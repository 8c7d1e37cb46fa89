"""Engine settings loaded from the workspace ``config.json``."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from chrono_git.errors import ConfigurationError

LOG_LEVEL_ENV = "CHRONO_GIT_LOG_LEVEL"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EngineSettings(BaseModel):
    """Tunable defaults for the engine and the command line."""

    default_author: str = "Chrono-Coder"
    default_branch: str = "main"
    log_level: str = "WARNING"
    max_suggestion_distance: int = 2

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}. Must be one of {list(VALID_LOG_LEVELS)}")
        return value

    @field_validator("default_author", "default_branch")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("max_suggestion_distance")
    @classmethod
    def _check_distance(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_suggestion_distance must be non-negative")
        return value


def load_settings(config_file: Optional[Path] = None) -> EngineSettings:
    """Read settings from ``config_file``; missing file means defaults.

    ``CHRONO_GIT_LOG_LEVEL`` overrides the file's log level.
    """
    data = {}
    if config_file is not None and Path(config_file).exists():
        try:
            data = json.loads(Path(config_file).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read {config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{config_file} must contain a JSON object")

    env_level = os.environ.get(LOG_LEVEL_ENV)
    if env_level:
        data["log_level"] = env_level

    try:
        return EngineSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def save_settings(settings: EngineSettings, config_file: Path) -> None:
    Path(config_file).write_text(settings.model_dump_json(indent=2), encoding="utf-8")
