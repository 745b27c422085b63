"""Configuration management for ddiff."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from . import CONFIG_DIR, CONFIG_FILE, DEFAULT_CHUNK_SIZE
from .exceptions import ConfigError


def _default_workers() -> int:
    return os.cpu_count() or 1


class DDiffConfig(BaseModel):
    """Configuration for a ddiff run."""

    version: int = 1
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)
    workers: int = Field(default_factory=_default_workers, ge=1)
    exclude_patterns: list[str] = Field(default_factory=list)


def get_default_config_path() -> Path:
    """Get the per-user config file path."""
    return Path(CONFIG_DIR).expanduser() / CONFIG_FILE


def load_config(config_path: Path | None = None) -> DDiffConfig:
    """Load configuration from a JSON config file.

    Uses the per-user config file when no path is given, and falls back to
    defaults if it doesn't exist. Environment variables override file values.
    """
    explicit = config_path is not None
    config_path = config_path or get_default_config_path()

    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
            config = DDiffConfig.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")
    else:
        config = DDiffConfig()

    return _apply_env_overrides(config)


def save_config(config: DDiffConfig, config_path: Path) -> None:
    """Save configuration to a JSON config file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config.model_dump(), f, indent=2)


def _apply_env_overrides(config: DDiffConfig) -> DDiffConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    # DDIFF_WORKERS
    if workers := os.environ.get("DDIFF_WORKERS"):
        data["workers"] = workers

    # DDIFF_CHUNK_SIZE
    if chunk_size := os.environ.get("DDIFF_CHUNK_SIZE"):
        data["chunk_size"] = chunk_size

    # DDIFF_EXCLUDE (comma separated)
    if exclude := os.environ.get("DDIFF_EXCLUDE"):
        data["exclude_patterns"] = [p.strip() for p in exclude.split(",") if p.strip()]

    try:
        return DDiffConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid environment override: {e}") from e
