"""Configuration loading and validation for catalog lens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from catalog_lens.manifest import DEPENDENCY_SECTIONS
from catalog_lens.store import WORKSPACE_FILENAME
from catalog_lens.watcher import DEFAULT_POLL_INTERVAL

DEFAULT_CONFIG_PATH = ".catalog-lens.yaml"


class ConfigError(Exception):
    """Error in catalog lens configuration."""

    def __init__(
        self,
        message: str,
        file: Optional[str] = None,
        error_type: str = "config_invalid",
    ):
        super().__init__(message)
        self.message = message
        self.file = file
        self.error_type = error_type

    def to_json(self) -> dict[str, Any]:
        """Serialize error to JSON format for machine parsing."""
        result: dict[str, Any] = {
            "error": self.error_type,
            "message": self.message,
        }
        if self.file:
            result["file"] = self.file
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.file:
            parts.append(f"file: {self.file}")
        return " | ".join(parts)


@dataclass
class LensConfig:
    """Complete catalog lens configuration."""

    workspace_filename: str = WORKSPACE_FILENAME
    poll_interval: float = DEFAULT_POLL_INTERVAL
    dependency_sections: list[str] = field(default_factory=lambda: list(DEPENDENCY_SECTIONS))
    log_level: str = "WARNING"


def get_default_config() -> LensConfig:
    """Return the default configuration."""
    return LensConfig()


def validate_config(config: LensConfig, config_file: Optional[str] = None) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If configuration is invalid.
    """
    if not isinstance(config.workspace_filename, str) or not config.workspace_filename:
        raise ConfigError("workspace_filename must be a non-empty string", file=config_file)
    if Path(config.workspace_filename).name != config.workspace_filename:
        raise ConfigError(
            f"workspace_filename must be a file name, not a path: {config.workspace_filename}",
            file=config_file,
        )

    if isinstance(config.poll_interval, bool) or not isinstance(config.poll_interval, (int, float)):
        raise ConfigError("poll_interval must be a number", file=config_file)
    if config.poll_interval <= 0:
        raise ConfigError(
            f"poll_interval must be positive, got {config.poll_interval}",
            file=config_file,
        )

    sections = config.dependency_sections
    if not isinstance(sections, list) or not all(isinstance(s, str) for s in sections):
        raise ConfigError("dependency_sections must be a list of strings", file=config_file)

    level = config.log_level
    if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
        raise ConfigError(f"Unknown log_level: {level}", file=config_file)


def load_config(config_path: Path | str) -> LensConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the .catalog-lens.yaml file.

    Returns:
        LensConfig with loaded values merged with defaults.

    Raises:
        ConfigError: If the file exists but contains invalid configuration.
    """
    config_path = Path(config_path)
    config_file = str(config_path)

    defaults = get_default_config()

    if not config_path.exists():
        return defaults

    try:
        content = config_path.read_text()
        if not content.strip():
            return defaults

        data = yaml.safe_load(content)
        if not data:
            return defaults
        if not isinstance(data, dict):
            raise ConfigError(
                "Top-level catalog lens config must be a mapping",
                file=config_file,
            )

    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", file=config_file)
    except OSError as e:
        raise ConfigError(
            f"Cannot read config: {e}",
            file=config_file,
            error_type="config_unreadable",
        )

    config = LensConfig(
        workspace_filename=data.get("workspace_filename", defaults.workspace_filename),
        poll_interval=data.get("poll_interval", defaults.poll_interval),
        dependency_sections=data.get("dependency_sections", defaults.dependency_sections),
        log_level=data.get("log_level", defaults.log_level),
    )

    validate_config(config, config_file)

    return config
