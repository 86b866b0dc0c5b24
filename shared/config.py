"""
YAML configuration for the admission tooling.

Example admission.yaml:

    log_level: DEBUG
    log_dir: ~/.admission/logs
    log_accepted: true

Lookup: explicit path, else $ADMISSION_CONFIG, else ./admission.yaml if it
exists. ADMISSION_LOG_LEVEL / ADMISSION_LOG_DIR override the file.
The clock drift threshold is a protocol constant and is not configurable here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from shared.log import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("admission.yaml")
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """Raised when the configuration file is missing or invalid."""
    pass


@dataclass
class AdmissionConfig:
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    log_accepted: bool = False      # log accepted messages at DEBUG as well as rejections

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AdmissionConfig:
        """Create config from a parsed YAML mapping, validating known keys"""
        unknown = set(data) - {"log_level", "log_dir", "log_accepted"}
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

        config = cls()
        if "log_level" in data:
            config.log_level = _log_level(data["log_level"])
        if data.get("log_dir") is not None:
            if not isinstance(data["log_dir"], str):
                raise ConfigError("'log_dir' must be a string")
            config.log_dir = Path(data["log_dir"]).expanduser()
        if "log_accepted" in data:
            if not isinstance(data["log_accepted"], bool):
                raise ConfigError("'log_accepted' must be true or false")
            config.log_accepted = data["log_accepted"]
        return config


def _log_level(value: Any) -> str:
    if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
        raise ConfigError(f"'log_level' must be one of {sorted(_LOG_LEVELS)}")
    return value.upper()


def load_config(path: Optional[Path] = None) -> AdmissionConfig:
    """
    Load configuration from YAML and apply environment overrides.

    Raises:
        ConfigError: explicit file missing, unreadable, or not a mapping
    """
    explicit = path is not None or bool(os.getenv("ADMISSION_CONFIG"))
    config_path = Path(path or os.getenv("ADMISSION_CONFIG") or DEFAULT_CONFIG_PATH).expanduser()

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug("No %s found; using defaults", config_path)
        config = AdmissionConfig()
    else:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Error reading {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        config = AdmissionConfig.from_dict(data)
        logger.debug("Loaded config from %s", config_path)

    # Environment overrides
    env_level = os.getenv("ADMISSION_LOG_LEVEL")
    if env_level:
        config.log_level = _log_level(env_level)
    env_dir = os.getenv("ADMISSION_LOG_DIR")
    if env_dir:
        config.log_dir = Path(env_dir).expanduser()

    return config
