"""Configuration loading from TOML files and environment variables."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from brew_services.config.models import ConfigError, ServicesConfig
from brew_services.config.paths import get_config_path

logger = logging.getLogger(__name__)

# Environment variable -> config key
ENV_OVERRIDES = {
    "BREW_SERVICES_NAMESPACE": "namespace",
    "BREW_SERVICES_LAUNCHCTL": "launchctl",
    "BREW_SERVICES_LOG_LEVEL": "log_level",
}


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("brew-services.toml"),  # Current directory
        get_config_path(),  # ~/.brew-services/config.toml (or BREW_SERVICES_HOME)
    ]


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment overrides on top of file values."""
    for env_var, key in ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            config[key] = value.upper() if key == "log_level" else value
    return config


def load_config(path: Path | None = None) -> ServicesConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations
            and falls back to defaults when none exists.

    Returns:
        Validated ServicesConfig instance.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        logger.debug("Loading config from %s", config_path)
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _apply_env_overrides(raw_config)

    try:
        return ServicesConfig.model_validate(raw_config)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {details}") from e
