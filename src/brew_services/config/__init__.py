"""Configuration module."""

from brew_services.config.loader import load_config
from brew_services.config.models import DEFAULT_NAMESPACE, ConfigError, ServicesConfig
from brew_services.config.paths import (
    get_config_path,
    get_registry_root,
    get_scope_path,
    get_services_home,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "ConfigError",
    "ServicesConfig",
    "get_config_path",
    "get_registry_root",
    "get_scope_path",
    "get_services_home",
    "load_config",
]
