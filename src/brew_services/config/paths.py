"""Centralized path management for brew-services.

Tool state (config) lives under a single base directory, overridable with
the BREW_SERVICES_HOME environment variable. Service descriptors live in one of
two launchd scope directories, chosen by privilege:

- root: /Library/LaunchDaemons (started at boot)
- user: ~/Library/LaunchAgents (started at login)
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "BREW_SERVICES_HOME"
PREFIX_ENV_VAR = "HOMEBREW_PREFIX"

BOOT_PATH = Path("/Library/LaunchDaemons")


@lru_cache(maxsize=1)
def get_services_home() -> Path:
    """Get the base directory for brew-services data.

    Resolution order:
    1. BREW_SERVICES_HOME environment variable (if set)
    2. Platform default (~/.brew-services)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".brew-services"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_services_home() / "config.toml"


def get_registry_root() -> Path | None:
    """Get the package registry root from the hosting environment."""
    if env_prefix := os.environ.get(PREFIX_ENV_VAR):
        return Path(env_prefix).expanduser()
    return None


def get_boot_path() -> Path:
    """Directory for services started at boot (root only)."""
    return BOOT_PATH


def get_user_path(home: Path) -> Path:
    """Directory for services started at login."""
    return home / "Library" / "LaunchAgents"


def get_scope_path(privileged: bool, home: Path) -> Path:
    """Get the descriptor directory for a privilege scope.

    Args:
        privileged: Whether the tool runs as root.
        home: Home directory of the invoking user.

    Returns:
        The boot path when privileged, otherwise the user's LaunchAgents.
    """
    if privileged:
        return get_boot_path()
    return get_user_path(home)
