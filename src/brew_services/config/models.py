"""Configuration models using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_NAMESPACE = "homebrew.mxcl"


class ConfigError(Exception):
    """Configuration error."""

    pass


class ServicesConfig(BaseModel):
    """Root configuration model.

    Every field has a default, so a missing config file is not an error.
    """

    # Package registry root; falls back to $HOMEBREW_PREFIX
    prefix: Path | None = None

    # Reserved label prefix for services managed by this tool
    namespace: str = Field(
        default=DEFAULT_NAMESPACE, pattern=r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)*$"
    )

    launchctl: str = "launchctl"

    # Stale service removal polls launchd until the label disappears
    kill_poll_interval: float = Field(default=5.0, ge=0)
    kill_max_attempts: int = Field(default=60, ge=1)

    # Timeout for fetching remote plist templates
    fetch_timeout: float = Field(default=30.0, gt=0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
