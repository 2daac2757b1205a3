"""Execution context for a single invocation.

The privilege flag and the resolved user are detected once and passed to every
component that depends on them, so path resolution and plist rendering are
pure functions of their inputs.
"""

import getpass
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from brew_services.config.paths import get_scope_path

logger = logging.getLogger(__name__)

ROOT_USER = "root"


@dataclass(frozen=True)
class ExecutionContext:
    """Who is running the tool and with which privileges."""

    privileged: bool
    user: str
    home: Path

    @property
    def scope_path(self) -> Path:
        """Directory holding descriptors for this context."""
        return get_scope_path(self.privileged, self.home)

    @property
    def scope_name(self) -> str:
        """Human-readable scope name for messages."""
        return "root" if self.privileged else "user-level"

    def abbreviate(self, path: Path) -> str:
        """Render a path with the home directory shortened to ``~``."""
        text = str(path)
        home = str(self.home)
        if home and home != "/" and text.startswith(home):
            return "~" + text[len(home) :]
        return text


def _installation_owner(registry_root: Path | None) -> str | None:
    """Owner of the registry root, i.e. the user the installation belongs to."""
    if registry_root is None:
        return None
    try:
        return registry_root.owner()
    except (OSError, KeyError, NotImplementedError):
        logger.debug("Could not resolve owner of %s", registry_root)
        return None


def detect_context(registry_root: Path | None = None) -> ExecutionContext:
    """Detect the execution context of the current process.

    Args:
        registry_root: Package registry root, whose owner is the preferred
            user identity.

    Returns:
        ExecutionContext for this process.
    """
    privileged = os.geteuid() == 0
    user = _installation_owner(registry_root) or getpass.getuser()
    context = ExecutionContext(privileged=privileged, user=user, home=Path.home())
    logger.debug(
        "Execution context: privileged=%s user=%s scope=%s",
        context.privileged,
        context.user,
        context.scope_path,
    )
    return context
