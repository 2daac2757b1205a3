"""Gateway to the launchctl binary.

This is the only module that talks to launchd. Every operation reports success
through the exit status; stdout is parsed only for enumeration and PID lookup,
both of which degrade to "nothing"/"unknown" instead of raising.

``launchctl list`` output format (one service per line, tab-separated)::

    PID     Status  Label
    1234    0       homebrew.mxcl.widget
    -       0       homebrew.mxcl.ghost
"""

import asyncio
import logging
from pathlib import Path

from brew_services.config.models import DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)

# Exit status reported when the binary cannot be spawned
SPAWN_FAILED = 127


class Launchctl:
    """Async wrapper around the launchctl commands used for services."""

    def __init__(
        self, binary: str = "launchctl", namespace: str = DEFAULT_NAMESPACE
    ):
        self.binary = binary
        self.namespace = namespace

    async def _run_launchctl(self, *args: str) -> tuple[int, str, str]:
        """Run launchctl command."""
        logger.debug("Running %s %s", self.binary, " ".join(args))
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not run %s: %s", self.binary, e)
            return SPAWN_FAILED, "", str(e)
        stdout, stderr = await proc.communicate()
        returncode = proc.returncode or 0
        out = stdout.decode(errors="replace")
        err = stderr.decode(errors="replace")
        if returncode != 0:
            logger.debug("%s exited with %d: %s", args[0], returncode, err.strip())
        return returncode, out, err

    async def _list_entries(self) -> list[tuple[str, str]]:
        """(pid field, label) pairs for services in our namespace."""
        returncode, stdout, _ = await self._run_launchctl("list")
        if returncode != 0:
            return []

        prefix = f"{self.namespace}."
        entries = []
        for line in stdout.splitlines():
            fields = line.split()
            if len(fields) < 2:
                continue
            label = fields[-1]
            if label.startswith(prefix) and len(label) > len(prefix):
                entries.append((fields[0], label))
        return entries

    async def list_labels(self) -> set[str]:
        """Labels of loaded services in our namespace."""
        return {label for _, label in await self._list_entries()}

    async def pid_of(self, label: str) -> int | None:
        """PID of a loaded service, or None if not loaded or not running."""
        for pid, entry_label in await self._list_entries():
            if entry_label == label:
                return int(pid) if pid.isdigit() else None
        return None

    async def load(self, path: Path) -> bool:
        """Register a plist with launchd."""
        returncode, _, _ = await self._run_launchctl("load", "-w", str(path))
        return returncode == 0

    async def unload(self, path: Path) -> bool:
        """Unregister a plist from launchd."""
        returncode, _, _ = await self._run_launchctl("unload", "-w", str(path))
        return returncode == 0

    async def remove(self, label: str) -> bool:
        """Remove a job by label (when there is no plist to unload)."""
        returncode, _, _ = await self._run_launchctl("remove", label)
        return returncode == 0
