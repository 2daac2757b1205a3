"""Descriptor (plist) files in a launchd scope directory.

Writes are atomic via tempfile + fsync + os.replace(), so launchd never sees a
partially written plist.
"""

import logging
import os
import tempfile
from pathlib import Path

from brew_services.context import ExecutionContext

logger = logging.getLogger(__name__)

PLIST_SUFFIX = ".plist"


class DescriptorStore:
    """Reads and writes plist files in a single scope directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    @classmethod
    def for_context(cls, context: ExecutionContext) -> "DescriptorStore":
        return cls(context.scope_path)

    def path_for(self, label: str) -> Path:
        """Destination path of the plist for ``label``."""
        return self.directory / f"{label}{PLIST_SUFFIX}"

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def write(self, path: Path, content: str) -> None:
        """Atomically write ``content`` to ``path``, replacing any old file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp, 0o644)
            Path(tmp).replace(path)
        except BaseException:
            try:
                Path(tmp).unlink()
            except OSError:
                pass
            raise
        logger.debug("Wrote plist %s", path)

    def remove(self, path: Path) -> bool:
        """Delete a plist if present.

        Failures other than a missing file are logged and swallowed.

        Returns:
            True if a file was deleted.
        """
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not remove plist %s: %s", path, e)
            return False
        logger.debug("Removed plist %s", path)
        return True

    def labels(self, namespace: str) -> list[str]:
        """Labels of all plists in the directory that belong to ``namespace``."""
        if not self.directory.is_dir():
            return []
        return sorted(
            path.name[: -len(PLIST_SUFFIX)]
            for path in self.directory.glob(f"{namespace}.*{PLIST_SUFFIX}")
            if path.is_file()
        )
