"""Directory-backed package registry.

Layout under the registry root (``$HOMEBREW_PREFIX``)::

    Formula/<name>.toml          # package definition
    Cellar/<name>/<version>/     # installed keg
    etc/, var/, opt/<name>       # shared prefix directories
"""

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from brew_services.registry.models import Package, PackageManifest

logger = logging.getLogger(__name__)

FORMULA_DIR = "Formula"
CELLAR_DIR = "Cellar"
MANIFEST_SUFFIX = ".toml"


class UnknownPackageError(Exception):
    """Name does not resolve to a package definition."""


def canonical_name(name: str) -> str:
    """Normalize a package reference to its registry name.

    Accepts plain names, tap-style references (``user/tap/name``) and paths to
    definition files.
    """
    base = name.strip().rstrip("/").rsplit("/", 1)[-1]
    if base.endswith(MANIFEST_SUFFIX):
        base = base[: -len(MANIFEST_SUFFIX)]
    return base.lower()


class PackageRegistry:
    """Resolves package names to metadata from the registry root."""

    def __init__(self, root: Path):
        self.root = root

    @property
    def formula_path(self) -> Path:
        return self.root / FORMULA_DIR

    @property
    def cellar_path(self) -> Path:
        return self.root / CELLAR_DIR

    def manifest_path(self, name: str) -> Path:
        return self.formula_path / f"{name}{MANIFEST_SUFFIX}"

    def get(self, name: str) -> Package:
        """Load a package by name.

        Raises:
            UnknownPackageError: If no valid definition exists.
        """
        name = canonical_name(name)
        if not name:
            raise UnknownPackageError("Empty package name")

        path = self.manifest_path(name)
        if not path.is_file():
            raise UnknownPackageError(f"No available formula for '{name}'")

        try:
            with path.open("rb") as f:
                manifest = PackageManifest.model_validate(tomllib.load(f))
        except (
            OSError,
            UnicodeDecodeError,
            tomllib.TOMLDecodeError,
            ValidationError,
        ) as e:
            logger.warning("Invalid formula definition %s: %s", path, e)
            raise UnknownPackageError(f"Invalid formula '{name}': {e}") from e

        prefix = self.cellar_path / name / manifest.version
        return Package(
            name=name,
            version=manifest.version,
            prefix=prefix,
            homebrew_prefix=self.root,
            installed=prefix.is_dir(),
            startup_user=manifest.startup_user,
            plist=manifest.plist,
            plist_url=manifest.plist_url,
            vars=manifest.vars,
        )

    def find(self, name: str) -> Package | None:
        """Like get(), but returns None for unknown names."""
        try:
            return self.get(name)
        except UnknownPackageError:
            return None
