"""Package metadata lookup."""

from brew_services.registry.models import Package, PackageManifest
from brew_services.registry.registry import (
    PackageRegistry,
    UnknownPackageError,
    canonical_name,
)

__all__ = [
    "Package",
    "PackageManifest",
    "PackageRegistry",
    "UnknownPackageError",
    "canonical_name",
]
