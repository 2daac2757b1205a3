"""Package metadata models."""

from pathlib import Path

from pydantic import BaseModel, Field


class PackageManifest(BaseModel):
    """On-disk package definition (``Formula/<name>.toml``)."""

    version: str
    startup_user: str | None = None

    # Inline plist template
    plist: str | None = None
    # Remote plist template
    plist_url: str | None = Field(default=None, pattern=r"^https?://.+")

    # Extra template variables, available as {{key}}
    vars: dict[str, str | int | float | bool] = Field(default_factory=dict)


class Package(BaseModel):
    """A package resolved from the registry."""

    name: str
    version: str
    prefix: Path
    homebrew_prefix: Path
    installed: bool
    startup_user: str | None = None
    plist: str | None = None
    plist_url: str | None = None
    vars: dict[str, str | int | float | bool] = Field(default_factory=dict)

    @property
    def opt_prefix(self) -> Path:
        return self.homebrew_prefix / "opt" / self.name

    def plist_name(self, namespace: str) -> str:
        """Launchd label for this package."""
        return f"{namespace}.{self.name}"

    def plist_path(self, namespace: str) -> Path:
        """Conventional location of a plist template shipped with the keg."""
        return self.prefix / f"{self.plist_name(namespace)}.plist"

    def template_attributes(self, namespace: str) -> dict[str, str]:
        """Values available to ``{{name}}`` placeholders in plist templates."""
        attributes = {
            "name": self.name,
            "version": self.version,
            "prefix": str(self.prefix),
            "bin": str(self.prefix / "bin"),
            "sbin": str(self.prefix / "sbin"),
            "lib": str(self.prefix / "lib"),
            "libexec": str(self.prefix / "libexec"),
            "share": str(self.prefix / "share"),
            "include": str(self.prefix / "include"),
            "etc": str(self.homebrew_prefix / "etc"),
            "var": str(self.homebrew_prefix / "var"),
            "opt_prefix": str(self.opt_prefix),
            "homebrew_prefix": str(self.homebrew_prefix),
            "plist_name": self.plist_name(namespace),
            "plist_path": str(self.plist_path(namespace)),
        }
        if self.startup_user:
            attributes["startup_user"] = self.startup_user
        for key, value in self.vars.items():
            if isinstance(value, bool):
                attributes[key] = "true" if value else "false"
            else:
                attributes[key] = str(value)
        return attributes
