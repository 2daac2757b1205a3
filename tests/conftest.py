"""Shared test fixtures and factories."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from brew_services.config.models import DEFAULT_NAMESPACE, ServicesConfig
from brew_services.context import ExecutionContext
from brew_services.registry import PackageRegistry
from brew_services.service.manager import ServicesManager
from brew_services.service.store import DescriptorStore
from brew_services.service.template import PlistRenderer

WIDGET_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
  <key>Label</key>
  <string>com.example.impostor</string>
  <key>ProgramArguments</key>
  <array>
    <string>{{bin}}/widgetd</string>
    <string>--data={{var}}/widget</string>
  </array>
  <key>RunAtLoad</key>
  <true/>
</dict>
</plist>
"""


# =============================================================================
# Fake launchd
# =============================================================================


class FakeLaunchctl:
    """In-memory stand-in for the launchctl gateway.

    ``fail`` holds operation names (load, unload, remove) that should report a
    non-zero exit status. ``remove_delay`` is how many list calls a removed
    label stays visible, mimicking launchd taking a while to drop a job.
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace
        self.loaded: dict[str, int | None] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail: set[str] = set()
        self.remove_delay = 0
        self._lingering: dict[str, int] = {}
        self._next_pid = 100

    def register(self, label: str, pid: int | None = None) -> None:
        self.loaded[label] = pid

    def mutations(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] != "list"]

    async def list_labels(self) -> set[str]:
        self.calls.append(("list", ""))
        labels = set(self.loaded)
        for label, remaining in list(self._lingering.items()):
            if remaining <= 0:
                del self._lingering[label]
                continue
            self._lingering[label] = remaining - 1
            labels.add(label)
        return labels

    async def pid_of(self, label: str) -> int | None:
        return self.loaded.get(label)

    async def load(self, path: Path) -> bool:
        self.calls.append(("load", str(path)))
        if "load" in self.fail:
            return False
        self._next_pid += 1
        self.loaded[path.name.removesuffix(".plist")] = self._next_pid
        return True

    async def unload(self, path: Path) -> bool:
        self.calls.append(("unload", str(path)))
        if "unload" in self.fail:
            return False
        self.loaded.pop(path.name.removesuffix(".plist"), None)
        return True

    async def remove(self, label: str) -> bool:
        self.calls.append(("remove", label))
        if "remove" in self.fail:
            return False
        self.loaded.pop(label, None)
        if self.remove_delay:
            self._lingering[label] = self.remove_delay
        return True


# =============================================================================
# Package registry
# =============================================================================


def write_formula(
    root: Path,
    name: str,
    *,
    version: str = "1.0",
    installed: bool = True,
    plist: str | None = None,
    plist_url: str | None = None,
    startup_user: str | None = None,
    variables: dict[str, str] | None = None,
) -> Path:
    """Create a formula definition (and keg, if installed) under ``root``."""
    lines = [f'version = "{version}"']
    if startup_user:
        lines.append(f'startup_user = "{startup_user}"')
    if plist is not None:
        lines.append(f"plist = '''\n{plist}'''")
    if plist_url is not None:
        lines.append(f'plist_url = "{plist_url}"')
    if variables:
        lines.append("")
        lines.append("[vars]")
        lines.extend(f'{key} = "{value}"' for key, value in variables.items())

    formula_dir = root / "Formula"
    formula_dir.mkdir(parents=True, exist_ok=True)
    path = formula_dir / f"{name}.toml"
    path.write_text("\n".join(lines) + "\n")

    if installed:
        (root / "Cellar" / name / version).mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def registry_root(tmp_path: Path) -> Path:
    root = tmp_path / "homebrew"
    root.mkdir()
    write_formula(root, "widget", plist=WIDGET_TEMPLATE)
    write_formula(root, "gizmo", plist=WIDGET_TEMPLATE)
    return root


@pytest.fixture
def registry(registry_root: Path) -> PackageRegistry:
    return PackageRegistry(registry_root)


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def context(tmp_path: Path) -> ExecutionContext:
    """Unprivileged context for user 'alice'."""
    home = tmp_path / "home" / "alice"
    home.mkdir(parents=True)
    return ExecutionContext(privileged=False, user="alice", home=home)


@pytest.fixture
def store(context: ExecutionContext) -> DescriptorStore:
    return DescriptorStore.for_context(context)


@pytest.fixture
def launchctl() -> FakeLaunchctl:
    return FakeLaunchctl()


@pytest.fixture
def renderer(context: ExecutionContext) -> PlistRenderer:
    return PlistRenderer(context)


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def services_config() -> ServicesConfig:
    return ServicesConfig(kill_poll_interval=5.0, kill_max_attempts=3)


@pytest.fixture
def manager(
    registry: PackageRegistry,
    context: ExecutionContext,
    store: DescriptorStore,
    launchctl: FakeLaunchctl,
    services_config: ServicesConfig,
    sleep: AsyncMock,
) -> ServicesManager:
    return ServicesManager(
        registry,
        context,
        config=services_config,
        store=store,
        launchctl=launchctl,
        sleep=sleep,
    )


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})
