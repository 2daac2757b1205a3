"""High-level service management interface."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from brew_services.config import ConfigError, ServicesConfig, load_config
from brew_services.config.paths import get_registry_root
from brew_services.context import ExecutionContext, detect_context
from brew_services.registry import PackageRegistry
from brew_services.service.base import (
    ServiceError,
    ServiceState,
    UnknownServiceError,
    UsageError,
)
from brew_services.service.entity import (
    ProgressFn,
    Service,
    SleepFn,
    name_from_label,
)
from brew_services.service.launchctl import Launchctl
from brew_services.service.store import DescriptorStore
from brew_services.service.template import PlistRenderer, parse_template_argument

logger = logging.getLogger(__name__)


@dataclass
class ServiceListing:
    """One row of ``list`` output."""

    name: str
    label: str
    state: ServiceState | None  # None when the label maps to no known package
    pid: int | None = None
    path: Path | None = None


@dataclass
class ActionResult:
    """Outcome of a lifecycle action on one service."""

    name: str
    success: bool
    message: str


@dataclass
class CleanupReport:
    """What a cleanup pass changed."""

    killed: list[str] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[ActionResult] = field(default_factory=list)

    @property
    def cleaned(self) -> bool:
        return bool(self.killed or self.removed)


class ServicesManager:
    """Maps list/start/stop/restart/cleanup onto services.

    Example:
        manager = create_manager()
        results = await manager.start(["redis"])
        report = await manager.cleanup()
    """

    def __init__(
        self,
        registry: PackageRegistry,
        context: ExecutionContext,
        *,
        config: ServicesConfig | None = None,
        store: DescriptorStore | None = None,
        launchctl: Launchctl | None = None,
        sleep: SleepFn = asyncio.sleep,
        progress: ProgressFn | None = None,
    ):
        self.config = config or ServicesConfig()
        self.registry = registry
        self.context = context
        self.store = store or DescriptorStore.for_context(context)
        self.launchctl = launchctl or Launchctl(
            self.config.launchctl, self.config.namespace
        )
        self.renderer = PlistRenderer(context, fetch_timeout=self.config.fetch_timeout)
        self._sleep = sleep
        # Receives status lines while long operations run
        self.progress = progress

    @property
    def namespace(self) -> str:
        return self.config.namespace

    def resolve(self, name_or_label: str) -> Service | None:
        """Find the service for a package name, label, or plist path.

        Lookup failures yield None; callers decide whether that is fatal.
        """
        package = self.registry.find(name_or_label)
        if package is None:
            name = name_from_label(name_or_label, self.namespace)
            if name is None:
                return None
            package = self.registry.find(name)
            if package is None:
                return None

        return Service(
            package,
            store=self.store,
            launchctl=self.launchctl,
            renderer=self.renderer,
            namespace=self.namespace,
            kill_poll_interval=self.config.kill_poll_interval,
            kill_max_attempts=self.config.kill_max_attempts,
            sleep=self._sleep,
            progress=self.progress,
        )

    def resolve_all(self, names: list[str]) -> list[Service]:
        """Resolve every name before anything is executed.

        Raises:
            UsageError: If no names were given.
            UnknownServiceError: On the first name that does not resolve.
        """
        if not names:
            raise UsageError("requires at least one formula as argument")
        services = []
        for name in names:
            service = self.resolve(name)
            if service is None:
                raise UnknownServiceError(f"Unknown service '{name}'")
            services.append(service)
        return services

    async def list_services(self) -> list[ServiceListing]:
        """Every loaded label in our namespace, classified."""
        listings = []
        for label in sorted(await self.launchctl.list_labels()):
            service = self.resolve(label)
            if service is None:
                listings.append(ServiceListing(name="?", label=label, state=None))
                continue

            has_plist = service.dest_exists()
            listings.append(
                ServiceListing(
                    name=service.name,
                    label=label,
                    state=ServiceState.STARTED if has_plist else ServiceState.STALE,
                    pid=await service.pid(),
                    path=service.dest if has_plist else None,
                )
            )
        return listings

    async def cleanup(self) -> CleanupReport:
        """Kill stale services, then remove plists nobody has loaded."""
        report = CleanupReport()

        for label in sorted(await self.launchctl.list_labels()):
            service = self.resolve(label)
            if service is None:
                logger.info("Service %s not managed by brew-services", label)
                report.skipped.append(label)
                continue
            if service.dest_exists():
                continue

            logger.info("%s is stale, killing service", service.name)
            try:
                await service.kill()
            except ServiceError as e:
                report.failures.append(ActionResult(service.name, False, str(e)))
                continue
            report.killed.append(service.name)
            self._notify(f"{service.name:<15.15} stale => killed service")

        loaded = await self.launchctl.list_labels()
        for label in self.store.labels(self.namespace):
            if label in loaded:
                continue
            path = self.store.path_for(label)
            if self.store.remove(path):
                report.removed.append(path)
                self._notify(f"Removed unused plist {path}")

        return report

    def _notify(self, message: str) -> None:
        logger.info(message)
        if self.progress is not None:
            self.progress(message)

    async def _run_batch(
        self,
        services: list[Service],
        action: Callable[[Service], Awaitable[str]],
    ) -> list[ActionResult]:
        """Apply ``action`` to each service in order, collecting outcomes."""
        results = []
        for service in services:
            try:
                message = await action(service)
            except ServiceError as e:
                logger.debug("%s failed: %s", service.name, e)
                results.append(ActionResult(service.name, False, str(e)))
            else:
                results.append(ActionResult(service.name, True, message))
        return results

    async def start(
        self, names: list[str], template: str | None = None
    ) -> list[ActionResult]:
        """Start services, optionally from a custom template path or URL."""
        services = self.resolve_all(names)
        source = parse_template_argument(template) if template else None
        return await self._run_batch(services, lambda s: s.start(source))

    async def stop(self, names: list[str]) -> list[ActionResult]:
        services = self.resolve_all(names)
        return await self._run_batch(services, lambda s: s.stop())

    async def restart(self, names: list[str]) -> list[ActionResult]:
        services = self.resolve_all(names)
        return await self._run_batch(services, lambda s: s.restart())


def create_manager(
    config: ServicesConfig | None = None, progress: ProgressFn | None = None
) -> ServicesManager:
    """Build a manager for the current process.

    Args:
        config: Loaded configuration; read from disk when omitted.
        progress: Callback for status lines printed while commands run.

    Raises:
        ConfigError: If no package registry root is configured.
    """
    config = config or load_config()
    root = config.prefix or get_registry_root()
    if root is None:
        raise ConfigError(
            "Runtime error: homebrew is required, please set HOMEBREW_PREFIX"
        )
    context = detect_context(root)
    return ServicesManager(
        PackageRegistry(root), context, config=config, progress=progress
    )
