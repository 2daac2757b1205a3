"""A package viewed as a launchd service."""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from pathlib import Path

from brew_services.config.models import DEFAULT_NAMESPACE
from brew_services.registry import Package
from brew_services.service.base import (
    AlreadyRunningError,
    KillFailedError,
    KillTimeoutError,
    NotRunningError,
    ServiceState,
    StartFailedError,
    StopFailedError,
    TemplateUnavailableError,
)
from brew_services.service.launchctl import Launchctl
from brew_services.service.store import DescriptorStore
from brew_services.service.template import (
    FileTemplate,
    InlineTemplate,
    PlistRenderer,
    RemoteTemplate,
    TemplateSource,
)

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
ProgressFn = Callable[[str], None]


def label_for(name: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Launchd label of the service for package ``name``."""
    return f"{namespace}.{name}"


def name_from_label(value: str, namespace: str = DEFAULT_NAMESPACE) -> str | None:
    """Package name encoded in a label or plist file name, if any."""
    match = re.search(rf"{re.escape(namespace)}\.([^.]+)(\.plist)?\Z", value)
    return match.group(1) if match else None


class Service:
    """Binds a package to its launchd label and plist destination.

    Instances are cheap and short-lived: state is always read from launchd and
    the filesystem, never cached.
    """

    def __init__(
        self,
        package: Package,
        *,
        store: DescriptorStore,
        launchctl: Launchctl,
        renderer: PlistRenderer,
        namespace: str = DEFAULT_NAMESPACE,
        kill_poll_interval: float = 5.0,
        kill_max_attempts: int = 60,
        sleep: SleepFn = asyncio.sleep,
        progress: ProgressFn | None = None,
    ):
        self.package = package
        self.name = package.name
        self.namespace = namespace
        self.label = label_for(package.name, namespace)
        self.store = store
        self.launchctl = launchctl
        self.renderer = renderer
        self.kill_poll_interval = kill_poll_interval
        self.kill_max_attempts = kill_max_attempts
        self._sleep = sleep
        self._progress = progress

    def __repr__(self) -> str:
        return f"Service({self.name!r}, label={self.label!r})"

    def _notify(self, message: str) -> None:
        """Log a status line and pass it to the progress callback, if any."""
        logger.info(message)
        if self._progress is not None:
            self._progress(message)

    @property
    def dest(self) -> Path:
        """Path of the plist in the active scope directory."""
        return self.store.path_for(self.label)

    def dest_exists(self) -> bool:
        return self.store.exists(self.dest)

    async def is_loaded(self) -> bool:
        """Whether launchd currently has this label registered."""
        return self.label in await self.launchctl.list_labels()

    async def pid(self) -> int | None:
        return await self.launchctl.pid_of(self.label)

    async def state(self) -> ServiceState:
        if not await self.is_loaded():
            return ServiceState.STOPPED
        if self.dest_exists():
            return ServiceState.STARTED
        return ServiceState.STALE

    def default_template(self) -> TemplateSource | None:
        """Template declared by the package, if installed.

        Precedence: plist file shipped in the keg, inline template, remote URL.
        """
        if not self.package.installed:
            return None
        plist_path = self.package.plist_path(self.namespace)
        if plist_path.is_file():
            return FileTemplate(plist_path)
        if self.package.plist:
            return InlineTemplate(self.package.plist)
        if self.package.plist_url:
            return RemoteTemplate(self.package.plist_url)
        return None

    async def generate_plist(self, template: TemplateSource | None = None) -> str:
        """Render the plist for this service.

        Raises:
            TemplateUnavailableError: If no template can be resolved.
        """
        source = template or self.default_template()
        if source is None:
            raise TemplateUnavailableError(
                f"Formula '{self.name}' not installed, plist not implemented "
                "or no plist file found"
            )
        return await self.renderer.render(
            source,
            self.package.template_attributes(self.namespace),
            self.label,
            self.package.startup_user,
        )

    async def start(self, template: TemplateSource | None = None) -> str:
        """Render, write and load the plist.

        On a failed load the plist is left in place for inspection.
        """
        if await self.is_loaded():
            raise AlreadyRunningError(f"Service '{self.name}' already started")

        content = await self.generate_plist(template)
        try:
            self.store.write(self.dest, content)
        except OSError as e:
            raise StartFailedError(
                f"Failed to write plist for '{self.name}': {e}"
            ) from e

        if not await self.launchctl.load(self.dest):
            raise StartFailedError(f"Failed to start '{self.name}'")

        logger.info("Loaded %s from %s", self.label, self.dest)
        return f"Successfully started '{self.name}' as {self.label}"

    async def stop(self) -> str:
        """Unload the service and remove its plist.

        A service without a plist (stale) is removed by label instead.
        """
        if not await self.is_loaded():
            # get rid of a leftover plist anyway
            self.store.remove(self.dest)
            raise NotRunningError(f"Service '{self.name}' was not running")

        if self.dest_exists():
            self._notify(f"Stopping '{self.name}'... (might take a while)")
            if not await self.launchctl.unload(self.dest):
                raise StopFailedError(f"Failed to stop '{self.name}'")
            message = f"Successfully stopped '{self.name}' via {self.label}"
        else:
            self._notify(
                f"Stopping stale service '{self.name}'... (might take a while)"
            )
            message = await self.kill()

        self.store.remove(self.dest)
        return message

    async def restart(self) -> str:
        if await self.is_loaded():
            try:
                await self.stop()
            except NotRunningError:
                # unloaded in the meantime; same end state
                pass
        return await self.start()

    async def kill(self) -> str:
        """Remove the job by label and wait until launchd drops it.

        Raises:
            KillFailedError: If launchctl remove fails.
            KillTimeoutError: If the label is still loaded after the last poll.
        """
        if not await self.launchctl.remove(self.label):
            raise KillFailedError(f"Failed to remove '{self.name}', try again?")

        attempts = 0
        while await self.is_loaded():
            if attempts >= self.kill_max_attempts:
                raise KillTimeoutError(
                    f"Service '{self.name}' still loaded after "
                    f"{attempts} status checks"
                )
            attempts += 1
            self._notify(f"  ...checking status of {self.label}")
            await self._sleep(self.kill_poll_interval)

        return f"Successfully stopped '{self.name}' via {self.label}"
