"""launchd service management.

Example:
    from brew_services.service import create_manager

    manager = create_manager()
    results = await manager.start(["redis"])
    listings = await manager.list_services()
"""

from brew_services.service.base import (
    AlreadyRunningError,
    KillFailedError,
    KillTimeoutError,
    NotRunningError,
    ServiceError,
    ServiceState,
    StartFailedError,
    StopFailedError,
    TemplateUnavailableError,
    UnknownServiceError,
    UsageError,
)
from brew_services.service.entity import Service, label_for, name_from_label
from brew_services.service.launchctl import Launchctl
from brew_services.service.manager import (
    ActionResult,
    CleanupReport,
    ServiceListing,
    ServicesManager,
    create_manager,
)
from brew_services.service.store import DescriptorStore
from brew_services.service.template import (
    FileTemplate,
    InlineTemplate,
    PlistRenderer,
    RemoteTemplate,
    TemplateSource,
    parse_template_argument,
)

__all__ = [
    "ActionResult",
    "AlreadyRunningError",
    "CleanupReport",
    "DescriptorStore",
    "FileTemplate",
    "InlineTemplate",
    "KillFailedError",
    "KillTimeoutError",
    "Launchctl",
    "NotRunningError",
    "PlistRenderer",
    "RemoteTemplate",
    "Service",
    "ServiceError",
    "ServiceListing",
    "ServiceState",
    "ServicesManager",
    "StartFailedError",
    "StopFailedError",
    "TemplateSource",
    "TemplateUnavailableError",
    "UnknownServiceError",
    "UsageError",
    "create_manager",
    "label_for",
    "name_from_label",
    "parse_template_argument",
]
