"""Service states and lifecycle errors."""

from enum import Enum


class ServiceState(Enum):
    """Observable service state."""

    STARTED = "started"  # registered with launchd, plist present
    STALE = "stale"  # registered with launchd, plist missing
    STOPPED = "stopped"  # not registered


class UsageError(Exception):
    """Wrong arguments for a command."""


class ServiceError(Exception):
    """Base class for per-service lifecycle failures."""


class UnknownServiceError(ServiceError):
    """Name does not resolve to an installed package."""


class TemplateUnavailableError(ServiceError):
    """No plist template could be resolved or materialized."""


class AlreadyRunningError(ServiceError):
    """Service is already registered with launchd."""


class NotRunningError(ServiceError):
    """Service is not registered with launchd."""


class StartFailedError(ServiceError):
    """launchctl load returned a non-zero status."""


class StopFailedError(ServiceError):
    """launchctl unload returned a non-zero status."""


class KillFailedError(ServiceError):
    """launchctl remove returned a non-zero status."""


class KillTimeoutError(ServiceError):
    """Service was still registered after the last status check."""
