"""Centralized logging configuration for brew-services.

The CLI calls configure_logging() once before dispatching a command.

Logging Levels:
- DEBUG: launchctl invocations, generated plists, config resolution
- INFO: lifecycle transitions (loaded, unloaded, removed)
- WARNING: best-effort failures that do not change the command outcome
- ERROR: failures that affect operation
"""

import logging
import os

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    Converts full module paths to short component names:
    - brew_services.service.launchctl -> service
    - brew_services.registry.registry -> registry
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "brew_services":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "httpx",  # Remote template fetches
    "httpcore",  # httpx dependency
]


def resolve_log_level(level: str | None = None) -> str:
    """Resolve the effective level name from argument or environment."""
    if level is None:
        level = os.environ.get("BREW_SERVICES_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    level = level.upper()
    if level not in LOG_LEVELS:
        return DEFAULT_LOG_LEVEL
    return level


def configure_logging(level: str | None = None, use_rich: bool = True) -> None:
    """Configure logging for brew-services.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses BREW_SERVICES_LOG_LEVEL env var or WARNING.
        use_rich: Use Rich handler for colorful terminal output.
    """
    log_level = getattr(logging, resolve_log_level(level))

    console_handler: logging.Handler
    if use_rich:
        from rich.logging import RichHandler

        console_handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=False,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s | %(levelname)-8s | %(component)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    logging.basicConfig(
        level=log_level,
        handlers=[console_handler],
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
