"""Main CLI application."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from brew_services.cli.console import (
    console,
    create_table,
    error,
    info,
    plain,
    success,
    warning,
)
from brew_services.config.paths import get_boot_path, get_user_path

BIN = "brew services"

COMMAND_ALIASES = {
    "cleanup": "cleanup",
    "clean": "cleanup",
    "cl": "cleanup",
    "rm": "cleanup",
    "list": "list",
    "ls": "list",
    "restart": "restart",
    "relaunch": "restart",
    "reload": "restart",
    "r": "restart",
    "start": "start",
    "launch": "start",
    "load": "start",
    "s": "start",
    "l": "start",
    "stop": "stop",
    "unload": "stop",
    "terminate": "stop",
    "term": "stop",
    "t": "stop",
    "u": "stop",
}

HELP_ARGS = {"help", "--help", "-h"}

app = typer.Typer(
    name="brew-services",
    help="Start and stop formulae via launchctl",
    add_completion=False,
)


def print_usage() -> None:
    """Print usage text."""
    plain(f"usage: [sudo] {BIN} [--help] <command> [<formula>...]")
    plain("")
    plain(
        "Small wrapper around 'launchctl' for supported formulae, "
        "commands available:"
    )
    plain("   cleanup Get rid of stale services and unused plists")
    plain(f"   list    List all services managed by '{BIN}'")
    plain("   restart Gracefully restart selected services")
    plain("   start   Start selected services")
    plain("   stop    Stop selected services")
    plain("")
    plain("Options, sudo and paths:")
    plain("")
    plain(f"  sudo   When run as root, operates on {get_boot_path()} (run at boot!)")
    plain(f"  Run at boot:  {get_boot_path()}")
    plain(f"  Run at login: {get_user_path(Path('~'))}")
    plain("")


def normalize_args(args: list[str]) -> list[str]:
    """Lower-case arguments, except paths and URLs."""
    return [arg if "/" in arg else arg.lower() for arg in args]


def is_template_arg(value: str) -> bool:
    """Whether a trailing ``start`` argument names a template, not a formula.

    Only a trailing argument after at least one formula is considered, and
    only if it contains a slash (a path or URL).
    """
    return "/" in value


def check_no_formulae(names: list[str]) -> None:
    from brew_services.service import UsageError

    if names:
        raise UsageError("doesn't expect any formulae")


def check_requires_formulae(names: list[str]) -> None:
    from brew_services.service import UsageError

    if not names:
        raise UsageError("requires at least one formula as argument")


def _report(results) -> None:
    """Print per-service outcomes; exit 1 if any failed."""
    failed = False
    for result in results:
        if result.success:
            success(result.message)
        else:
            error(result.message)
            failed = True
    if failed:
        raise typer.Exit(1)


def _list(manager, names: list[str]) -> None:
    from brew_services.service import ServiceState

    listings = asyncio.run(manager.list_services())
    if not listings:
        warning(
            f"No {manager.context.scope_name} services controlled by '{BIN}' "
            "running..."
        )
        return

    table = create_table(
        None,
        [
            ("Name", {"no_wrap": True}),
            ("Status", ""),
            ("PID", ""),
            ("Plist path", {"overflow": "fold"}),
        ],
    )
    state_colors = {
        ServiceState.STARTED: "white",
        ServiceState.STALE: "red",
    }
    for listing in listings:
        if listing.state is None:
            table.add_row("?", "[red]unknown[/red]", "-", listing.label)
            continue
        color = state_colors.get(listing.state, "white")
        table.add_row(
            listing.name,
            f"[{color}]{listing.state.value}[/{color}]",
            str(listing.pid) if listing.pid else "-",
            manager.context.abbreviate(listing.path) if listing.path else listing.label,
        )
    console.print(table)


def _cleanup(manager, names: list[str]) -> None:
    report = asyncio.run(manager.cleanup())

    for label in report.skipped:
        warning(f"Service {label} not managed by '{BIN}' => skipping")
    for failure in report.failures:
        error(failure.message)

    if not report.cleaned:
        info(f"All {manager.context.scope_name} services OK, nothing cleaned...")
    if report.failures:
        raise typer.Exit(1)


def _start(manager, names: list[str]) -> None:
    template = None
    if len(names) > 1 and is_template_arg(names[-1]):
        template = names[-1]
        names = names[:-1]
    _report(asyncio.run(manager.start(names, template)))


def _stop(manager, names: list[str]) -> None:
    _report(asyncio.run(manager.stop(names)))


def _restart(manager, names: list[str]) -> None:
    _report(asyncio.run(manager.restart(names)))


COMMANDS = {
    "cleanup": (_cleanup, check_no_formulae),
    "list": (_list, check_no_formulae),
    "restart": (_restart, check_requires_formulae),
    "start": (_start, check_requires_formulae),
    "stop": (_stop, check_requires_formulae),
}


@app.command(
    context_settings={"ignore_unknown_options": True},
    add_help_option=False,
)
def main(
    args: Annotated[
        list[str] | None,
        typer.Argument(help="Command followed by formula names", show_default=False),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Debug logging, including generated plists",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
        ),
    ] = None,
) -> None:
    """Integrate formulae with launchctl."""
    args = args or []
    if not args or HELP_ARGS.intersection(args):
        print_usage()
        return

    args = normalize_args(args)
    cmd, names = args[0], args[1:]
    command = COMMAND_ALIASES.get(cmd)
    if command is None:
        error(f"Unknown command '{cmd}'")
        print_usage()
        raise typer.Exit(1)

    from brew_services.config import ConfigError, load_config
    from brew_services.logging import configure_logging
    from brew_services.service import ServiceError, UsageError

    handler, check_args = COMMANDS[command]
    try:
        check_args(names)
    except UsageError as e:
        error(f"{BIN} {cmd} {e}")
        print_usage()
        raise typer.Exit(1) from None

    try:
        services_config = load_config(config)
        configure_logging("DEBUG" if verbose else services_config.log_level)

        from brew_services import service

        manager = service.create_manager(services_config, progress=plain)
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1) from None

    try:
        handler(manager, names)
    except UsageError as e:
        error(f"{BIN} {cmd} {e}")
        print_usage()
        raise typer.Exit(1) from None
    except ServiceError as e:
        error(str(e))
        raise typer.Exit(1) from None
