"""Shared console utilities for CLI commands."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Shared console instance for all CLI commands
console = Console()


def _emit(prefix: str, msg: str) -> None:
    # soft_wrap keeps long paths on one line
    console.print(f"{prefix} {escape(msg)}", highlight=False, soft_wrap=True)


def error(msg: str) -> None:
    """Print an error message in red."""
    _emit("[red]Error:[/red]", msg)


def warning(msg: str) -> None:
    """Print a warning message in yellow."""
    _emit("[yellow]Warning:[/yellow]", msg)


def success(msg: str) -> None:
    """Print a success message in green."""
    _emit("[green]==>[/green]", msg)


def info(msg: str) -> None:
    """Print an info message in cyan."""
    _emit("[cyan]==>[/cyan]", msg)


def plain(msg: str) -> None:
    """Print a message without markup processing."""
    console.print(msg, markup=False, highlight=False, soft_wrap=True)


def create_table(
    title: str | None,
    columns: list[tuple[str, str | dict]],
) -> Table:
    """Create a styled table with consistent formatting.

    Args:
        title: Table title.
        columns: List of (name, style) or (name, kwargs_dict) tuples.

    Returns:
        Configured Rich Table.
    """
    table = Table(title=title)
    for name, style_or_kwargs in columns:
        if isinstance(style_or_kwargs, dict):
            table.add_column(name, **style_or_kwargs)
        else:
            table.add_column(name, style=style_or_kwargs)
    return table
