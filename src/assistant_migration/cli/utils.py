"""Output helpers for the CLI and the bridge from click commands to asyncio."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.table import Table

from assistant_migration.cli.context import MigrationContext

T = TypeVar("T")

console = Console()

SIDE_OPTION_CHOICES = click.Choice(["source", "target"], case_sensitive=False)


def _echo(symbol: str, color: str, message: str, err: bool = False) -> None:
    click.secho(f"{symbol} {message}", fg=color, err=err)


def echo_success(message: str) -> None:
    _echo("✓", "green", message)


def echo_error(message: str) -> None:
    _echo("✗", "red", message, err=True)


def echo_warning(message: str) -> None:
    _echo("⚠", "yellow", message)


def echo_info(message: str) -> None:
    _echo("ℹ", "blue", message)


def format_duration(seconds: float) -> str:
    """Render a duration as ``42.0s``, ``3m 5s`` or ``1h 2m 3s``."""
    if seconds < 60:
        return f"{seconds:.1f}s"

    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def print_table(title: str, columns: list[str], rows: Iterable[Iterable[Any]]) -> None:
    """Print rows under ``columns``; ``None`` cells are left blank."""
    table = Table(*columns, title=title)
    for row in rows:
        table.add_row(*("" if cell is None else str(cell) for cell in row))
    console.print(table)


def print_stats(stats: Mapping[str, Any], title: str = "Statistics") -> None:
    """Print a two-column table, ``migrate_all`` keys shown as ``Migrate All``."""
    print_table(
        title,
        ["Metric", "Value"],
        ([key.replace("_", " ").title(), value] for key, value in stats.items()),
    )


def run_with_clients(ctx: MigrationContext, body: Callable[[], Awaitable[T]]) -> T:
    """Run an async command body, closing the service clients on the same loop.

    Clients are closed on success, on error and on Ctrl-C.
    """

    async def runner() -> T:
        try:
            return await body()
        finally:
            await ctx.close_clients()

    return asyncio.run(runner())
