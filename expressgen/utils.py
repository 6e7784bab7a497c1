"""Shared console helpers for express-gen.

All user-facing output goes through the Rich consoles defined here: ``console``
for normal output and ``err_console`` (bound to stderr) for errors.  The
scaffolding core never prints; only the command layer calls these helpers.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.rule import Rule
from rich.table import Table

from expressgen import __version__
from expressgen.scaffolder.manifest import ManifestEntry, Scope

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Headers and messages
# ---------------------------------------------------------------------------


def print_banner() -> None:
    """Print the tool banner."""
    console.print()
    console.print(
        Panel.fit(
            "[bold green]express-gen[/bold green] "
            f"[dim]v{__version__}[/dim]\n"
            "Professional Express.js project generator",
            border_style="green",
        )
    )
    console.print()


def print_section(title: str) -> None:
    console.print()
    console.print(Rule(f"[bold cyan]{title}[/bold cyan]", style="cyan"))


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def print_summary_table(data: Mapping[str, object], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_file_table(paths: Iterable[str], title: str = "Files") -> None:
    """Print the project-relative paths that would be generated."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Path")

    for index, path in enumerate(paths, start=1):
        table.add_row(str(index), path)

    console.print(table)
    console.print()


def print_dependency_table(entries: Iterable[ManifestEntry], title: str = "Dependencies") -> None:
    """Print manifest entries grouped by scope, runtime first."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Package")
    table.add_column("Version", style="green")
    table.add_column("Scope", style="dim")

    ordered = sorted(entries, key=lambda e: (e.scope is not Scope.RUNTIME, e.name))
    for entry in ordered:
        table.add_row(entry.name, entry.version, entry.scope.value)

    console.print(table)
    console.print()


def create_progress() -> Progress:
    """Create a Rich progress bar for file generation.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    )
