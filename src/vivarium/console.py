"""Console utilities for vivarium CLI."""

import os
from typing import Any

from rich.console import Console

# stdout for results, stderr for errors and debug output
console = Console()
error_console = Console(stderr=True)

# Debug mode - enabled by VIVARIUM_DEBUG environment variable
DEBUG = os.getenv("VIVARIUM_DEBUG", "").lower() in ("1", "true", "yes")


def debug(message: str, **kwargs: Any) -> None:
    """Print debug message if DEBUG mode is enabled.

    Args:
        message: Message to print
        **kwargs: Additional arguments for console.print
    """
    if DEBUG:
        error_console.print(f"[dim][DEBUG][/dim] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print a top-level progress line prefixed with "info"."""
    console.print(f"[bold blue]info[/bold blue] {message}", **kwargs)


def step(message: str, **kwargs: Any) -> None:
    """Print an indented step of a larger operation."""
    console.print(f"[bold cyan]  ->[/bold cyan] {message}", **kwargs)


def dim(message: str, **kwargs: Any) -> None:
    """Print a secondary, dimmed message."""
    console.print(f"[dim]     {message}[/dim]", **kwargs)


def success(message: str, **kwargs: Any) -> None:
    """Print a green completion message."""
    console.print(f"[green]{message}[/green]", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a yellow warning. Warnings never abort a command."""
    console.print(f"[yellow]{message}[/yellow]", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print error message in red to stderr.

    Args:
        message: Message to print
        **kwargs: Additional arguments for console.print
    """
    error_console.print(f"[red]Error:[/red] {message}", **kwargs)
