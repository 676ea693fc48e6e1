"""Prune command - release claims of deleted projects."""

import typer

from ..pruner import Pruner
from .common import console, get_registry


def prune(
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would be removed"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Release slots held by projects whose directory no longer exists.

    Containers of those projects are not stopped.

    Examples:
        vivarium prune --dry-run
        vivarium prune --force
    """
    registry = get_registry()
    pruner = Pruner(registry)

    result = pruner.prune(dry_run=True)  # Always dry run first

    if not result.removed:
        console.print("[green]No orphaned claims found[/green]")
        return

    console.print(f"[yellow]Would remove {len(result.removed)} claim(s):[/yellow]")
    for state in result.removed:
        console.print(f"  - {state.project_name}: index {state.index} ({state.project_root})")

    if dry_run:
        console.print("\n[dim]Run without --dry-run to remove.[/dim]")
        return

    if not force:
        confirm = typer.confirm("Proceed with deletion?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            return

    result = pruner.prune(dry_run=False)
    for message in result.errors:
        console.print(f"[red]Error:[/red] {message}")

    console.print(f"[green]Removed {len(result.removed)} claim(s)[/green]")
