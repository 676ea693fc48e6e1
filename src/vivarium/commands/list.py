"""List command - show every claim in the registry."""

import typer
from rich.table import Table

from ..system import PortProbe
from .common import console, get_registry, warning


def list_cmd(
    live: bool = typer.Option(False, "--live", help="Check if postgres ports are listening"),
) -> None:
    """List all projects holding a slot.

    Examples:
        vivarium list
        vivarium list --live
    """
    registry = get_registry()
    states = registry.list_all()

    if not states:
        warning("No projects claimed")
        return

    probe = PortProbe() if live else None

    table = Table(title="Claimed Slots")
    table.add_column("Index", style="cyan")
    table.add_column("Project", style="green")
    table.add_column("Postgres", style="yellow")
    table.add_column("Root", style="dim")
    if probe:
        table.add_column("Status", style="magenta")

    for state in states:
        postgres = state.ports.get("postgres")
        row = [
            str(state.index),
            state.project_name,
            str(postgres) if postgres is not None else "-",
            state.project_root,
        ]
        if probe:
            if postgres is not None and probe.is_port_in_use(postgres):
                row.append("● LISTEN")
            else:
                row.append("○ free")
        table.add_row(*row)

    console.print(table)
