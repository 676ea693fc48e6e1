"""Status command - show the current project's claim."""

import typer
from rich.table import Table

from ..docker import ComposeError, compose
from ..system import PortProbe, PortStatus
from .common import (
    compose_paths,
    console,
    dim,
    get_current_project,
    get_registry,
    info,
    warning,
)

STATUS_LABELS = {
    PortStatus.IN_USE: "● LISTEN",
    PortStatus.FREE: "○ free",
    PortStatus.INCONCLUSIVE: "? unknown",
}


def status(
    live: bool = typer.Option(True, "--live/--no-live", help="Check if ports are actually listening"),
    containers: bool = typer.Option(
        True, "--containers/--no-containers", help="Show docker compose ps output"
    ),
) -> None:
    """Show the claimed index, assigned ports and container status.

    Examples:
        vivarium status
        vivarium status --no-containers
    """
    project = get_current_project()
    registry = get_registry()
    state = registry.read(project.name)

    if state is None:
        info(f"{project.name}: not set up")
        dim("Run `vivarium setup` to get started.")
        return

    info(f"{project.name} (index {state.index})")

    probe = PortProbe()
    table = Table(title="Ports")
    table.add_column("Service", style="green")
    table.add_column("Port", style="yellow")
    if live:
        table.add_column("Status", style="magenta")

    for name, port in state.ports.items():
        row = [name, f"localhost:{port}"]
        if live:
            row.append(STATUS_LABELS[probe.probe(port)])
        table.add_row(*row)

    console.print(table)

    compose_path, env_path = compose_paths(registry, project)
    if containers and compose_path.exists() and env_path.exists():
        info("Containers:")
        try:
            compose(compose_path, env_path, ["ps", "--format", "table"])
        except ComposeError:
            warning("Could not retrieve container status")
