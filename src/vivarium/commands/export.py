"""Export command - output the project's ports as environment variables."""

import json

import typer

from ..env import port_env_vars
from ..ports import compute_ports
from ..registry import ClaimNotFoundError
from .common import EXIT_FAILURE, error, get_current_project, get_registry


def export_cmd(
    format: str = typer.Option("shell", "--format", help="Output format: shell, json, env"),
) -> None:
    """Export the current project's ports as environment variables.

    Examples:
        eval "$(vivarium export)"
        vivarium export --format json
    """
    if format not in ("shell", "json", "env"):
        error(f"Unknown format: {format}")
        raise typer.Exit(EXIT_FAILURE)

    project = get_current_project()
    try:
        state = get_registry().require(project.name)
    except ClaimNotFoundError as e:
        error(str(e))
        raise typer.Exit(EXIT_FAILURE)

    variables = port_env_vars(compute_ports(state.index))
    variables["COMPOSE_PROJECT_NAME"] = state.compose_name

    if format == "json":
        print(json.dumps(variables, indent=2))
    elif format == "env":
        for key, value in variables.items():
            print(f"{key}={value}")
    else:  # shell
        for key, value in variables.items():
            print(f"export {key}={value}")
