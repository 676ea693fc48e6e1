"""Start, stop and compose pass-through commands."""

from pathlib import Path

import typer

from ..docker import ComposeError, compose
from ..project import Project
from ..registry import ClaimNotFoundError
from .common import (
    EXIT_FAILURE,
    compose_paths,
    error,
    get_current_project,
    get_registry,
    info,
    success,
)


def _require_compose_files() -> tuple[Project, Path, Path]:
    project = get_current_project()
    registry = get_registry()
    try:
        registry.require(project.name)
    except ClaimNotFoundError as e:
        error(str(e))
        raise typer.Exit(EXIT_FAILURE)

    compose_path, env_path = compose_paths(registry, project)
    if not compose_path.exists():
        error("No compose.yaml found. Run `vivarium setup` first.")
        raise typer.Exit(EXIT_FAILURE)
    return project, compose_path, env_path


def _run(project: Project, compose_path: Path, env_path: Path, args: list[str]) -> None:
    try:
        compose(compose_path, env_path, args, cwd=project.root)
    except ComposeError as e:
        error(str(e))
        raise typer.Exit(EXIT_FAILURE)


def start() -> None:
    """Start compose services (no setup logic)."""
    project, compose_path, env_path = _require_compose_files()
    info("Starting services")
    _run(project, compose_path, env_path, ["up", "-d", "--wait"])
    success("Services running")


def stop() -> None:
    """Stop compose services (no teardown logic, the slot stays claimed)."""
    project, compose_path, env_path = _require_compose_files()
    info("Stopping services")
    _run(project, compose_path, env_path, ["down"])
    success("Services stopped")


def compose_cmd(ctx: typer.Context) -> None:
    """Pass-through to docker compose with the generated config.

    Examples:
        vivarium compose ps
        vivarium compose logs -f postgres
    """
    project, compose_path, env_path = _require_compose_files()
    _run(project, compose_path, env_path, list(ctx.args))
