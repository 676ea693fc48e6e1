"""Common utilities for CLI commands."""

from pathlib import Path

import typer

from ..config import COMPOSE_FILE_NAME, ENV_FILE_NAME
from ..console import console, debug, dim, error, error_console, info, step, success, warning
from ..project import ConfigError, Project, get_project
from ..registry import Registry

# Re-export console utilities
__all__ = [
    "console",
    "error_console",
    "debug",
    "dim",
    "info",
    "step",
    "success",
    "warning",
    "error",
    "get_registry",
    "get_current_project",
    "compose_paths",
    "EXIT_FAILURE",
    "EXIT_EXHAUSTED",
]

EXIT_FAILURE = 1
EXIT_EXHAUSTED = 3


def get_registry() -> Registry:
    """Get registry instance."""
    return Registry()


def get_current_project() -> Project:
    """Resolve the project in the current directory, exiting on bad config."""
    try:
        return get_project()
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(EXIT_FAILURE)


def compose_paths(registry: Registry, project: Project) -> tuple[Path, Path]:
    """Get the generated compose.yaml and .env paths for a project."""
    project_dir = registry.project_dir(project.name)
    return project_dir / COMPOSE_FILE_NAME, project_dir / ENV_FILE_NAME
