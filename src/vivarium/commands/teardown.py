"""Teardown command - stop services and release the project's slot."""

from ..docker import ComposeError, compose
from ..env import remove_package_env_files
from ..project import ConfigError, try_load_config
from .common import (
    compose_paths,
    dim,
    get_current_project,
    get_registry,
    info,
    step,
    success,
    warning,
)


def teardown() -> None:
    """Stop services, release the slot index and remove generated files.

    Proceeds without a config file; package .env files are then left
    in place.
    """
    project = get_current_project()
    registry = get_registry()

    info(f"Tearing down {project.name}")

    compose_path, env_path = compose_paths(registry, project)
    if compose_path.exists() and env_path.exists():
        step("Stopping compose services")
        try:
            compose(
                compose_path,
                env_path,
                ["down", "--remove-orphans", "--volumes"],
                cwd=project.root,
            )
            success("Services stopped")
        except ComposeError:
            warning("Failed to stop some services (they may already be stopped)")
    else:
        dim("No compose.yaml found in registry, skipping service shutdown")

    state = registry.read(project.name)
    registry.remove(project.name)
    if state is not None:
        step(f"Released index {state.index}")

    try:
        config = try_load_config(project.root)
    except ConfigError as e:
        warning(f"{e} Skipping package .env cleanup.")
    else:
        if config is not None:
            remove_package_env_files(project.root, config)
        else:
            warning(
                "No config found - skipping package .env cleanup. "
                "Remove them manually if needed."
            )

    success(f"{project.name} teardown complete")
