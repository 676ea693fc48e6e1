"""Setup command - claim a slot and bring the dev stack up."""

import subprocess

import typer

from ..allocator import IndexAllocationError, IndexAllocator
from ..compose import generate_compose
from ..docker import ComposeError, check_prerequisites, compose, create_s3_bucket
from ..env import generate_compose_env, write_package_env_files
from ..launch import update_launch_json
from ..ports import compute_ports
from ..project import ConfigError, load_config
from .common import (
    EXIT_EXHAUSTED,
    EXIT_FAILURE,
    compose_paths,
    dim,
    error,
    get_current_project,
    get_registry,
    info,
    step,
    success,
    warning,
)


def setup(
    pull: bool = typer.Option(True, "--pull/--no-pull", help="Pull images before starting"),
) -> None:
    """Claim a slot, start services and generate .env files.

    Running setup again for the same project keeps its ports.

    Examples:
        vivarium setup
        vivarium setup --no-pull
    """
    missing = check_prerequisites()
    if missing:
        error(f"Missing required tools: {', '.join(missing)}")
        dim("Install them and try again.")
        raise typer.Exit(EXIT_FAILURE)

    project = get_current_project()
    try:
        config = load_config(project.root)
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(EXIT_FAILURE)

    info(f"Setting up {project.name}")

    registry = get_registry()
    allocator = IndexAllocator(registry)
    try:
        index = allocator.allocate(project.name, str(project.root), project.compose_name)
    except IndexAllocationError as e:
        error(str(e))
        raise typer.Exit(EXIT_EXHAUSTED)
    step(f"Claimed index {index}")

    state = registry.require(project.name)
    ports = compute_ports(state.index)

    # The claim may predate a move of the project directory
    state.project_root = str(project.root)
    state.compose_name = project.compose_name
    state.ports = ports.as_dict()
    registry.write(state)

    compose_path, env_path = compose_paths(registry, project)
    compose_path.write_text(generate_compose(config.services, project.compose_name))
    step(f"Generated {compose_path.name}")
    env_path.write_text(generate_compose_env(config, ports, project.compose_name))
    step(f"Generated {env_path.name}")

    info("Starting services")
    try:
        if pull:
            compose(compose_path, env_path, ["pull"], cwd=project.root)
        compose(compose_path, env_path, ["up", "-d", "--wait"], cwd=project.root)
    except ComposeError as e:
        error(str(e))
        dim("The slot stays claimed; fix the problem and run setup again.")
        raise typer.Exit(EXIT_FAILURE)
    success("Services running")

    if config.services.s3:
        info("Creating S3 buckets")
        endpoint = f"http://localhost:{ports.s3}"
        for bucket in config.services.s3.buckets:
            create_s3_bucket(
                endpoint,
                bucket,
                config.services.s3.access_key,
                config.services.s3.secret_key,
            )

    if config.packages:
        info("Generating package .env files")
        write_package_env_files(project.root, config, ports)

    for name, package in config.packages.items():
        if not package.post_setup:
            continue
        info(f"Running postSetup for {name}")
        package_dir = project.root / (package.directory or name)
        for cmd in package.post_setup:
            step(cmd)
            try:
                subprocess.run(cmd, shell=True, cwd=package_dir, check=True)
            except (subprocess.CalledProcessError, OSError) as e:
                error(f"postSetup command failed for {name}: {e}")
                raise typer.Exit(EXIT_FAILURE)

    try:
        launch_path = update_launch_json(project.root, ports, config.packages)
    except (ValueError, OSError):
        warning("Could not update .claude/launch.json")
    else:
        if launch_path is not None:
            step("Updated .claude/launch.json")

    success(f"\n{project.name} setup complete (index {index})\n")
    info("Port summary:")
    if config.services.postgres:
        step(f"PostgreSQL:   localhost:{ports.postgres}")
    if config.services.redis:
        step(f"Redis:        localhost:{ports.redis}")
    if config.services.s3:
        step(f"S3 (API):     localhost:{ports.s3}")
        step(f"S3 (console): localhost:{ports.s3_console}")
    if "frontend" in config.packages:
        step(f"Frontend:     localhost:{ports.frontend}")
    if "backend" in config.packages:
        step(f"Backend:      localhost:{ports.backend}")
