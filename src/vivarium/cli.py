"""Typer CLI for Vivarium - Main entry point."""

import typer

from . import __version__
from .commands import (
    compose_cmd,
    export_cmd,
    list_cmd,
    mcp_proxy,
    prune,
    setup,
    start,
    status,
    stop,
    teardown,
)

app = typer.Typer(
    name="vivarium",
    help="Local dev stack manager - allocates ports, manages Docker Compose services, generates .env files",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"vivarium version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Local dev stack manager."""


# Register all commands
app.command()(setup)
app.command()(teardown)
app.command()(start)
app.command()(stop)
app.command()(status)
app.command(name="list")(list_cmd)
app.command()(prune)
app.command(name="export")(export_cmd)
app.command(name="mcp-proxy")(mcp_proxy)
app.command(
    name="compose",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)(compose_cmd)


def main() -> None:
    """Main entry point."""
    app()
