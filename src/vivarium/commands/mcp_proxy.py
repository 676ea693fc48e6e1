"""MCP proxy command - bridge stdio to an MCP server on the compose network."""

import typer

from ..docker import ComposeError, run_mcp_proxy
from ..registry import ClaimNotFoundError
from .common import EXIT_FAILURE, error, get_current_project, get_registry


def mcp_proxy(
    service: str = typer.Argument(..., help="Compose service serving MCP over SSE"),
) -> None:
    """Proxy an MCP server's SSE endpoint to stdio.

    Point an MCP client's command at this to reach a sidecar such as
    postgres-mcp without publishing its port on the host.

    Examples:
        vivarium mcp-proxy postgres-mcp
    """
    project = get_current_project()
    try:
        state = get_registry().require(project.name)
    except ClaimNotFoundError as e:
        error(str(e))
        raise typer.Exit(EXIT_FAILURE)

    try:
        run_mcp_proxy(state.compose_name, service)
    except ComposeError as e:
        error(str(e))
        raise typer.Exit(EXIT_FAILURE)
