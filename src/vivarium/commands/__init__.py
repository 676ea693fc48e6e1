"""Command modules for vivarium CLI."""

from .export import export_cmd
from .lifecycle import compose_cmd, start, stop
from .list import list_cmd
from .mcp_proxy import mcp_proxy
from .prune import prune
from .setup import setup
from .status import status
from .teardown import teardown

__all__ = [
    "compose_cmd",
    "export_cmd",
    "list_cmd",
    "mcp_proxy",
    "prune",
    "setup",
    "start",
    "status",
    "stop",
    "teardown",
]
