"""Vivarium - local development stack manager."""

__version__ = "0.1.0"

from .allocator import (
    ClaimStrategy,
    IndexAllocationError,
    IndexAllocator,
    LockedClaim,
    UnguardedClaim,
)
from .ports import MAX_SLOTS, PortMap, compute_ports
from .project import ConfigError, Project, VivariumConfig, get_project, load_config
from .pruner import Pruner, PruneResult
from .registry import ClaimNotFoundError, ProjectState, Registry
from .system import PortProbe, PortStatus, is_port_in_use

__all__ = [
    "__version__",
    "ClaimStrategy",
    "IndexAllocationError",
    "IndexAllocator",
    "LockedClaim",
    "UnguardedClaim",
    "MAX_SLOTS",
    "PortMap",
    "compute_ports",
    "ConfigError",
    "Project",
    "VivariumConfig",
    "get_project",
    "load_config",
    "PruneResult",
    "Pruner",
    "ClaimNotFoundError",
    "ProjectState",
    "Registry",
    "PortProbe",
    "PortStatus",
    "is_port_in_use",
]
