"""Slot index allocation logic for Vivarium."""

from typing import Protocol

from .console import debug
from .ports import MAX_SLOTS, compute_ports
from .registry import ProjectState, Registry
from .system import PortProbe


class IndexAllocationError(Exception):
    """Raised when no slot index can be allocated."""

    def __init__(self, project_name: str) -> None:
        self.project_name = project_name
        self.first = 0
        self.last = MAX_SLOTS - 1
        super().__init__(
            f"No available index ({self.first}-{self.last}) for project "
            f"'{project_name}'. Free up a slot or teardown another project."
        )


class ClaimStrategy(Protocol):
    """Persists a candidate claim, reporting whether it won the slot."""

    def try_claim(self, state: ProjectState) -> bool: ...


class UnguardedClaim:
    """Write the claim without re-checking the registry.

    Two processes scanning at the same time can both pick the same index;
    the collision only surfaces when docker fails to bind a port.
    """

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def try_claim(self, state: ProjectState) -> bool:
        self.registry.write(state)
        return True


class LockedClaim:
    """Re-check and write the claim while holding the registry lock."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def try_claim(self, state: ProjectState) -> bool:
        """Claim the slot unless another project took it since the scan.

        Args:
            state: Candidate claim

        Returns:
            True if written, False on conflict
        """
        candidate_ports = set(state.ports.values())
        with self.registry.lock():
            for other in self.registry.list_all():
                if other.project_name == state.project_name:
                    continue
                if other.index == state.index or candidate_ports & set(
                    other.ports.values()
                ):
                    return False
            self.registry.write(state)
        return True


class IndexAllocator:
    """Allocate slot indexes with registry-wide uniqueness guarantee."""

    def __init__(
        self,
        registry: Registry,
        probe: PortProbe | None = None,
        strategy: ClaimStrategy | None = None,
    ) -> None:
        """Initialize allocator.

        Args:
            registry: Registry instance
            probe: OS port probe (defaults to PortProbe)
            strategy: How a chosen candidate is persisted (defaults to LockedClaim)
        """
        self.registry = registry
        self.probe = probe or PortProbe()
        self.strategy = strategy or LockedClaim(registry)

    def allocate(
        self,
        project_name: str,
        project_root: str,
        compose_name: str | None = None,
    ) -> int:
        """Allocate a slot index for a project.

        Strategy:
        1. If the project already has a claim -> return its index
        2. Otherwise scan indexes from 0 upwards, skipping any that are
           claimed, whose ports overlap another claim, or whose postgres
           port is in use on this machine
        3. Persist the first surviving candidate through the claim strategy

        Args:
            project_name: Project identity
            project_root: Absolute path to the project
            compose_name: Compose project name (defaults to "<name>-local")

        Returns:
            The allocated slot index

        Raises:
            IndexAllocationError: If every index is unavailable
        """
        existing = self.registry.read(project_name)
        if existing is not None:
            debug(f"Reusing existing claim: index {existing.index}")
            return existing.index

        claimed = [
            s for s in self.registry.list_all() if s.project_name != project_name
        ]
        taken_indices = {s.index for s in claimed}
        claimed_ports = {port for s in claimed for port in s.ports.values()}

        for index in range(MAX_SLOTS):
            if index in taken_indices:
                continue

            ports = compute_ports(index)

            # Safety net against stale or hand-edited records
            if ports.values() & claimed_ports:
                debug(f"Index {index} has port collisions with another project, skipping")
                continue

            if self.probe.is_port_in_use(ports.postgres):
                debug(
                    f"Index {index} has no claim but postgres port "
                    f"{ports.postgres} is in use, skipping"
                )
                continue

            state = ProjectState(
                index=index,
                project_name=project_name,
                compose_name=compose_name or f"{project_name}-local",
                project_root=project_root,
                ports=ports.as_dict(),
            )
            if not self.strategy.try_claim(state):
                debug(f"Index {index} was claimed concurrently, skipping")
                continue

            return index

        raise IndexAllocationError(project_name)
