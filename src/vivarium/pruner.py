"""Cleanup logic for orphaned project claims."""

from dataclasses import dataclass
from pathlib import Path

from .registry import ProjectState, Registry


@dataclass
class PruneResult:
    """Result of a prune operation."""

    removed: list[ProjectState]  # Claims removed
    kept: list[ProjectState]  # Claims kept
    errors: list[str]  # Errors encountered


class Pruner:
    """Release claims of projects that no longer exist on disk."""

    def __init__(self, registry: Registry) -> None:
        """Initialize pruner.

        Args:
            registry: Registry instance
        """
        self.registry = registry

    def prune(self, dry_run: bool = False) -> PruneResult:
        """Remove claims whose project root no longer exists.

        Args:
            dry_run: If True, don't delete, just report what would be deleted

        Returns:
            PruneResult with details of operation
        """
        result = PruneResult(removed=[], kept=[], errors=[])

        for state in self.registry.list_all():
            if not self._is_orphan(state):
                result.kept.append(state)
                continue
            try:
                if not dry_run:
                    self.registry.remove(state.project_name)
                result.removed.append(state)
            except OSError as e:
                result.errors.append(f"{state.project_name}: {e}")

        return result

    def _is_orphan(self, state: ProjectState) -> bool:
        """Determine if a claim is orphaned.

        Compose containers of an orphaned project may still be running;
        removing the claim only frees the slot.
        """
        return not Path(state.project_root).exists()
