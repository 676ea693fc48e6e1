"""Registry layer for Vivarium - one directory per claimed project."""

import fcntl
import json
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import LOCK_FILE_NAME, STATE_FILE_NAME, get_registry_dir
from .console import debug
from .ports import MAX_SLOTS


class ClaimNotFoundError(Exception):
    """Raised when a project has no claim in the registry."""

    def __init__(self, project_name: str) -> None:
        self.project_name = project_name
        super().__init__(
            f"No claim found for project '{project_name}'. Run `vivarium setup` first."
        )


@dataclass
class ProjectState:
    """Persisted claim of a slot index by a project."""

    index: int
    project_name: str
    compose_name: str
    project_root: str
    ports: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the state.json layout."""
        return {
            "index": self.index,
            "projectName": self.project_name,
            "composeName": self.compose_name,
            "projectRoot": self.project_root,
            "ports": dict(self.ports),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectState":
        """Build a state from parsed state.json content.

        Raises:
            ValueError: If the content does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("state must be a JSON object")

        index = data.get("index")
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < MAX_SLOTS
        ):
            raise ValueError(f"invalid index: {index!r}")

        strings = {}
        for key in ("projectName", "composeName", "projectRoot"):
            value = data.get(key)
            if not isinstance(value, str):
                raise ValueError(f"invalid {key}: {value!r}")
            strings[key] = value

        ports = data.get("ports")
        if not isinstance(ports, dict) or not all(
            isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool)
            for k, v in ports.items()
        ):
            raise ValueError(f"invalid ports: {ports!r}")

        return cls(
            index=index,
            project_name=strings["projectName"],
            compose_name=strings["composeName"],
            project_root=strings["projectRoot"],
            ports=dict(ports),
        )


class Registry:
    """Directory-backed store of project claims.

    Layout::

        <root>/<project-name>/state.json

    Every call reads from disk; nothing is cached between calls.
    """

    def __init__(self, root: Path | None = None) -> None:
        """Initialize registry.

        Args:
            root: Registry root directory. If None, uses default location.
        """
        self.root = root if root is not None else get_registry_dir()

    def project_dir(self, project_name: str) -> Path:
        """Get the registry directory for a project.

        Args:
            project_name: Project identity

        Returns:
            Path to the project's directory

        Raises:
            ValueError: If the name is not a single path component
        """
        if (
            not project_name
            or project_name in (".", "..")
            or "/" in project_name
            or os.sep in project_name
        ):
            raise ValueError(f"Invalid project name: {project_name!r}")
        return self.root / project_name

    def state_path(self, project_name: str) -> Path:
        """Get the state.json path for a project."""
        return self.project_dir(project_name) / STATE_FILE_NAME

    def read(self, project_name: str) -> ProjectState | None:
        """Read the claim for a project.

        Unreadable or corrupt records are treated as absent.

        Args:
            project_name: Project identity

        Returns:
            ProjectState or None if not found
        """
        return self._load(self.state_path(project_name))

    def require(self, project_name: str) -> ProjectState:
        """Read the claim for a project, raising if there is none.

        Raises:
            ClaimNotFoundError: If the project has no claim
        """
        state = self.read(project_name)
        if state is None:
            raise ClaimNotFoundError(project_name)
        return state

    def write(self, state: ProjectState) -> None:
        """Persist a claim, replacing any previous record atomically.

        Args:
            state: Claim to write
        """
        project_dir = self.project_dir(state.project_name)
        project_dir.mkdir(parents=True, exist_ok=True, mode=0o700)

        fd, tmp_name = tempfile.mkstemp(
            dir=project_dir, prefix=f".{STATE_FILE_NAME}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(state.to_dict(), f, indent=2)
                f.write("\n")
            os.replace(tmp_name, project_dir / STATE_FILE_NAME)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, project_name: str) -> bool:
        """Remove a project's entire registry directory.

        Args:
            project_name: Project identity

        Returns:
            True if removed, False if it did not exist
        """
        project_dir = self.project_dir(project_name)
        if not project_dir.exists():
            return False
        shutil.rmtree(project_dir)
        return True

    def list_all(self) -> list[ProjectState]:
        """Scan all project directories and return their claims.

        Returns:
            List of claims sorted by index
        """
        if not self.root.is_dir():
            return []

        states: list[ProjectState] = []
        for entry in self.root.iterdir():
            if not entry.is_dir():
                continue
            state_path = entry / STATE_FILE_NAME
            if not state_path.is_file():
                continue
            state = self._load(state_path)
            if state is not None:
                states.append(state)

        return sorted(states, key=lambda s: (s.index, s.project_name))

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold an exclusive lock on the registry across processes."""
        self.root.mkdir(parents=True, exist_ok=True, mode=0o700)
        with (self.root / LOCK_FILE_NAME).open("a+") as lock_fd:
            fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)

    def _load(self, state_path: Path) -> ProjectState | None:
        try:
            with state_path.open() as f:
                return ProjectState.from_dict(json.load(f))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            debug(f"Skipping unreadable state file {state_path}: {e}")
            return None
