"""Test fixtures and configuration."""

import tempfile
from pathlib import Path

import pytest

from vivarium.ports import compute_ports
from vivarium.registry import ProjectState, Registry


class FakeProbe:
    """Port probe reporting a fixed set of ports as in use."""

    def __init__(self, in_use=None):
        self.in_use = set(in_use or ())
        self.probed = []

    def is_port_in_use(self, port):
        self.probed.append(port)
        return port in self.in_use


@pytest.fixture
def temp_dir():
    """Temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry(temp_dir):
    """Registry rooted in a temporary directory."""
    return Registry(temp_dir / "registry")


@pytest.fixture
def free_probe():
    """Probe that reports every port as free."""
    return FakeProbe()


@pytest.fixture
def make_state():
    """Factory for claims at a given index."""

    def _make_state(name, index, project_root="/projects/test"):
        return ProjectState(
            index=index,
            project_name=name,
            compose_name=f"{name}-local",
            project_root=project_root,
            ports=compute_ports(index).as_dict(),
        )

    return _make_state
