"""Port formula for Vivarium slot indexes."""

from dataclasses import dataclass

MAX_SLOTS = 100

# (base, stride) per logical port. Stride 10 leaves room for the adjacent
# same-project port (s3 console, backend) inside one 10-wide block.
PORT_LAYOUT: dict[str, tuple[int, int]] = {
    "postgres": (5433, 1),
    "redis": (6380, 1),
    "s3": (9010, 10),
    "s3_console": (9011, 10),
    "frontend": (4000, 10),
    "backend": (4001, 10),
}

# Keys used for the port map in state.json
STORAGE_KEYS: dict[str, str] = {
    "postgres": "postgres",
    "redis": "redis",
    "s3": "s3",
    "s3_console": "s3Console",
    "frontend": "frontend",
    "backend": "backend",
}


@dataclass(frozen=True)
class PortMap:
    """Concrete host ports for one project slot."""

    postgres: int
    redis: int
    s3: int
    s3_console: int
    frontend: int
    backend: int

    def as_dict(self) -> dict[str, int]:
        """Return the port map keyed by its persisted names."""
        return {
            STORAGE_KEYS[name]: getattr(self, name) for name in PORT_LAYOUT
        }

    def values(self) -> set[int]:
        """Return the set of port numbers in this map."""
        return {getattr(self, name) for name in PORT_LAYOUT}


def compute_ports(index: int) -> PortMap:
    """Compute all ports for a slot index.

    Args:
        index: Slot index in [0, MAX_SLOTS)

    Returns:
        PortMap derived from the index

    Raises:
        ValueError: If the index is outside the valid range
    """
    if not 0 <= index < MAX_SLOTS:
        raise ValueError(f"Slot index must be in 0-{MAX_SLOTS - 1}, got {index}")

    return PortMap(
        **{name: base + index * stride for name, (base, stride) in PORT_LAYOUT.items()}
    )
