"""Tests for allocator module."""

import pytest

from conftest import FakeProbe
from vivarium.allocator import (
    IndexAllocationError,
    IndexAllocator,
    LockedClaim,
    UnguardedClaim,
)
from vivarium.ports import MAX_SLOTS, compute_ports
from vivarium.registry import ProjectState, Registry


def test_allocate_first_index(registry, free_probe):
    """Test that an empty registry hands out index 0 and persists it."""
    allocator = IndexAllocator(registry, probe=free_probe)

    index = allocator.allocate("shop", "/projects/shop")

    assert index == 0
    state = registry.read("shop")
    assert state.index == 0
    assert state.compose_name == "shop-local"
    assert state.project_root == "/projects/shop"
    assert state.ports == compute_ports(0).as_dict()


def test_allocate_returns_existing(registry, free_probe):
    """Test that allocating twice for the same project is idempotent."""
    allocator = IndexAllocator(registry, probe=free_probe)

    index1 = allocator.allocate("shop", "/projects/shop")
    index2 = allocator.allocate("shop", "/projects/shop")

    assert index1 == index2
    assert len(registry.list_all()) == 1


def test_allocate_existing_claim_skips_probe(registry, make_state):
    """Test that an existing claim is reused even if its port is busy."""
    registry.write(make_state("shop", 5))
    probe = FakeProbe(in_use={compute_ports(5).postgres})

    assert IndexAllocator(registry, probe=probe).allocate("shop", "/p") == 5
    assert probe.probed == []


def test_allocate_different_projects(registry, free_probe):
    """Test that different projects get different indexes."""
    allocator = IndexAllocator(registry, probe=free_probe)

    assert allocator.allocate("shop", "/projects/shop") == 0
    assert allocator.allocate("blog", "/projects/blog") == 1


def test_allocate_lowest_free_index(registry, free_probe, make_state):
    """Test that gaps are filled before appending."""
    for name, index in [("a", 0), ("b", 2), ("c", 3)]:
        registry.write(make_state(name, index))

    index = IndexAllocator(registry, probe=free_probe).allocate("new", "/new")

    assert index == 1


def test_allocate_never_returns_claimed_index(registry, free_probe, make_state):
    """Test that the chosen index is not held by any other project."""
    for index in (0, 1, 4, 7):
        registry.write(make_state(f"p{index}", index))
    taken = {s.index for s in registry.list_all()}

    index = IndexAllocator(registry, probe=free_probe).allocate("new", "/new")

    assert index not in taken
    assert index == 2


def test_allocate_skips_ports_in_use(registry, make_state):
    """Test that a foreign listener on a slot's postgres port skips the slot."""
    probe = FakeProbe(in_use={5433, 5434})

    index = IndexAllocator(registry, probe=probe).allocate("shop", "/shop")

    assert index == 2
    # Only the postgres port of each candidate is probed
    assert probe.probed == [5433, 5434, 5435]


def test_allocate_skips_port_collision_with_malformed_record(registry, free_probe):
    """Test the registry-level port check against a hand-edited record."""
    # Claims index 5 but carries the ports of index 0
    registry.write(
        ProjectState(
            index=5,
            project_name="legacy",
            compose_name="legacy-local",
            project_root="/legacy",
            ports=compute_ports(0).as_dict(),
        )
    )

    index = IndexAllocator(registry, probe=free_probe).allocate("shop", "/shop")

    assert index == 1


def test_allocate_ignores_corrupt_records(registry, free_probe, make_state):
    """Test that a corrupt record neither breaks nor blocks allocation."""
    registry.write(make_state("a", 0))
    (registry.root / "broken").mkdir()
    (registry.root / "broken" / "state.json").write_text("{oops")

    index = IndexAllocator(registry, probe=free_probe).allocate("new", "/new")

    assert index == 1


def test_allocate_exhausted_raises_error(registry, free_probe, make_state):
    """Test that a full registry fails without persisting a claim."""
    for index in range(MAX_SLOTS):
        registry.write(make_state(f"p{index}", index))

    with pytest.raises(IndexAllocationError) as exc_info:
        IndexAllocator(registry, probe=free_probe).allocate("new", "/new")

    assert "0-99" in str(exc_info.value)
    assert "'new'" in str(exc_info.value)
    assert exc_info.value.project_name == "new"
    assert registry.read("new") is None
    assert len(registry.list_all()) == MAX_SLOTS


def test_allocate_exhausted_by_foreign_listeners(registry):
    """Test exhaustion when every postgres port is taken outside the registry."""
    probe = FakeProbe(in_use={compute_ports(i).postgres for i in range(MAX_SLOTS)})

    with pytest.raises(IndexAllocationError):
        IndexAllocator(registry, probe=probe).allocate("new", "/new")

    assert registry.list_all() == []


def test_remove_then_reallocate_lowest(registry, free_probe):
    """Test that a released slot goes back to the pool."""
    allocator = IndexAllocator(registry, probe=free_probe)
    allocator.allocate("a", "/a")
    allocator.allocate("b", "/b")
    allocator.allocate("c", "/c")

    registry.remove("b")
    assert registry.read("b") is None

    assert allocator.allocate("d", "/d") == 1
    # b comes back on the next free slot, not its old one
    assert allocator.allocate("b", "/b") == 3


def test_custom_compose_name(registry, free_probe):
    """Test passing an explicit compose project name."""
    IndexAllocator(registry, probe=free_probe).allocate("shop", "/shop", "shop-dev")

    assert registry.read("shop").compose_name == "shop-dev"


class _RacingProbe(FakeProbe):
    """Probe that lets a competing process claim a slot mid-scan."""

    def __init__(self, registry, make_state, competitor, index):
        super().__init__()
        self.registry = registry
        self.competitor = make_state(competitor, index)

    def is_port_in_use(self, port):
        if self.competitor is not None:
            self.registry.write(self.competitor)
            self.competitor = None
        return super().is_port_in_use(port)


def test_locked_claim_detects_concurrent_claim(registry, make_state):
    """Test that the default strategy loses a race gracefully."""
    other_view = Registry(registry.root)
    probe = _RacingProbe(other_view, make_state, "rival", 0)
    allocator = IndexAllocator(registry, probe=probe, strategy=LockedClaim(registry))

    index = allocator.allocate("shop", "/shop")

    assert index == 1
    assert registry.read("rival").index == 0
    assert registry.read("shop").index == 1


def test_unguarded_claim_allows_collision(registry, make_state):
    """Test the racy strategy: both projects end up on the same slot."""
    probe = _RacingProbe(registry, make_state, "rival", 0)
    allocator = IndexAllocator(registry, probe=probe, strategy=UnguardedClaim(registry))

    index = allocator.allocate("shop", "/shop")

    assert index == 0
    assert sorted(s.index for s in registry.list_all()) == [0, 0]


def test_locked_claim_rejects_port_overlap(registry, make_state):
    """Test that LockedClaim re-checks port overlap under the lock."""
    registry.write(make_state("a", 0))
    strategy = LockedClaim(registry)

    assert strategy.try_claim(make_state("b", 0)) is False
    assert strategy.try_claim(make_state("b", 1)) is True
    assert registry.read("b").index == 1


def test_default_strategy_is_locked(registry, free_probe):
    """Test that allocators lock by default."""
    assert isinstance(IndexAllocator(registry, probe=free_probe).strategy, LockedClaim)
