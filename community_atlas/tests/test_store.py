"""
community_atlas/tests/test_store.py — Tests for the in-memory stores.

Tests verify:
- One bridge per unordered pair and kind; kinds do not collide.
- Returned bridges are copies, never the stored records.
- update() refuses identity fields and unknown ids.
- Status filters on list / count / find_by_community / average_strength.
- The community repository filters non-qualifying communities by default.
"""

import pytest

from community_atlas.errors import BridgeNotFoundError, DuplicateBridgeError, InvalidInputError
from community_atlas.models import Bridge, BridgeStatus, BridgeType, CommunityNode, PackType
from community_atlas.storage.memory import InMemoryBridgeStore, InMemoryCommunityRepository


def test_pair_uniqueness_ignores_direction():
    store = InMemoryBridgeStore()
    store.create(Bridge("A", "B", BridgeType.GEOGRAPHIC, 0.9))
    with pytest.raises(DuplicateBridgeError) as excinfo:
        store.create(Bridge("B", "A", BridgeType.GEOGRAPHIC, 0.5))
    assert excinfo.value.key == ("A", "B", BridgeType.GEOGRAPHIC)


def test_different_kinds_coexist():
    store = InMemoryBridgeStore()
    store.create(Bridge("A", "B", BridgeType.GEOGRAPHIC, 0.9))
    store.create(Bridge("A", "B", BridgeType.THEMATIC, 0.7))
    assert len(store) == 2
    assert store.find_by_pair("B", "A", BridgeType.THEMATIC).strength == pytest.approx(0.7)
    assert store.find_by_pair("A", "B", BridgeType.SPONTANEOUS) is None


def test_returned_bridges_are_copies():
    store = InMemoryBridgeStore()
    created = store.create(Bridge("A", "B", BridgeType.GEOGRAPHIC, 0.9))
    created.strength = 0.1
    store.get(created.id).strength = 0.2
    assert store.get(created.id).strength == pytest.approx(0.9)


def test_update_changes_mutable_fields():
    store = InMemoryBridgeStore()
    created = store.create(Bridge("A", "B", BridgeType.THEMATIC, 0.7, status=BridgeStatus.PENDING))
    updated = store.update(created.id, strength=0.3, status=BridgeStatus.ACTIVE)
    assert updated.strength == pytest.approx(0.3)
    assert store.get(created.id).status == BridgeStatus.ACTIVE


def test_update_rejects_identity_fields():
    store = InMemoryBridgeStore()
    created = store.create(Bridge("A", "B", BridgeType.THEMATIC, 0.7))
    with pytest.raises(InvalidInputError):
        store.update(created.id, target_id="C")
    with pytest.raises(InvalidInputError):
        store.update(created.id, kind=BridgeType.GEOGRAPHIC)


def test_update_unknown_bridge():
    with pytest.raises(BridgeNotFoundError):
        InMemoryBridgeStore().update("missing", strength=0.5)


def test_status_filters():
    store = InMemoryBridgeStore([
        Bridge("A", "B", BridgeType.GEOGRAPHIC, 0.8),
        Bridge("A", "C", BridgeType.THEMATIC, 0.4),
        Bridge("A", "D", BridgeType.MENTORSHIP, 0.5, status=BridgeStatus.PENDING),
    ])
    assert store.count() == 2
    assert store.count(status=None) == 3
    assert len(store.list_bridges(BridgeStatus.PENDING)) == 1
    assert {b.other_end("A") for b in store.find_by_community("A")} == {"B", "C"}
    assert store.find_by_community("D") == []
    assert len(store.find_by_community("D", status=None)) == 1
    assert store.average_strength() == pytest.approx(0.6)


def test_average_strength_of_empty_store():
    assert InMemoryBridgeStore().average_strength() == 0.0


def test_bridge_clamps_strength_and_members():
    b = Bridge("A", "B", "SPONTANEOUS", 1.7, shared_members=-3)
    assert b.kind == BridgeType.SPONTANEOUS
    assert b.strength == 1.0
    assert b.shared_members == 0


def test_repository_filters_non_qualifying():
    repo = InMemoryCommunityRepository([
        CommunityNode(id="a", name="a", pack_type=PackType.ECOVILLAGE),
        CommunityNode(id="b", name="b"),
    ])
    assert [c.id for c in repo.list_communities()] == ["a"]
    assert [c.id for c in repo.list_communities(qualifying_only=False)] == ["a", "b"]
    assert repo.get("b").name == "b"
    assert repo.get("zz") is None
