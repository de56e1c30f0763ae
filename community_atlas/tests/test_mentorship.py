"""
community_atlas/tests/test_mentorship.py — Tests for mentorship bridges.

Tests verify:
- Strength is the mentor's age in 30-day months over 12, clamped to [0, 1].
- Proposals are PENDING, keep initiator and notes, and are invisible to analytics.
- Acceptance activates without changing strength, and is idempotent.
- Invalid proposals and acceptances raise the documented errors.
- Batch detection never modifies a mentorship bridge.
"""

from datetime import timedelta

import pytest

from community_atlas.detection.mentorship import mentorship_strength
from community_atlas.errors import (
    BridgeNotFoundError,
    CommunityNotFoundError,
    DuplicateBridgeError,
    InvalidInputError,
)
from community_atlas.models import Bridge, BridgeStatus, BridgeType, CommunityNode


# ── Strength ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "age_days, expected",
    [(0, 0.0), (180, 0.5), (360, 1.0), (720, 1.0)],
)
def test_mentorship_strength(now, age_days, expected):
    mentor = CommunityNode(id="m", name="m", created_at=now - timedelta(days=age_days))
    assert mentorship_strength(mentor, now) == pytest.approx(expected)


def test_mentor_created_in_future_is_zero(now):
    mentor = CommunityNode(id="m", name="m", created_at=now + timedelta(days=10))
    assert mentorship_strength(mentor, now) == 0.0


# ── Propose / accept ──────────────────────────────────────────────────────────

def test_propose_creates_pending_bridge(network):
    bridge = network.propose_mentorship("A", "E", "user-7", notes="Help with bulk buying")

    assert bridge.kind == BridgeType.MENTORSHIP
    assert bridge.status == BridgeStatus.PENDING
    assert bridge.source_id == "A"
    assert bridge.target_id == "E"
    assert bridge.strength == pytest.approx(0.5)
    assert bridge.initiated_by == "user-7"
    assert bridge.notes == "Help with bulk buying"


def test_pending_mentorship_is_invisible_until_accepted(network):
    bridge = network.propose_mentorship("A", "E", "user-7")
    assert network.calculate_community_impact("E").bridge_count == 0
    assert network.get_network_stats().total_bridges == 0

    accepted = network.accept_mentorship(bridge.id)

    assert accepted.status == BridgeStatus.ACTIVE
    assert accepted.strength == pytest.approx(bridge.strength)
    assert network.calculate_community_impact("E").bridge_count == 1
    assert network.get_network_stats().bridges_by_type == {"MENTORSHIP": 1}


def test_accept_twice_is_a_no_op(network):
    bridge = network.propose_mentorship("A", "E", "user-7")
    first = network.accept_mentorship(bridge.id)
    second = network.accept_mentorship(bridge.id)
    assert second.status == BridgeStatus.ACTIVE
    assert second.updated_at == first.updated_at


def test_self_mentorship_rejected(network):
    with pytest.raises(InvalidInputError):
        network.propose_mentorship("A", "A", "user-7")


def test_unknown_community_rejected(network):
    with pytest.raises(CommunityNotFoundError):
        network.propose_mentorship("A", "ghost", "user-7")
    with pytest.raises(CommunityNotFoundError):
        network.propose_mentorship("ghost", "A", "user-7")


def test_duplicate_mentorship_rejected_in_either_direction(network):
    network.propose_mentorship("A", "E", "user-7")
    with pytest.raises(DuplicateBridgeError):
        network.propose_mentorship("A", "E", "user-8")
    with pytest.raises(DuplicateBridgeError):
        network.propose_mentorship("E", "A", "user-8")


def test_accept_unknown_bridge(network):
    with pytest.raises(BridgeNotFoundError):
        network.accept_mentorship("no-such-bridge")


def test_accept_non_mentorship_bridge(network, store):
    thematic = store.create(Bridge("A", "B", BridgeType.THEMATIC, 0.7, status=BridgeStatus.PENDING))
    with pytest.raises(InvalidInputError):
        network.accept_mentorship(thematic.id)


def test_detection_never_touches_mentorship(network, store):
    bridge = network.propose_mentorship("A", "B", "user-7")
    network.accept_mentorship(bridge.id)

    network.detect_all_bridges(max_workers=1)
    network.detect_all_bridges(max_workers=1)

    after = store.get(bridge.id)
    assert after.strength == pytest.approx(bridge.strength)
    assert after.status == BridgeStatus.ACTIVE
    mentorships = [b for b in store.list_bridges() if b.kind == BridgeType.MENTORSHIP]
    assert len(mentorships) == 1
