"""
community_atlas/tests/test_impact.py — Tests for impact profiles and the leaderboard.

Tests verify:
- Reputation tiers follow the first-match thresholds, with strict '>' bounds.
- A star hub gets bridge_count, reach, centrality and influence right.
- Communities without bridges are 'emerging' with zeros.
- The leaderboard orders by tier then influence, is stable and honours limit.
- A failing profile is skipped without losing the rest.
"""

import pytest

from community_atlas.graph.builder import build_network_graph
from community_atlas.metrics import impact as impact_module
from community_atlas.metrics.impact import (
    community_impact,
    leaderboard_frame,
    network_leaderboard,
    reputation_tier,
)
from community_atlas.models import Bridge, BridgeType, CommunityNode, PackType, ReputationTier


# ── Helpers ───────────────────────────────────────────────────────────────────

def node(cid: str) -> CommunityNode:
    return CommunityNode(id=cid, name=f"Community {cid}", pack_type=PackType.SOLIDARITY_NETWORK)


def make_star():
    """
    H is linked to five leaves L0..L4 (strength 0.5 each), with a second
    THEMATIC bridge to L0 and L1: 7 bridges, reach 5.
    X and Y are linked by three bridges of different kinds; W is isolated.
    """
    communities = [node("H")] + [node(f"L{i}") for i in range(5)] + [node("X"), node("Y"), node("W")]
    bridges = [Bridge("H", f"L{i}", BridgeType.GEOGRAPHIC, 0.5) for i in range(5)]
    bridges += [Bridge("H", f"L{i}", BridgeType.THEMATIC, 0.5) for i in range(2)]
    bridges += [
        Bridge("X", "Y", BridgeType.GEOGRAPHIC, 1.0),
        Bridge("X", "Y", BridgeType.THEMATIC, 0.7),
        Bridge("X", "Y", BridgeType.SPONTANEOUS, 0.6),
    ]
    return communities, build_network_graph(communities, bridges)


# ── Tiers ─────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "bridges, reach, centrality, influence, expected",
    [
        (5, 5, 0.8, 1.0, ReputationTier.HUB),
        (5, 5, 0.7, 0.0, ReputationTier.ESTABLISHED),   # centrality must exceed 0.7
        (1, 10, 0.6, 0.0, ReputationTier.CONNECTOR),
        (1, 10, 0.5, 0.0, ReputationTier.EMERGING),     # centrality must exceed 0.5
        (3, 0, 0.0, 0.0, ReputationTier.ESTABLISHED),
        (1, 0, 0.0, 2.5, ReputationTier.ESTABLISHED),
        (1, 0, 0.0, 2.0, ReputationTier.EMERGING),      # influence must exceed 2
        (0, 0, 0.0, 0.0, ReputationTier.EMERGING),
    ],
)
def test_reputation_tier(bridges, reach, centrality, influence, expected):
    assert reputation_tier(bridges, reach, centrality, influence) == expected


def test_tier_rank_order():
    ranks = [t.rank for t in (ReputationTier.HUB, ReputationTier.CONNECTOR,
                              ReputationTier.ESTABLISHED, ReputationTier.EMERGING)]
    assert ranks == sorted(ranks, reverse=True)


# ── Profiles ──────────────────────────────────────────────────────────────────

def test_star_hub_profile():
    communities, G = make_star()
    p = community_impact(G, communities[0], total_communities=6)

    assert p.community_name == "Community H"
    assert p.bridge_count == 7
    assert p.network_reach == 5
    assert p.centrality_score == pytest.approx(1.0)
    assert p.influence_score == pytest.approx(3.5)
    assert p.reputation == ReputationTier.HUB


def test_parallel_bridges_count_separately():
    communities, G = make_star()
    x = next(c for c in communities if c.id == "X")
    p = community_impact(G, x, total_communities=len(communities))

    assert p.bridge_count == 3
    assert p.network_reach == 1
    assert p.influence_score == pytest.approx(2.3)
    assert p.reputation == ReputationTier.ESTABLISHED


def test_isolated_community_is_emerging():
    communities, G = make_star()
    p = community_impact(G, communities[-1], total_communities=len(communities))
    assert (p.bridge_count, p.network_reach, p.centrality_score, p.influence_score) == (0, 0, 0.0, 0.0)
    assert p.reputation == ReputationTier.EMERGING


def test_community_missing_from_graph():
    _, G = make_star()
    p = community_impact(G, node("new"), total_communities=10)
    assert p.bridge_count == 0
    assert p.reputation == ReputationTier.EMERGING


# ── Leaderboard ───────────────────────────────────────────────────────────────

def test_leaderboard_order():
    communities, G = make_star()
    board = network_leaderboard(G, communities)

    assert board[0].community_id == "H"
    assert {board[1].community_id, board[2].community_id} == {"X", "Y"}
    assert board[1].reputation == ReputationTier.ESTABLISHED
    assert all(p.reputation == ReputationTier.EMERGING for p in board[3:])


def test_leaderboard_ties_keep_community_order():
    communities, G = make_star()
    board = network_leaderboard(G, communities)
    assert [p.community_id for p in board[1:3]] == ["X", "Y"]
    assert [p.community_id for p in board[3:8]] == [f"L{i}" for i in range(5)]
    assert board[8].community_id == "W"
    assert [p.community_id for p in network_leaderboard(G, communities)] == [p.community_id for p in board]


def test_leaderboard_limit():
    communities, G = make_star()
    assert len(network_leaderboard(G, communities, limit=3)) == 3
    assert network_leaderboard(G, communities, limit=0) == []
    assert len(network_leaderboard(G, communities)) == 9


def test_leaderboard_skips_failing_profile(monkeypatch):
    communities, G = make_star()
    original = impact_module.community_impact

    def flaky(G, community, total, config):
        if community.id == "X":
            raise RuntimeError("corrupt record")
        return original(G, community, total, config)

    monkeypatch.setattr(impact_module, "community_impact", flaky)
    board = network_leaderboard(G, communities)

    assert "X" not in [p.community_id for p in board]
    assert len(board) == 8


def test_leaderboard_frame():
    communities, G = make_star()
    df = leaderboard_frame(network_leaderboard(G, communities, limit=2))

    assert list(df.columns) == [
        "rank", "community_id", "community_name", "reputation", "bridge_count",
        "network_reach", "centrality_score", "influence_score",
    ]
    assert df["rank"].tolist() == [1, 2]
    assert df.iloc[0]["reputation"] == "hub"


def test_leaderboard_frame_empty():
    assert len(leaderboard_frame([])) == 0
