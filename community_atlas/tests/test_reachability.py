"""
community_atlas/tests/test_reachability.py — Tests for network reach and centrality.

Tests verify:
- Reach counts distinct communities over any number of hops.
- Reach is 0 for isolated and unknown communities, and symmetric within a component.
- Degree centrality is bridge_count / (N - 1), clamped to [0, 1].
"""

import pytest

from community_atlas.graph.builder import build_network_graph
from community_atlas.metrics.centrality import degree_centrality
from community_atlas.metrics.reachability import network_reach, reachable_set
from community_atlas.models import Bridge, BridgeType, CommunityNode, PackType


# ── Helpers ───────────────────────────────────────────────────────────────────

def make_chain_graph():
    """
    A ── B ══ C      D (isolated)

    B–C carries two bridges of different kinds.
    """
    nodes = [CommunityNode(id=c, name=c, pack_type=PackType.SOCIAL_CENTER) for c in "ABCD"]
    bridges = [
        Bridge("A", "B", BridgeType.GEOGRAPHIC, 0.9),
        Bridge("B", "C", BridgeType.GEOGRAPHIC, 0.8),
        Bridge("B", "C", BridgeType.THEMATIC, 0.7),
    ]
    return build_network_graph(nodes, bridges)


# ── Reach ─────────────────────────────────────────────────────────────────────

def test_reach_counts_multi_hop():
    G = make_chain_graph()
    assert network_reach(G, "A") == 2
    assert reachable_set(G, "A") == {"B", "C"}


def test_reach_counts_each_community_once():
    G = make_chain_graph()
    assert network_reach(G, "B") == 2


def test_reach_isolated_and_unknown():
    G = make_chain_graph()
    assert network_reach(G, "D") == 0
    assert network_reach(G, "Z") == 0
    assert reachable_set(G, "Z") == set()


def test_reach_is_symmetric():
    G = make_chain_graph()
    assert "A" in reachable_set(G, "C")
    assert "C" in reachable_set(G, "A")


# ── Centrality ────────────────────────────────────────────────────────────────

def test_degree_centrality():
    G = make_chain_graph()
    assert degree_centrality(G, "A", 4) == pytest.approx(1 / 3)
    assert degree_centrality(G, "B", 4) == pytest.approx(1.0)
    assert degree_centrality(G, "D", 4) == 0.0


def test_centrality_clamped_with_parallel_bridges():
    G = make_chain_graph()
    # C has two bridges but only one possible peer when N = 2.
    assert degree_centrality(G, "C", 2) == 1.0


def test_centrality_needs_two_communities():
    G = make_chain_graph()
    assert degree_centrality(G, "A", 1) == 0.0
    assert degree_centrality(G, "A", 0) == 0.0
    assert degree_centrality(G, "unknown", 4) == 0.0
