"""
community_atlas/metrics/centrality.py — Normalized degree centrality.

A cheap stand-in for betweenness: the ACTIVE bridges touching a community
relative to the most it could have with one bridge to every other qualifying
community. Parallel bridges of different kinds each count, so the ratio is
clamped to 1.
"""

import networkx as nx


def degree_centrality(G: nx.MultiGraph, community_id: str, total_communities: int) -> float:
    """
    bridge_count / (total_communities - 1), clamped to [0, 1].

    Args:
        G:                 Network from build_network_graph().
        community_id:      Node to score.
        total_communities: Number of qualifying communities in the network.

    Returns:
        0.0 when fewer than two communities qualify or the node is unknown.
    """
    if total_communities < 2 or community_id not in G:
        return 0.0
    return min(G.degree(community_id) / (total_communities - 1), 1.0)
