"""
community_atlas/metrics/reachability.py — Network reach (BFS).

A community's reach is the number of other communities it can get to by
following ACTIVE bridges in either direction, any number of hops. Edge
weights are ignored: reach is purely topological.

Reach is symmetric transitively: if B is in A's reach, A is in B's, because
both lie in the same connected component of the undirected network.
"""

import logging

import networkx as nx

logger = logging.getLogger(__name__)


def network_reach(G: nx.MultiGraph, community_id: str) -> int:
    """
    Count the communities reachable from community_id.

    Algorithm (O(V + E)):
        Breadth-first traversal from the node with nx.bfs_edges(). Each BFS
        tree edge discovers exactly one new node, so the number of tree edges
        equals the number of distinct nodes reached, start excluded.

    Args:
        G:            Network from build_network_graph().
        community_id: Start node.

    Returns:
        reach: int >= 0. 0 for isolated or unknown communities.
    """
    if community_id not in G:
        return 0
    return sum(1 for _ in nx.bfs_edges(G, community_id))


def reachable_set(G: nx.MultiGraph, community_id: str) -> set[str]:
    """The communities counted by network_reach()."""
    if community_id not in G:
        return set()
    return {v for _, v in nx.bfs_edges(G, community_id)}
