"""
community_atlas/metrics/clusters.py — Community ecosystems (connected components).

A cluster is a connected component of >= 2 qualifying communities in the
network of ACTIVE bridges. Components are extracted by depth-first traversal
(nx.dfs_preorder_nodes, which keeps an explicit stack and so has no recursion
limit on large networks), seeded in community order.

Per cluster:
    total_members       sum of member counts
    dominant_pack_type  most frequent pack type; ties go to the type seen
                        first in community order
    cohesion_score      connected pairs inside the cluster / (n·(n-1)/2),
                        i.e. density relative to a complete graph

Cohesion counts connected *pairs*, not bridges: two communities linked by a
GEOGRAPHIC and a THEMATIC bridge contribute one pair, which keeps the score
within [0, 1].
"""

import logging
from collections import Counter
from typing import Iterable

import networkx as nx

from community_atlas.models import Cluster, CommunityNode, pack_label

logger = logging.getLogger(__name__)

UNKNOWN_PACK_TYPE = "UNKNOWN"


def _dominant_pack_type(members: list[CommunityNode]) -> str:
    counts = Counter(pack_label(c.pack_type) or UNKNOWN_PACK_TYPE for c in members)
    # Counter preserves insertion order and max() returns the first maximum.
    return max(counts, key=counts.get)


def cohesion_score(G: nx.MultiGraph, members: Iterable[str]) -> float:
    """Density of the simple graph induced on members; 0.0 below two members."""
    nodes = list(members)
    if len(nodes) < 2:
        return 0.0
    return float(nx.density(nx.Graph(G.subgraph(nodes))))


def detect_clusters(
    G: nx.MultiGraph,
    communities: list[CommunityNode],
) -> list[Cluster]:
    """
    Find every ecosystem of two or more connected communities.

    Args:
        G:           Network from build_network_graph().
        communities: Qualifying communities, in a stable order. Nodes of G not
                     in this list are ignored.

    Returns:
        clusters: Cluster list sorted by total_members descending. Equal
                  totals keep discovery order. Singletons are never returned.
    """
    by_id = {c.id: c for c in communities}
    H = G.subgraph(by_id)

    visited: set[str] = set()
    clusters: list[Cluster] = []

    for community in communities:
        if community.id in visited or community.id not in H:
            continue
        component = set(nx.dfs_preorder_nodes(H, community.id))
        visited |= component
        if len(component) < 2:
            continue

        members = [c for c in communities if c.id in component]
        dominant = _dominant_pack_type(members)
        clusters.append(
            Cluster(
                id=f"cluster-{len(clusters)}",
                name=f"{dominant} ecosystem ({len(members)} communities)",
                communities=[c.id for c in members],
                total_members=sum(c.member_count for c in members),
                dominant_pack_type=dominant,
                cohesion_score=cohesion_score(H, component),
            )
        )

    clusters.sort(key=lambda cl: cl.total_members, reverse=True)
    logger.debug("Cluster detection complete: %d clusters.", len(clusters))
    return clusters
