"""
community_atlas/graph/builder.py — The in-memory network view.

Every analytics operation starts here: the ACTIVE bridges fetched at call time
are folded into an undirected nx.MultiGraph. A MultiGraph (not a Graph) is
used because two communities may be linked by several bridges of different
kinds, and bridge counts and influence sums must see each of them:

    G.degree(n)                    → ACTIVE bridges touching n
    G.degree(n, weight="strength") → sum of their strengths

Topological questions (reach, clusters, cohesion) only care about whether a
pair is connected, so they collapse parallel edges where needed.
"""

import logging
from typing import Iterable

import networkx as nx

from community_atlas.models import Bridge, CommunityNode, pack_label

logger = logging.getLogger(__name__)


def build_network_graph(
    communities: Iterable[CommunityNode],
    bridges: Iterable[Bridge],
) -> nx.MultiGraph:
    """
    Build the undirected network from communities and their ACTIVE bridges.

    Args:
        communities: Nodes to include, with or without bridges.
        bridges:     Any bridges; only ACTIVE ones become edges.

    Returns:
        G: nx.MultiGraph.
           Node attributes: name, pack_type (plain string or None), member_count.
           Edge key: bridge kind value; edge attributes: strength,
           shared_members, bridge_id.

    Notes:
        - Bridges whose endpoints are not among `communities` still add those
          endpoints as bare nodes, so reachability follows them.
        - Self-loops are ignored.
    """
    G = nx.MultiGraph()

    for c in communities:
        G.add_node(
            c.id,
            name=c.name,
            pack_type=pack_label(c.pack_type),
            member_count=c.member_count,
        )

    skipped = 0
    for b in bridges:
        if not b.is_active:
            continue
        if b.source_id == b.target_id:
            skipped += 1
            continue
        G.add_edge(
            b.source_id,
            b.target_id,
            key=b.kind.value,
            strength=b.strength,
            shared_members=b.shared_members,
            bridge_id=b.id,
        )

    if skipped:
        logger.warning("Ignored %d self-loop bridges while building the network.", skipped)
    logger.debug(
        "Network graph built: %d nodes, %d active bridges.",
        G.number_of_nodes(),
        G.number_of_edges(),
    )
    return G


def neighbors_of(G: nx.MultiGraph, community_id: str) -> set[str]:
    """Communities linked to community_id by any ACTIVE bridge."""
    if community_id not in G:
        return set()
    return set(G.neighbors(community_id))
