"""
community_atlas/metrics/impact.py — Community impact profiles and leaderboard.

Combines the other network metrics into one profile per community:

    bridge_count     ACTIVE bridges touching the community
    network_reach    communities reachable by BFS (metrics.reachability)
    centrality       normalized degree (metrics.centrality)
    influence        sum of the strengths of its ACTIVE bridges

and assigns a reputation tier, first match wins:

    hub          bridge_count >= 5  AND centrality > 0.7
    connector    network_reach >= 10 AND centrality > 0.5
    established  bridge_count >= 3  OR  influence > 2
    emerging     otherwise

The leaderboard orders communities by tier (hub > connector > established >
emerging), then influence. Python's sort is stable, so equal (tier,
influence) pairs keep community order across repeated calls.
"""

import logging
from typing import Optional

import networkx as nx
import pandas as pd

from community_atlas.config import DEFAULT_CONFIG, CommunityAtlasConfig
from community_atlas.metrics.centrality import degree_centrality
from community_atlas.metrics.reachability import network_reach
from community_atlas.models import CommunityNode, ImpactProfile, ReputationTier

logger = logging.getLogger(__name__)


def reputation_tier(
    bridge_count: int,
    reach: int,
    centrality: float,
    influence: float,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> ReputationTier:
    if bridge_count >= config.hub_min_bridges and centrality > config.hub_min_centrality:
        return ReputationTier.HUB
    if reach >= config.connector_min_reach and centrality > config.connector_min_centrality:
        return ReputationTier.CONNECTOR
    if bridge_count >= config.established_min_bridges or influence > config.established_min_influence:
        return ReputationTier.ESTABLISHED
    return ReputationTier.EMERGING


def community_impact(
    G: nx.MultiGraph,
    community: CommunityNode,
    total_communities: int,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> ImpactProfile:
    """
    Compute the impact profile of one community.

    Args:
        G:                 Network from build_network_graph().
        community:         Community to profile.
        total_communities: Qualifying communities (for centrality).
        config:            Tier thresholds.

    Returns:
        ImpactProfile. A community with no bridges is 'emerging' with zeros.
    """
    if community.id in G:
        bridge_count = int(G.degree(community.id))
        influence = float(G.degree(community.id, weight="strength"))
    else:
        bridge_count, influence = 0, 0.0

    reach = network_reach(G, community.id)
    centrality = degree_centrality(G, community.id, total_communities)

    return ImpactProfile(
        community_id=community.id,
        community_name=community.name,
        bridge_count=bridge_count,
        network_reach=reach,
        centrality_score=centrality,
        influence_score=influence,
        reputation=reputation_tier(bridge_count, reach, centrality, influence, config),
    )


def network_leaderboard(
    G: nx.MultiGraph,
    communities: list[CommunityNode],
    limit: Optional[int] = None,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> list[ImpactProfile]:
    """
    Rank every qualifying community by reputation tier, then influence.

    A community whose profile cannot be computed is logged and left out;
    the rest of the leaderboard is still returned.

    Args:
        G:           Network from build_network_graph().
        communities: Qualifying communities in a stable order.
        limit:       Maximum entries (default config.default_leaderboard_limit).
        config:      Tier thresholds.

    Returns:
        Top `limit` ImpactProfiles.
    """
    limit = config.default_leaderboard_limit if limit is None else limit
    total = len(communities)

    impacts: list[ImpactProfile] = []
    for community in communities:
        try:
            impacts.append(community_impact(G, community, total, config))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Impact computation failed for %s: %s", community.id, exc)

    impacts.sort(key=lambda p: (p.reputation.rank, p.influence_score), reverse=True)
    return impacts[:max(limit, 0)]


def leaderboard_frame(profiles: list[ImpactProfile]) -> pd.DataFrame:
    """Leaderboard as a DataFrame (one row per profile, rank column 1-based)."""
    df = pd.DataFrame(
        [
            {
                "rank": i + 1,
                "community_id": p.community_id,
                "community_name": p.community_name,
                "reputation": p.reputation.value,
                "bridge_count": p.bridge_count,
                "network_reach": p.network_reach,
                "centrality_score": round(p.centrality_score, 3),
                "influence_score": round(p.influence_score, 3),
            }
            for i, p in enumerate(profiles)
        ],
        columns=[
            "rank", "community_id", "community_name", "reputation", "bridge_count",
            "network_reach", "centrality_score", "influence_score",
        ],
    )
    return df
