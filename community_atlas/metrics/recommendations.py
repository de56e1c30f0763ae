"""
community_atlas/metrics/recommendations.py — Connection recommendations.

Proposes new bridges for a community by scoring every qualifying community it
is not yet connected to. Five independent factors add to the score (and, with
their own weights, to a preview of the bridge strength):

    Factor                      score  strength  condition
    geographic proximity        0.30   0.40      within radius, × (R - d) / R
    same pack type              0.25   0.30      both labelled, equal
    similar size                0.15   0.20      min/max ratio > 0.5, × ratio
    mutual connections          0.20   0.25      × min(mutual / 3, 1)
    complementary pack types    0.10   0.15      pair in COMPLEMENTARY_PACK_PAIRS

Candidates scoring above config.recommendation_min_score are returned, best
first. Weights and thresholds live in CommunityAtlasConfig.
"""

import logging
from typing import Iterable, Optional

import networkx as nx

from community_atlas.config import DEFAULT_CONFIG, CommunityAtlasConfig
from community_atlas.graph.builder import neighbors_of
from community_atlas.graph.geo import distance_between
from community_atlas.models import (
    BridgeType,
    CommunityNode,
    ConnectionRecommendation,
    PackType,
    clamp_unit,
    pack_label,
)

logger = logging.getLogger(__name__)

# Pack-type pairs likely to trade with each other (possible supply chain).
COMPLEMENTARY_PACK_PAIRS = frozenset({
    # Consumer groups can share bulk buying with housing coops.
    frozenset({PackType.CONSUMER_GROUP.value, PackType.HOUSING_COOP.value}),
    # Community bars source local products from consumer groups.
    frozenset({PackType.CONSUMER_GROUP.value, PackType.COMMUNITY_BAR.value}),
})


def are_complementary(a: CommunityNode, b: CommunityNode) -> bool:
    label_a, label_b = pack_label(a.pack_type), pack_label(b.pack_type)
    if label_a is None or label_b is None:
        return False
    return frozenset({label_a, label_b}) in COMPLEMENTARY_PACK_PAIRS


def score_connection(
    G: nx.MultiGraph,
    source: CommunityNode,
    target: CommunityNode,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> ConnectionRecommendation:
    """
    Score the connection potential between two communities.

    Args:
        G:      Network from build_network_graph() (for mutual connections).
        source: Community asking for recommendations.
        target: Candidate.
        config: Factor weights and thresholds.

    Returns:
        ConnectionRecommendation for target, whatever its score.
    """
    score = 0.0
    strength = 0.0
    reasons: list[str] = []
    kinds: list[BridgeType] = []

    # 1. Geographic proximity
    distance = distance_between(source, target)
    if distance is not None and distance <= config.geographic_radius_km:
        proximity = (config.geographic_radius_km - distance) / config.geographic_radius_km
        score += proximity * config.geo_score_weight
        strength += proximity * config.geo_strength_weight
        reasons.append(f"Geographic proximity: {distance:.1f} km ({proximity:.0%})")
        kinds.append(BridgeType.GEOGRAPHIC)

    # 2. Same pack type
    label = pack_label(source.pack_type)
    if label is not None and label == pack_label(target.pack_type):
        score += config.same_type_score_weight
        strength += config.same_type_strength_weight
        reasons.append(f"Same type: {label}")
        kinds.append(BridgeType.THEMATIC)

    # 3. Similar size
    largest = max(source.member_count, target.member_count)
    if largest > 0:
        size_ratio = min(source.member_count, target.member_count) / largest
        if size_ratio > config.size_ratio_min:
            score += size_ratio * config.size_score_weight
            strength += size_ratio * config.size_strength_weight
            reasons.append(
                f"Similar size: {source.member_count} ↔ {target.member_count} members"
            )

    # 4. Mutual connections (friends of friends)
    mutual = len(neighbors_of(G, source.id) & neighbors_of(G, target.id))
    if mutual > 0:
        mutual_factor = min(mutual / config.mutual_saturation, 1.0)
        score += mutual_factor * config.mutual_score_weight
        strength += mutual_factor * config.mutual_strength_weight
        reasons.append(f"{mutual} mutual connections")

    # 5. Complementary pack types
    if are_complementary(source, target):
        score += config.complementary_score_weight
        strength += config.complementary_strength_weight
        reasons.append("Complementary types (possible supply chain)")
        kinds.append(BridgeType.SUPPLY_CHAIN)

    return ConnectionRecommendation(
        target=target,
        score=score,
        reasons=reasons,
        potential_bridge_types=kinds,
        estimated_strength=clamp_unit(strength),
    )


def recommend_connections(
    G: nx.MultiGraph,
    source: CommunityNode,
    candidates: Iterable[CommunityNode],
    limit: Optional[int] = None,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> list[ConnectionRecommendation]:
    """
    Rank new connections for source.

    Args:
        G:          Network from build_network_graph().
        source:     Community asking for recommendations.
        candidates: Qualifying communities to consider. The source itself and
                    communities already linked by an ACTIVE bridge are skipped.
        limit:      Maximum results (default config.default_recommendation_limit).
        config:     Weights and thresholds.

    Returns:
        recommendations: Sorted by score descending (ties keep candidate
                         order), each with score > recommendation_min_score.
    """
    limit = config.default_recommendation_limit if limit is None else limit
    if limit <= 0:
        return []

    connected = neighbors_of(G, source.id)
    recommendations: list[ConnectionRecommendation] = []

    for target in candidates:
        if target.id == source.id or target.id in connected:
            continue
        rec = score_connection(G, source, target, config)
        if rec.score > config.recommendation_min_score:
            recommendations.append(rec)

    recommendations.sort(key=lambda r: r.score, reverse=True)
    logger.debug(
        "%d recommendation candidates for %s above %.2f.",
        len(recommendations), source.id, config.recommendation_min_score,
    )
    return recommendations[:limit]
