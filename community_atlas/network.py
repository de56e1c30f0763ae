"""
community_atlas/network.py — The engine's call contracts in one object.

CommunityNetwork wires a CommunityRepository and a BridgeStore to the
detection and metric modules. It has no framework lifecycle: a CLI, a batch
worker or a web service drives it through ordinary method calls.

Writes (detection, mentorship) go through the store. Every analytics call
fetches a fresh snapshot of ACTIVE bridges, builds the network graph and
computes on it without holding any lock, so it may run alongside a detection
batch and at worst sees a slightly stale graph.

Usage:
    from community_atlas.network import CommunityNetwork
    from community_atlas.storage.memory import InMemoryBridgeStore, InMemoryCommunityRepository

    network = CommunityNetwork(InMemoryCommunityRepository(communities), InMemoryBridgeStore())
    network.detect_all_bridges()
    print(network.get_network_leaderboard(5))
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import networkx as nx

from community_atlas.config import DEFAULT_CONFIG, CommunityAtlasConfig
from community_atlas.detection.detector import BridgeDetector, DetectionSummary, PairDetectionResult
from community_atlas.detection.mentorship import MentorshipService
from community_atlas.errors import CommunityNotFoundError
from community_atlas.graph.builder import build_network_graph
from community_atlas.metrics.clusters import detect_clusters
from community_atlas.metrics.impact import community_impact, network_leaderboard
from community_atlas.metrics.network_stats import NetworkStats, compute_network_stats
from community_atlas.metrics.recommendations import recommend_connections
from community_atlas.models import (
    Bridge,
    BridgeStatus,
    Cluster,
    CommunityNode,
    ConnectionRecommendation,
    ImpactProfile,
    utcnow,
)
from community_atlas.storage.base import BridgeStore, CommunityRepository

logger = logging.getLogger(__name__)


@dataclass
class CommunityBridgeView:
    """A bridge with both endpoint communities resolved (None if unknown)."""

    bridge: Bridge
    source: Optional[CommunityNode]
    target: Optional[CommunityNode]


class CommunityNetwork:
    def __init__(
        self,
        communities: CommunityRepository,
        store: BridgeStore,
        config: CommunityAtlasConfig = DEFAULT_CONFIG,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.communities = communities
        self.store = store
        self.config = config
        self.detector = BridgeDetector(communities, store, config, clock)
        self.mentorship = MentorshipService(communities, store, config, clock)

    # ── Snapshot ──────────────────────────────────────────────────────────────

    def _snapshot(self) -> tuple[list[CommunityNode], nx.MultiGraph]:
        communities = self.communities.list_communities(qualifying_only=True)
        bridges = self.store.list_bridges(status=BridgeStatus.ACTIVE)
        return communities, build_network_graph(communities, bridges)

    def _require(self, community_id: str) -> CommunityNode:
        community = self.communities.get(community_id)
        if community is None:
            raise CommunityNotFoundError(community_id)
        return community

    # ── Detection ─────────────────────────────────────────────────────────────

    def detect_bridges_between(self, community_a_id: str, community_b_id: str) -> PairDetectionResult:
        return self.detector.detect_bridges_between(community_a_id, community_b_id)

    def detect_all_bridges(self, max_workers: Optional[int] = None) -> DetectionSummary:
        return self.detector.detect_all_bridges(max_workers)

    # ── Bridges ───────────────────────────────────────────────────────────────

    def get_bridges_for_community(self, community_id: str) -> list[CommunityBridgeView]:
        """
        ACTIVE bridges touching the community, strongest first.

        Raises:
            CommunityNotFoundError: If the community does not exist.
        """
        self._require(community_id)
        bridges = sorted(
            self.store.find_by_community(community_id, status=BridgeStatus.ACTIVE),
            key=lambda b: b.strength,
            reverse=True,
        )
        return [
            CommunityBridgeView(
                bridge=b,
                source=self.communities.get(b.source_id),
                target=self.communities.get(b.target_id),
            )
            for b in bridges
        ]

    def get_network_stats(self) -> NetworkStats:
        return compute_network_stats(
            self.store.list_bridges(status=BridgeStatus.ACTIVE),
            top_n=self.config.stats_top_n,
        )

    def propose_mentorship(
        self,
        mentor_id: str,
        mentee_id: str,
        initiated_by: str,
        notes: Optional[str] = None,
    ) -> Bridge:
        return self.mentorship.propose_mentorship(mentor_id, mentee_id, initiated_by, notes)

    def accept_mentorship(self, bridge_id: str) -> Bridge:
        return self.mentorship.accept_mentorship(bridge_id)

    # ── Analytics ─────────────────────────────────────────────────────────────

    def get_connection_recommendations(
        self,
        community_id: str,
        limit: Optional[int] = None,
    ) -> list[ConnectionRecommendation]:
        source = self._require(community_id)
        communities, G = self._snapshot()
        return recommend_connections(G, source, communities, limit, self.config)

    def calculate_community_impact(self, community_id: str) -> ImpactProfile:
        community = self._require(community_id)
        communities, G = self._snapshot()
        return community_impact(G, community, len(communities), self.config)

    def detect_clusters(self) -> list[Cluster]:
        communities, G = self._snapshot()
        return detect_clusters(G, communities)

    def get_network_leaderboard(self, limit: Optional[int] = None) -> list[ImpactProfile]:
        communities, G = self._snapshot()
        return network_leaderboard(G, communities, limit, self.config)
