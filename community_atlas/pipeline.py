"""
community_atlas/pipeline.py — Single-call network pipeline.

Provides run_network_analysis(), which runs (optional) batch bridge detection
followed by every network-wide analytic in one pass, and
run_pipeline_from_csv(), which does the same over a CSV snapshot directory
and writes the updated bridges back.

Usage:
    from community_atlas.pipeline import run_pipeline_from_csv
    result = run_pipeline_from_csv("data/")
    print(result.stats.total_bridges, len(result.clusters))
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from community_atlas.config import DEFAULT_CONFIG, CommunityAtlasConfig
from community_atlas.detection.detector import DetectionSummary
from community_atlas.errors import DuplicateBridgeError
from community_atlas.metrics.network_stats import NetworkStats
from community_atlas.models import Cluster, ImpactProfile, utcnow
from community_atlas.network import CommunityNetwork
from community_atlas.reports.network_report import export_report_markdown
from community_atlas.storage.csv_snapshot import (
    BRIDGES_FILE,
    COMMUNITIES_FILE,
    MEMBERS_FILE,
    load_bridges_csv,
    load_communities_csv,
    save_bridges_csv,
)
from community_atlas.storage.memory import InMemoryBridgeStore, InMemoryCommunityRepository

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """
    Complete output of one pipeline run.

    detection is None when detection was skipped.
    """

    run_at: datetime
    communities: int
    detection: Optional[DetectionSummary]
    stats: NetworkStats
    clusters: list[Cluster]
    leaderboard: list[ImpactProfile]
    report_path: Optional[str] = None
    bridges_path: Optional[str] = None


def run_network_analysis(
    network: CommunityNetwork,
    detect: bool = True,
    leaderboard_limit: Optional[int] = None,
    report_path: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> PipelineResult:
    """
    Execute detection and network-wide analytics in dependency order.

    Order:
        1. Batch bridge detection (optional)
        2. Network statistics
        3. Cluster detection
        4. Leaderboard
        5. Markdown report (optional)

    Args:
        network:           Facade over the stores to analyze.
        detect:            Run detect_all_bridges() first.
        leaderboard_limit: Entries kept (default config.default_leaderboard_limit).
        report_path:       If provided, export a Markdown report there.
        max_workers:       Detection threads (default config.detection_workers).

    Returns:
        PipelineResult.
    """
    logger.info("Network pipeline starting.")
    run_at = utcnow()

    detection = None
    if detect:
        detection = network.detect_all_bridges(max_workers)
        logger.info(
            "Phase 1/5: Detection — %d created, %d updated, %d failed.",
            detection.created, detection.updated, detection.failed,
        )
    else:
        logger.info("Phase 1/5: Detection skipped.")

    stats = network.get_network_stats()
    logger.info("Phase 2/5: Stats — %d active bridges.", stats.total_bridges)

    clusters = network.detect_clusters()
    logger.info("Phase 3/5: Clusters — %d ecosystems found.", len(clusters))

    leaderboard = network.get_network_leaderboard(leaderboard_limit)
    logger.info("Phase 4/5: Leaderboard — %d entries.", len(leaderboard))

    result = PipelineResult(
        run_at=run_at,
        communities=len(network.communities.list_communities(qualifying_only=True)),
        detection=detection,
        stats=stats,
        clusters=clusters,
        leaderboard=leaderboard,
    )

    if report_path:
        export_report_markdown(result, report_path)
        result.report_path = report_path
        logger.info("Phase 5/5: Markdown report exported to %s.", report_path)
    else:
        logger.info("Phase 5/5: Markdown export skipped (no report_path).")

    logger.info("Network pipeline complete.")
    return result


def load_network_from_csv(
    data_dir: str,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> CommunityNetwork:
    """
    Build an in-memory CommunityNetwork from the CSV files in data_dir.

    A bridge row repeating an unordered pair + kind already loaded is logged
    and dropped; the first row in file order wins.
    """
    communities = load_communities_csv(
        os.path.join(data_dir, COMMUNITIES_FILE),
        os.path.join(data_dir, MEMBERS_FILE),
    )
    store = InMemoryBridgeStore()
    for bridge in load_bridges_csv(os.path.join(data_dir, BRIDGES_FILE)):
        try:
            store.create(bridge)
        except DuplicateBridgeError as exc:
            logger.warning("Skipping bridge %s: %s", bridge.id, exc)
    return CommunityNetwork(InMemoryCommunityRepository(communities), store, config)


def save_network_bridges(network: CommunityNetwork, data_dir: str) -> str:
    """Write every bridge (any status) back to data_dir/bridges.csv."""
    return save_bridges_csv(
        network.store.list_bridges(status=None),
        os.path.join(data_dir, BRIDGES_FILE),
    )


def run_pipeline_from_csv(
    data_dir: str,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
    detect: bool = True,
    save_bridges: bool = True,
    leaderboard_limit: Optional[int] = None,
    report_path: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> PipelineResult:
    """
    run_network_analysis() over a CSV snapshot directory.

    When detection ran and save_bridges is True, the updated bridge set is
    written back to data_dir/bridges.csv.
    """
    network = load_network_from_csv(data_dir, config)
    result = run_network_analysis(
        network,
        detect=detect,
        leaderboard_limit=leaderboard_limit,
        report_path=report_path,
        max_workers=max_workers,
    )
    if detect and save_bridges:
        result.bridges_path = save_network_bridges(network, data_dir)
    return result
