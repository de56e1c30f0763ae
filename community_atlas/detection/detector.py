"""
community_atlas/detection/detector.py — Pairwise bridge detection.

Three independent heuristics decide which bridges link two communities:

    GEOGRAPHIC   both located and <= 50 km apart; strength max(0.2, 1 - d/50)
    THEMATIC     same pack type; fixed strength 0.7
    SPONTANEOUS  shared members; strength min(shared / smaller size, 1)

Every match is upserted through the BridgeStore with hysteresis: an existing
bridge is rewritten only when its strength moves by more than
config.update_threshold, so daily re-detection does not rewrite every edge
for insignificant fluctuations.

The batch entry point, detect_all_bridges(), checks every unordered pair of
qualifying communities on a thread pool. Pairs share no state except the
store, and one failing pair is logged and skipped without aborting the run.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from itertools import combinations
from typing import Callable, Optional

from community_atlas.config import DEFAULT_CONFIG, CommunityAtlasConfig
from community_atlas.errors import CommunityNotFoundError, StoreError
from community_atlas.graph.geo import distance_between
from community_atlas.models import (
    Bridge,
    BridgeStatus,
    BridgeType,
    CommunityNode,
    UpsertOutcome,
    pack_label,
    utcnow,
)
from community_atlas.storage.base import BridgeStore, CommunityRepository

logger = logging.getLogger(__name__)


@dataclass
class PairDetectionResult:
    """
    Outcome of detect_bridges_between() for one pair.

    Fields:
        community_a, community_b: The pair, in call order.
        created:   Number of bridges newly created.
        updated:   Number of existing bridges rewritten.
        outcomes:  BridgeType → UpsertOutcome for every kind that matched.
    """

    community_a: str
    community_b: str
    created: int = 0
    updated: int = 0
    outcomes: dict[BridgeType, UpsertOutcome] = field(default_factory=dict)

    def record(self, kind: BridgeType, outcome: UpsertOutcome) -> None:
        self.outcomes[kind] = outcome
        if outcome == UpsertOutcome.CREATED:
            self.created += 1
        elif outcome == UpsertOutcome.UPDATED:
            self.updated += 1


@dataclass
class DetectionSummary:
    """Counters of one detect_all_bridges() run."""

    communities: int = 0
    pairs_checked: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    failures: list[tuple[str, str, str]] = field(default_factory=list)


def geographic_strength(
    distance_km: float,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> float:
    """Closer is stronger: 1.0 at 0 km, floored at geographic_min_strength."""
    return min(
        1.0,
        max(config.geographic_min_strength, 1 - distance_km / config.geographic_radius_km),
    )


def spontaneous_strength(shared: int, size_a: int, size_b: int) -> float:
    """Shared members relative to the smaller community, capped at 1."""
    smaller = min(size_a, size_b)
    if shared <= 0 or smaller <= 0:
        return 0.0
    return min(shared / smaller, 1.0)


class BridgeDetector:
    """
    Detects bridges between communities and writes them through a BridgeStore.

    Args:
        communities: Read-only community lookup.
        store:       Bridge persistence.
        config:      Thresholds and strengths.
        clock:       Returns "now" as an aware datetime (injectable for tests).
    """

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
        self.clock = clock

    # ── Heuristics ────────────────────────────────────────────────────────────

    def candidate_bridges(
        self,
        a: CommunityNode,
        b: CommunityNode,
    ) -> list[tuple[BridgeType, float, int]]:
        """
        Evaluate every auto-detectable kind for a pair.

        Returns:
            List of (kind, strength, shared_members) for each matching rule.
            Missing coordinates or pack types silently skip that kind.
        """
        found: list[tuple[BridgeType, float, int]] = []

        distance = distance_between(a, b)
        if distance is not None and distance <= self.config.geographic_radius_km:
            found.append(
                (BridgeType.GEOGRAPHIC, geographic_strength(distance, self.config), 0)
            )

        label_a, label_b = pack_label(a.pack_type), pack_label(b.pack_type)
        if label_a is not None and label_a == label_b:
            found.append((BridgeType.THEMATIC, self.config.thematic_strength, 0))

        shared = len(a.member_ids & b.member_ids)
        if shared > 0:
            strength = spontaneous_strength(shared, a.member_count, b.member_count)
            found.append((BridgeType.SPONTANEOUS, strength, shared))

        return found

    # ── Upsert ────────────────────────────────────────────────────────────────

    def create_or_update_bridge(
        self,
        source_id: str,
        target_id: str,
        kind: BridgeType,
        strength: float,
        shared_members: int = 0,
    ) -> UpsertOutcome:
        """
        Idempotent upsert for the unordered pair + kind.

        - No bridge yet           → create it ACTIVE            → CREATED
        - |old - new| > threshold → rewrite strength, members,
                                    timestamps; force ACTIVE     → UPDATED
        - otherwise               → no write                    → UNCHANGED

        Store failures are logged and reported as UNCHANGED.
        """
        now = self.clock()
        try:
            existing = self.store.find_by_pair(source_id, target_id, kind)

            if existing is not None:
                if abs(existing.strength - strength) > self.config.update_threshold:
                    self.store.update(
                        existing.id,
                        strength=strength,
                        shared_members=shared_members,
                        last_interaction_at=now,
                        updated_at=now,
                        status=BridgeStatus.ACTIVE,
                    )
                    logger.debug(
                        "Updated %s bridge %s–%s: %.2f → %.2f.",
                        kind.value, source_id, target_id, existing.strength, strength,
                    )
                    return UpsertOutcome.UPDATED
                return UpsertOutcome.UNCHANGED

            self.store.create(
                Bridge(
                    source_id=source_id,
                    target_id=target_id,
                    kind=kind,
                    strength=strength,
                    shared_members=shared_members,
                    status=BridgeStatus.ACTIVE,
                    last_interaction_at=now,
                    created_at=now,
                    updated_at=now,
                )
            )
        except StoreError as exc:
            logger.error(
                "Failed to create/update %s bridge %s–%s: %s",
                kind.value, source_id, target_id, exc,
            )
            return UpsertOutcome.UNCHANGED

        logger.debug(
            "Created %s bridge between %s and %s (strength: %.2f).",
            kind.value, source_id, target_id, strength,
        )
        return UpsertOutcome.CREATED

    # ── Pair and batch detection ──────────────────────────────────────────────

    def _require(self, community_id: str) -> CommunityNode:
        community = self.communities.get(community_id)
        if community is None:
            raise CommunityNotFoundError(community_id)
        return community

    def detect_bridges_between(self, community_a_id: str, community_b_id: str) -> PairDetectionResult:
        """
        Detect and upsert every auto-detectable bridge between two communities.

        Raises:
            CommunityNotFoundError: If either id is unknown.
        """
        result = PairDetectionResult(community_a_id, community_b_id)
        if community_a_id == community_b_id:
            logger.warning("Refusing to detect bridges of %s with itself.", community_a_id)
            return result

        a = self._require(community_a_id)
        b = self._require(community_b_id)

        for kind, strength, shared in self.candidate_bridges(a, b):
            outcome = self.create_or_update_bridge(a.id, b.id, kind, strength, shared)
            result.record(kind, outcome)
        return result

    def detect_all_bridges(self, max_workers: Optional[int] = None) -> DetectionSummary:
        """
        Run detect_bridges_between() over every unordered pair of qualifying communities.

        Pairs are enumerated with itertools.combinations in repository order
        and dispatched to a ThreadPoolExecutor with max_workers threads
        (default config.detection_workers; 1 runs inline). A pair that raises
        is logged, counted in summary.failed and skipped.

        Returns:
            DetectionSummary with created / updated / failed counters.
        """
        started = time.monotonic()
        workers = max_workers or self.config.detection_workers
        communities = self.communities.list_communities(qualifying_only=True)
        pairs = [(a.id, b.id) for a, b in combinations(communities, 2)]

        summary = DetectionSummary(communities=len(communities))
        logger.info(
            "Starting bridge detection: %d communities, %d pairs, %d workers.",
            len(communities), len(pairs), workers,
        )

        def _collect(pair: tuple[str, str], run: Callable[[], PairDetectionResult]) -> None:
            summary.pairs_checked += 1
            try:
                pair_result = run()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Bridge detection failed for %s–%s: %s", pair[0], pair[1], exc)
                summary.failed += 1
                summary.failures.append((pair[0], pair[1], str(exc)))
                return
            summary.created += pair_result.created
            summary.updated += pair_result.updated

        if workers <= 1:
            for pair in pairs:
                _collect(pair, lambda p=pair: self.detect_bridges_between(*p))
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures_to_pair = {
                    executor.submit(self.detect_bridges_between, a, b): (a, b)
                    for a, b in pairs
                }
                for future in as_completed(futures_to_pair):
                    _collect(futures_to_pair[future], future.result)

        summary.elapsed_seconds = time.monotonic() - started
        logger.info(
            "Bridge detection complete: %d new bridges detected, %d bridges updated, "
            "%d pairs failed (%.1fs).",
            summary.created, summary.updated, summary.failed, summary.elapsed_seconds,
        )
        return summary
