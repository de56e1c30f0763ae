"""
community_atlas/metrics/network_stats.py — Network-wide bridge statistics.

Count, group-by-kind and top-N-by-strength are computed as an in-memory
reduction over one fetched edge set, so the numbers do not depend on the
storage backend.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from community_atlas.models import Bridge, BridgeType

logger = logging.getLogger(__name__)


@dataclass
class NetworkStats:
    """
    Fields:
        total_bridges:     ACTIVE bridges in the network.
        bridges_by_type:   BridgeType value → ACTIVE count (kinds with 0 omitted).
        strongest_bridges: Top-N ACTIVE bridges by strength, descending.
        average_strength:  Mean strength of strongest_bridges (0.0 if none).
    """

    total_bridges: int
    bridges_by_type: dict[str, int]
    strongest_bridges: list[Bridge] = field(default_factory=list)
    average_strength: float = 0.0


def compute_network_stats(bridges: Iterable[Bridge], top_n: int = 10) -> NetworkStats:
    """
    Summarize the ACTIVE bridges of the network.

    Args:
        bridges: Any bridges; non-ACTIVE ones are ignored.
        top_n:   Size of the strongest-bridges list.

    Returns:
        NetworkStats.
    """
    active = [b for b in bridges if b.is_active]
    by_type = Counter(b.kind.value for b in active)
    strongest = sorted(active, key=lambda b: b.strength, reverse=True)[:max(top_n, 0)]
    average = float(np.mean([b.strength for b in strongest])) if strongest else 0.0

    logger.debug("Network stats: %d active bridges across %d kinds.", len(active), len(by_type))
    return NetworkStats(
        total_bridges=len(active),
        bridges_by_type={kind.value: by_type[kind.value] for kind in BridgeType if by_type[kind.value]},
        strongest_bridges=strongest,
        average_strength=average,
    )
