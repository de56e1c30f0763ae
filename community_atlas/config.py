"""
community_atlas/config.py — All tunable parameters for the network engine.

No threshold should ever be hardcoded in a detection or metric module. Every
strength constant, factor weight and tier boundary lives here so that
calibration changes are a single-file diff.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ENV_PREFIX = "COMMUNITY_ATLAS_"


@dataclass(frozen=True)
class CommunityAtlasConfig:
    """
    Immutable configuration for bridge detection and network analytics.

    Override by constructing a new CommunityAtlasConfig with the desired
    values, or from the environment with config_from_env().
    """

    # ── Geographic bridges ────────────────────────────────────────────────────
    geographic_radius_km: float = 50.0
    # Communities further apart than this never get a GEOGRAPHIC bridge and
    # receive no proximity credit in recommendations.

    geographic_min_strength: float = 0.2
    # Floor for GEOGRAPHIC strength. A pair exactly at the radius scores this.

    # ── Thematic bridges ──────────────────────────────────────────────────────
    thematic_strength: float = 0.7
    # Fixed strength for two communities sharing the same pack type.

    # ── Upsert hysteresis ─────────────────────────────────────────────────────
    update_threshold: float = 0.1
    # An existing bridge is rewritten only if |old - new| strength exceeds this.

    # ── Mentorship ────────────────────────────────────────────────────────────
    mentorship_maturity_months: float = 12.0
    # Mentor age at which a mentorship bridge reaches full strength.

    days_per_month: float = 30.0
    # Month length used when converting a mentor's age to months.

    # ── Recommendations ───────────────────────────────────────────────────────
    recommendation_min_score: float = 0.3
    # Candidates must score strictly above this to be recommended.

    default_recommendation_limit: int = 5

    geo_score_weight: float = 0.30
    geo_strength_weight: float = 0.40

    same_type_score_weight: float = 0.25
    same_type_strength_weight: float = 0.30

    size_score_weight: float = 0.15
    size_strength_weight: float = 0.20
    size_ratio_min: float = 0.5
    # Size similarity counts only when min/max member ratio exceeds this.

    mutual_score_weight: float = 0.20
    mutual_strength_weight: float = 0.25
    mutual_saturation: int = 3
    # Number of mutual connections that earns the full mutual factor.

    complementary_score_weight: float = 0.10
    complementary_strength_weight: float = 0.15

    # ── Reputation tiers ──────────────────────────────────────────────────────
    hub_min_bridges: int = 5
    hub_min_centrality: float = 0.7
    # hub: bridge_count >= hub_min_bridges AND centrality > hub_min_centrality.

    connector_min_reach: int = 10
    connector_min_centrality: float = 0.5
    # connector: reach >= connector_min_reach AND centrality > connector_min_centrality.

    established_min_bridges: int = 3
    established_min_influence: float = 2.0
    # established: bridges >= established_min_bridges OR influence > established_min_influence.

    default_leaderboard_limit: int = 10

    # ── Network statistics ────────────────────────────────────────────────────
    stats_top_n: int = 10
    # Number of strongest bridges listed (and averaged) by get_network_stats().

    # ── Batch detection ───────────────────────────────────────────────────────
    detection_workers: int = 4
    # Threads used by detect_all_bridges(). 1 runs pairs sequentially.


# Shared default; pass a modified copy to override.
DEFAULT_CONFIG = CommunityAtlasConfig()


def config_from_env(
    environ: dict[str, str] | None = None,
    base: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> CommunityAtlasConfig:
    """
    Build a config from COMMUNITY_ATLAS_<FIELD> environment variables.

    Each field of CommunityAtlasConfig may be overridden by an upper-cased
    variable, e.g. COMMUNITY_ATLAS_UPDATE_THRESHOLD=0.2. Values are coerced to
    the type of the field's default. Unknown variables are ignored.

    Args:
        environ: Mapping to read from (defaults to os.environ).
        base:    Config providing the values that are not overridden.

    Returns:
        A new CommunityAtlasConfig.

    Raises:
        ValueError: If a variable cannot be coerced to the field's type.
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, object] = {}

    for f in dataclasses.fields(base):
        key = ENV_PREFIX + f.name.upper()
        if key not in environ:
            continue
        default = getattr(base, f.name)
        raw = environ[key].strip()
        try:
            overrides[f.name] = type(default)(raw)
        except ValueError as exc:
            raise ValueError(f"{key}={raw!r} is not a valid {type(default).__name__}") from exc

    if overrides:
        logger.info("Config overrides from environment: %s", sorted(overrides))
    return dataclasses.replace(base, **overrides)
