"""
community_atlas/models.py — Core record types of the community network.

CommunityNode is owned by the surrounding application and is read-only here.
Bridge is the only record this engine writes. Clusters, impact profiles and
recommendations are derived per call and never persisted.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class PackType(str, Enum):
    """Organizational focus of a community (its "pack")."""

    CONSUMER_GROUP = "CONSUMER_GROUP"
    HOUSING_COOP = "HOUSING_COOP"
    COMMUNITY_BAR = "COMMUNITY_BAR"
    SOCIAL_CENTER = "SOCIAL_CENTER"
    WORKER_COOP = "WORKER_COOP"
    NEIGHBORHOOD_ASSOCIATION = "NEIGHBORHOOD_ASSOCIATION"
    TRANSITION_TOWN = "TRANSITION_TOWN"
    ECOVILLAGE = "ECOVILLAGE"
    SOLIDARITY_NETWORK = "SOLIDARITY_NETWORK"
    CULTURAL_SPACE = "CULTURAL_SPACE"


class BridgeType(str, Enum):
    GEOGRAPHIC = "GEOGRAPHIC"
    THEMATIC = "THEMATIC"
    SUPPLY_CHAIN = "SUPPLY_CHAIN"
    MENTORSHIP = "MENTORSHIP"
    FEDERATION = "FEDERATION"
    SPONTANEOUS = "SPONTANEOUS"


class BridgeStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class ReputationTier(str, Enum):
    HUB = "hub"
    CONNECTOR = "connector"
    ESTABLISHED = "established"
    EMERGING = "emerging"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {
    ReputationTier.HUB: 4,
    ReputationTier.CONNECTOR: 3,
    ReputationTier.ESTABLISHED: 2,
    ReputationTier.EMERGING: 1,
}


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def clamp_unit(value: float) -> float:
    """Clamp a strength-like value into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


def pack_label(pack_type: Optional[str]) -> Optional[str]:
    """Plain-string form of a pack type, whether PackType or raw label."""
    if pack_type is None:
        return None
    return pack_type.value if isinstance(pack_type, Enum) else str(pack_type)


def parse_pack_type(raw: Optional[str]) -> Optional[str]:
    """PackType for known labels, the stripped string otherwise, None if blank."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        return PackType(text)
    except ValueError:
        return text


def pair_key(a: str, b: str, kind: BridgeType) -> tuple[str, str, BridgeType]:
    """Canonical key of a bridge: (A, B, kind) and (B, A, kind) collide."""
    lo, hi = (a, b) if a <= b else (b, a)
    return lo, hi, BridgeType(kind)


@dataclass(frozen=True)
class CommunityNode:
    """
    A community as seen by the network engine.

    Fields:
        id:         Community identifier.
        name:       Display name.
        latitude:   Degrees, or None when the community has no location.
        longitude:  Degrees, or None when the community has no location.
        pack_type:  Classification label. Communities without one do not
                    qualify for network analysis. Usually a PackType; labels
                    unknown to PackType are kept as plain strings.
        member_ids: Ids of the active members.
        created_at: Creation timestamp (timezone-aware).
    """

    id: str
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    pack_type: Optional[str] = None
    member_ids: frozenset = frozenset()
    created_at: datetime = field(default_factory=utcnow)

    @property
    def member_count(self) -> int:
        return len(self.member_ids)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def qualifies(self) -> bool:
        return self.pack_type is not None


@dataclass
class Bridge:
    """
    A typed, weighted, direction-agnostic edge between two communities.

    source_id / target_id keep the order in which the bridge was created
    (mentor → mentee for MENTORSHIP) but carry no meaning for the graph.
    strength is clamped to [0, 1] and shared_members to >= 0.
    """

    source_id: str
    target_id: str
    kind: BridgeType
    strength: float
    shared_members: int = 0
    status: BridgeStatus = BridgeStatus.ACTIVE
    last_interaction_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    initiated_by: Optional[str] = None
    notes: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        self.kind = BridgeType(self.kind)
        self.status = BridgeStatus(self.status)
        self.strength = clamp_unit(self.strength)
        self.shared_members = max(0, int(self.shared_members))

    def pair_key(self) -> tuple[str, str, BridgeType]:
        return pair_key(self.source_id, self.target_id, self.kind)

    def touches(self, community_id: str) -> bool:
        return community_id in (self.source_id, self.target_id)

    def other_end(self, community_id: str) -> str:
        return self.target_id if self.source_id == community_id else self.source_id

    @property
    def is_active(self) -> bool:
        return self.status == BridgeStatus.ACTIVE


@dataclass
class Cluster:
    """
    A connected group of >= 2 communities.

    Fields:
        id:                 'cluster-<n>' in discovery order.
        name:               Human-readable label.
        communities:        Member community ids.
        total_members:      Sum of member counts.
        dominant_pack_type: Most frequent pack type ('UNKNOWN' if none).
        cohesion_score:     Connected pairs / possible pairs, in [0, 1].
    """

    id: str
    name: str
    communities: list[str]
    total_members: int
    dominant_pack_type: str
    cohesion_score: float


@dataclass
class ImpactProfile:
    community_id: str
    community_name: str
    bridge_count: int
    network_reach: int
    centrality_score: float
    influence_score: float
    reputation: ReputationTier


@dataclass
class ConnectionRecommendation:
    """
    A proposed new connection for a community.

    Fields:
        target:                The recommended community.
        score:                 Weighted factor sum (> recommendation_min_score).
        reasons:               One readable line per contributing factor.
        potential_bridge_types: Kinds the pair would likely form.
        estimated_strength:    Preview of the bridge strength, in [0, 1].
    """

    target: CommunityNode
    score: float
    reasons: list[str]
    potential_bridge_types: list[BridgeType]
    estimated_strength: float
