"""
community_atlas/detection/mentorship.py — Explicit mentorship bridges.

MENTORSHIP bridges are never auto-detected. An experienced community proposes
to mentor a newer one; the bridge starts PENDING and becomes ACTIVE only when
accepted. Its strength reflects the mentor's maturity:

    strength = min(mentor_age_months / mentorship_maturity_months, 1)

with months counted as days / config.days_per_month. The strength is fixed at
proposal time and not re-evaluated on acceptance. BridgeDetector never
produces this kind, so batch re-detection never touches a mentorship edge.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from community_atlas.config import DEFAULT_CONFIG, CommunityAtlasConfig
from community_atlas.errors import (
    BridgeNotFoundError,
    CommunityNotFoundError,
    DuplicateBridgeError,
    InvalidInputError,
)
from community_atlas.models import (
    Bridge,
    BridgeStatus,
    BridgeType,
    CommunityNode,
    clamp_unit,
    utcnow,
)
from community_atlas.storage.base import BridgeStore, CommunityRepository

logger = logging.getLogger(__name__)


def mentorship_strength(
    mentor: CommunityNode,
    now: datetime,
    config: CommunityAtlasConfig = DEFAULT_CONFIG,
) -> float:
    """Mentor age in months over the maturity horizon, clamped to [0, 1]."""
    age_days = (now - mentor.created_at).total_seconds() / 86_400
    months = age_days / config.days_per_month
    return clamp_unit(months / config.mentorship_maturity_months)


class MentorshipService:
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

    def propose_mentorship(
        self,
        mentor_id: str,
        mentee_id: str,
        initiated_by: str,
        notes: Optional[str] = None,
    ) -> Bridge:
        """
        Create a PENDING mentorship bridge from mentor to mentee.

        Raises:
            InvalidInputError:      mentor and mentee are the same community.
            CommunityNotFoundError: either community does not exist.
            DuplicateBridgeError:   a mentorship bridge already links the pair.
        """
        if mentor_id == mentee_id:
            raise InvalidInputError("A community cannot mentor itself")

        mentor = self.communities.get(mentor_id)
        if mentor is None:
            raise CommunityNotFoundError(mentor_id)
        mentee = self.communities.get(mentee_id)
        if mentee is None:
            raise CommunityNotFoundError(mentee_id)

        existing = self.store.find_by_pair(mentor_id, mentee_id, BridgeType.MENTORSHIP)
        if existing is not None:
            raise DuplicateBridgeError(existing.pair_key())

        now = self.clock()
        bridge = self.store.create(
            Bridge(
                source_id=mentor_id,
                target_id=mentee_id,
                kind=BridgeType.MENTORSHIP,
                strength=mentorship_strength(mentor, now, self.config),
                status=BridgeStatus.PENDING,
                created_at=now,
                updated_at=now,
                initiated_by=initiated_by,
                notes=notes,
            )
        )
        logger.info(
            "Mentorship proposed: %s → %s (strength %.2f).",
            mentor.name, mentee.name, bridge.strength,
        )
        return bridge

    def accept_mentorship(self, bridge_id: str) -> Bridge:
        """
        Activate a pending mentorship bridge. Strength is left unchanged.

        Raises:
            BridgeNotFoundError: unknown bridge id.
            InvalidInputError:   the bridge is not a MENTORSHIP bridge.
        """
        bridge = self.store.get(bridge_id)
        if bridge is None:
            raise BridgeNotFoundError(bridge_id)
        if bridge.kind != BridgeType.MENTORSHIP:
            raise InvalidInputError(f"Bridge {bridge_id} is {bridge.kind.value}, not MENTORSHIP")
        if bridge.is_active:
            return bridge

        accepted = self.store.update(
            bridge_id,
            status=BridgeStatus.ACTIVE,
            updated_at=self.clock(),
        )
        logger.info("Mentorship %s accepted.", bridge_id)
        return accepted
