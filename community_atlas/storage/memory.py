"""
community_atlas/storage/memory.py — Thread-safe in-memory stores.

InMemoryBridgeStore is the reference BridgeStore: the batch detector may run
pairs on several threads, so every operation holds a single lock and the
unordered-pair uniqueness is checked inside create(). Two detection runs
racing on the same pair therefore produce one bridge and one
DuplicateBridgeError, never a duplicate edge.
"""

import dataclasses
import logging
import threading
from typing import Iterable, Optional

import numpy as np

from community_atlas.errors import BridgeNotFoundError, DuplicateBridgeError, InvalidInputError
from community_atlas.models import Bridge, BridgeStatus, BridgeType, CommunityNode, pair_key

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "source_id", "target_id", "kind"})


class InMemoryCommunityRepository:
    """CommunityRepository over a fixed list of CommunityNode records."""

    def __init__(self, communities: Iterable[CommunityNode] = ()) -> None:
        self._communities: dict[str, CommunityNode] = {}
        for community in communities:
            self._communities[community.id] = community

    def get(self, community_id: str) -> Optional[CommunityNode]:
        return self._communities.get(community_id)

    def list_communities(self, qualifying_only: bool = True) -> list[CommunityNode]:
        return [
            c for c in self._communities.values()
            if c.qualifies or not qualifying_only
        ]

    def __len__(self) -> int:
        return len(self._communities)


class InMemoryBridgeStore:
    """BridgeStore keeping bridges in a dict, indexed by unordered pair + kind."""

    def __init__(self, bridges: Iterable[Bridge] = ()) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[str, Bridge] = {}
        self._by_key: dict[tuple, str] = {}
        for bridge in bridges:
            self.create(bridge)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def get(self, bridge_id: str) -> Optional[Bridge]:
        with self._lock:
            bridge = self._by_id.get(bridge_id)
            return dataclasses.replace(bridge) if bridge else None

    def find_by_pair(self, a: str, b: str, kind: BridgeType) -> Optional[Bridge]:
        with self._lock:
            bridge_id = self._by_key.get(pair_key(a, b, kind))
            return dataclasses.replace(self._by_id[bridge_id]) if bridge_id else None

    def find_by_community(
        self,
        community_id: str,
        status: Optional[BridgeStatus] = BridgeStatus.ACTIVE,
    ) -> list[Bridge]:
        return [b for b in self.list_bridges(status) if b.touches(community_id)]

    def list_bridges(self, status: Optional[BridgeStatus] = None) -> list[Bridge]:
        with self._lock:
            return [
                dataclasses.replace(b) for b in self._by_id.values()
                if status is None or b.status == status
            ]

    def count(self, status: Optional[BridgeStatus] = BridgeStatus.ACTIVE) -> int:
        return len(self.list_bridges(status))

    def average_strength(self, status: Optional[BridgeStatus] = BridgeStatus.ACTIVE) -> float:
        strengths = [b.strength for b in self.list_bridges(status)]
        return float(np.mean(strengths)) if strengths else 0.0

    # ── Writes ────────────────────────────────────────────────────────────────

    def create(self, bridge: Bridge) -> Bridge:
        key = bridge.pair_key()
        with self._lock:
            if key in self._by_key:
                raise DuplicateBridgeError(key)
            if bridge.id in self._by_id:
                raise DuplicateBridgeError((bridge.id,))
            stored = dataclasses.replace(bridge)
            self._by_id[stored.id] = stored
            self._by_key[key] = stored.id
        logger.debug("Stored %s bridge %s.", bridge.kind.value, bridge.id)
        return dataclasses.replace(stored)

    def update(self, bridge_id: str, **changes) -> Bridge:
        frozen = _IMMUTABLE_FIELDS.intersection(changes)
        if frozen:
            raise InvalidInputError(f"Cannot change bridge fields: {sorted(frozen)}")
        with self._lock:
            existing = self._by_id.get(bridge_id)
            if existing is None:
                raise BridgeNotFoundError(bridge_id)
            updated = dataclasses.replace(existing, **changes)
            self._by_id[bridge_id] = updated
        return dataclasses.replace(updated)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
