"""
community_atlas/storage/base.py — Read/write contracts consumed by the engine.

The engine never talks to a database directly. The surrounding application
provides a CommunityRepository (read-only) and a BridgeStore (read/write);
community_atlas.storage.memory ships in-memory implementations of both.
"""

from typing import Optional, Protocol

from community_atlas.models import Bridge, BridgeStatus, BridgeType, CommunityNode


class CommunityRepository(Protocol):
    def get(self, community_id: str) -> Optional[CommunityNode]:
        """Return the community, or None if it does not exist."""

    def list_communities(self, qualifying_only: bool = True) -> list[CommunityNode]:
        """All communities in a stable order; only those with a pack type by default."""


class BridgeStore(Protocol):
    """
    Persistence contract for bridges.

    Implementations must treat (A, B, kind) and (B, A, kind) as the same key
    and raise DuplicateBridgeError from create() when that key is taken.
    Any other transient failure is raised as StoreError.
    Returned bridges are copies; mutating them does not change the store.
    """

    def get(self, bridge_id: str) -> Optional[Bridge]:
        ...

    def find_by_pair(self, a: str, b: str, kind: BridgeType) -> Optional[Bridge]:
        """The bridge of this kind between a and b, in either direction."""

    def find_by_community(
        self,
        community_id: str,
        status: Optional[BridgeStatus] = BridgeStatus.ACTIVE,
    ) -> list[Bridge]:
        """Bridges touching the community (status=None for every status)."""

    def list_bridges(self, status: Optional[BridgeStatus] = None) -> list[Bridge]:
        ...

    def create(self, bridge: Bridge) -> Bridge:
        ...

    def update(self, bridge_id: str, **changes) -> Bridge:
        """Apply field changes; raises BridgeNotFoundError for an unknown id."""

    def count(self, status: Optional[BridgeStatus] = BridgeStatus.ACTIVE) -> int:
        ...

    def average_strength(self, status: Optional[BridgeStatus] = BridgeStatus.ACTIVE) -> float:
        ...
