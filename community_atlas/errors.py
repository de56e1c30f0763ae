"""
community_atlas/errors.py — Exception hierarchy for the network engine.

NotFoundError subclasses are surfaced to callers. StoreError subclasses are
caught by the detection batch, logged, and treated as an unchanged pair.
"""


class CommunityAtlasError(Exception):
    """Base class for every error raised by community_atlas."""


class NotFoundError(CommunityAtlasError, LookupError):
    """A referenced community or bridge does not exist."""


class CommunityNotFoundError(NotFoundError):
    def __init__(self, community_id: str) -> None:
        super().__init__(f"Community not found: {community_id}")
        self.community_id = community_id


class BridgeNotFoundError(NotFoundError):
    def __init__(self, bridge_id: str) -> None:
        super().__init__(f"Bridge not found: {bridge_id}")
        self.bridge_id = bridge_id


class InvalidInputError(CommunityAtlasError, ValueError):
    """A call was made with arguments that can never succeed."""


class StoreError(CommunityAtlasError):
    """A single read or write against the bridge store failed."""


class DuplicateBridgeError(StoreError):
    """A bridge already exists for this unordered pair and kind."""

    def __init__(self, key: tuple) -> None:
        super().__init__(f"Bridge already exists for {key}")
        self.key = key
