"""
community_atlas/storage/csv_snapshot.py — CSV snapshots of the network.

Lets any host (the CLI, a batch worker, a notebook) drive the engine from flat
exports of the application database:

    communities.csv  id, name, latitude, longitude, pack_type, created_at
    members.csv      community_id, user_id            (one row per membership)
    bridges.csv      every Bridge field (see BRIDGE_COLUMNS)

Bridges are written back with every persisted field so a snapshot can be
reloaded without loss.
"""

import logging
import os
from datetime import timezone
from typing import Any, Iterable, Optional

import pandas as pd

from community_atlas.models import (
    Bridge,
    CommunityNode,
    parse_pack_type,
    utcnow,
)

logger = logging.getLogger(__name__)

COMMUNITIES_FILE = "communities.csv"
MEMBERS_FILE = "members.csv"
BRIDGES_FILE = "bridges.csv"

BRIDGE_COLUMNS = [
    "id",
    "source_id",
    "target_id",
    "kind",
    "strength",
    "shared_members",
    "status",
    "last_interaction_at",
    "created_at",
    "updated_at",
    "initiated_by",
    "notes",
]


def _optional(value: Any) -> Any:
    """pandas NaN / NaT / empty string → None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    return None if pd.isna(value) else value


def _timestamp(value: Any, default=None):
    """Parse a CSV timestamp into an aware datetime (UTC assumed when naive)."""
    value = _optional(value)
    if value is None:
        return default
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        ts = ts.tz_localize(timezone.utc)
    return ts.to_pydatetime()


def load_members_csv(members_path: str) -> dict[str, frozenset]:
    """
    Group a membership export into community_id → frozenset(user_id).

    Missing file → empty mapping (every community has zero members).
    """
    if not os.path.isfile(members_path):
        logger.warning("Members CSV not found: %s — all member sets empty.", members_path)
        return {}

    df = pd.read_csv(members_path, dtype=str).dropna(subset=["community_id", "user_id"])
    return {
        str(community_id): frozenset(group["user_id"].str.strip())
        for community_id, group in df.groupby("community_id", sort=False)
    }


def _community_from_row(row: pd.Series, members: dict[str, frozenset]) -> CommunityNode:
    community_id = str(row.get("id")).strip()
    lat = _optional(row.get("latitude"))
    lng = _optional(row.get("longitude"))
    return CommunityNode(
        id=community_id,
        name=str(_optional(row.get("name")) or community_id),
        latitude=float(lat) if lat is not None else None,
        longitude=float(lng) if lng is not None else None,
        pack_type=parse_pack_type(_optional(row.get("pack_type"))),
        member_ids=members.get(community_id, frozenset()),
        created_at=_timestamp(row.get("created_at"), default=utcnow()),
    )


def load_communities_csv(
    communities_path: str,
    members_path: Optional[str] = None,
) -> list[CommunityNode]:
    """
    Load CommunityNode records from a communities export (and optional members export).

    Args:
        communities_path: CSV with columns id, name and optionally latitude,
                          longitude, pack_type, created_at.
        members_path:     CSV with columns community_id, user_id.

    Returns:
        communities: CommunityNode list in file order. Rows without an id, or
                     with an unparseable coordinate or timestamp, are skipped
                     with a warning.
    """
    logger.info("Loading communities from: %s", communities_path)
    df = pd.read_csv(communities_path, dtype={"id": str, "name": str, "pack_type": str})
    members = load_members_csv(members_path) if members_path else {}

    communities: list[CommunityNode] = []
    skipped = 0
    for _, row in df.iterrows():
        if _optional(row.get("id")) is None:
            logger.warning("Skipping community row without id: %s", dict(row))
            skipped += 1
            continue
        try:
            communities.append(_community_from_row(row, members))
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping malformed community row %s: %s", dict(row), exc)
            skipped += 1

    logger.info(
        "Loaded %d communities (%d with a pack type, %d rows skipped).",
        len(communities),
        sum(1 for c in communities if c.qualifies),
        skipped,
    )
    return communities


def _bridge_from_row(row: pd.Series) -> Bridge:
    now = utcnow()
    return Bridge(
        id=str(row["id"]),
        source_id=str(row["source_id"]),
        target_id=str(row["target_id"]),
        kind=row["kind"],
        strength=float(row["strength"]),
        shared_members=int(_optional(row.get("shared_members")) or 0),
        status=row["status"],
        last_interaction_at=_timestamp(row.get("last_interaction_at")),
        created_at=_timestamp(row.get("created_at"), default=now),
        updated_at=_timestamp(row.get("updated_at"), default=now),
        initiated_by=_optional(row.get("initiated_by")),
        notes=_optional(row.get("notes")),
    )


def load_bridges_csv(bridges_path: str) -> list[Bridge]:
    """
    Load bridges written by save_bridges_csv(). Missing file → empty list.

    Rows with an unknown kind or status, a non-numeric strength or an
    unparseable timestamp are skipped with a warning. Duplicate pairs are
    left for the store to reject (see pipeline.load_network_from_csv).
    """
    if not os.path.isfile(bridges_path):
        logger.info("No bridges CSV at %s — starting from an empty network.", bridges_path)
        return []

    df = pd.read_csv(
        bridges_path,
        dtype={"id": str, "source_id": str, "target_id": str, "initiated_by": str, "notes": str},
    )
    bridges: list[Bridge] = []
    for _, row in df.iterrows():
        try:
            bridges.append(_bridge_from_row(row))
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Skipping malformed bridge row %s: %s", dict(row), exc)
    logger.info(
        "Loaded %d bridges from %s (%d rows skipped).",
        len(bridges), bridges_path, len(df) - len(bridges),
    )
    return bridges


def bridges_to_frame(bridges: Iterable[Bridge]) -> pd.DataFrame:
    """One row per bridge with BRIDGE_COLUMNS; enums as their string values."""
    rows = [
        {
            "id": b.id,
            "source_id": b.source_id,
            "target_id": b.target_id,
            "kind": b.kind.value,
            "strength": b.strength,
            "shared_members": b.shared_members,
            "status": b.status.value,
            "last_interaction_at": b.last_interaction_at.isoformat() if b.last_interaction_at else None,
            "created_at": b.created_at.isoformat(),
            "updated_at": b.updated_at.isoformat(),
            "initiated_by": b.initiated_by,
            "notes": b.notes,
        }
        for b in bridges
    ]
    return pd.DataFrame(rows, columns=BRIDGE_COLUMNS)


def save_bridges_csv(bridges: Iterable[Bridge], bridges_path: str) -> str:
    """
    Write bridges to CSV atomically (write .tmp, then rename).

    Returns:
        The path written.
    """
    df = bridges_to_frame(bridges)
    parent = os.path.dirname(os.path.abspath(bridges_path))
    os.makedirs(parent, exist_ok=True)
    tmp_path = bridges_path + ".tmp"
    df.to_csv(tmp_path, index=False)
    os.replace(tmp_path, bridges_path)
    logger.info("Saved %d bridges to %s.", len(df), bridges_path)
    return bridges_path
