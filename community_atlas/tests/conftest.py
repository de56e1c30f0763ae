"""
community_atlas/tests/conftest.py — Shared pytest fixtures for the network engine.

All fixtures use a frozen clock so mentorship strengths and timestamps are
deterministic.

Fixtures:
    now            — Fixed "current" time (2026-01-01 UTC).
    madrid         — Five communities around Madrid and Barcelona.
    repo / store   — In-memory stores over `madrid`.
    network        — CommunityNetwork over repo + store with the frozen clock.
    data_dir       — tmp_path populated with communities.csv and members.csv.
"""

from datetime import datetime, timedelta, timezone

import pytest

from community_atlas.models import CommunityNode, PackType
from community_atlas.network import CommunityNetwork
from community_atlas.storage.memory import InMemoryBridgeStore, InMemoryCommunityRepository

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def members(prefix: str, n: int) -> frozenset:
    return frozenset(f"{prefix}{i}" for i in range(n))


def make_community(
    cid: str,
    pack_type=PackType.CONSUMER_GROUP,
    lat=None,
    lng=None,
    member_ids=frozenset(),
    age_days: float = 365,
    name: str | None = None,
) -> CommunityNode:
    return CommunityNode(
        id=cid,
        name=name or cid,
        latitude=lat,
        longitude=lng,
        pack_type=pack_type,
        member_ids=frozenset(member_ids),
        created_at=NOW - timedelta(days=age_days),
    )


# ── Madrid fixture ────────────────────────────────────────────────────────────
#
#   A  CONSUMER_GROUP  Lavapiés   10 members (a0..a9), 180 days old
#   B  CONSUMER_GROUP  Malasaña    4 members (a8, a9, b0, b1) → 2 shared with A
#   C  HOUSING_COOP    Barcelona  10 members, ~500 km away
#   E  SOCIAL_CENTER   Madrid      3 members, no overlap
#   D  no pack type    Madrid      shares members with A, never qualifies

def madrid_communities() -> list[CommunityNode]:
    return [
        make_community("A", PackType.CONSUMER_GROUP, 40.40, -3.70, members("a", 10),
                       age_days=180, name="Grupo de consumo Lavapiés"),
        make_community("B", PackType.CONSUMER_GROUP, 40.42, -3.69,
                       {"a8", "a9", "b0", "b1"}, name="Grupo de consumo Malasaña"),
        make_community("C", PackType.HOUSING_COOP, 41.39, 2.17, members("c", 10),
                       name="Cooperativa de vivienda Sants"),
        make_community("E", PackType.SOCIAL_CENTER, 40.41, -3.71, members("e", 3),
                       name="Centro social La Tabacalera"),
        make_community("D", None, 40.40, -3.70, members("a", 5), name="Sin clasificar"),
    ]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def madrid() -> list[CommunityNode]:
    return madrid_communities()


@pytest.fixture
def repo(madrid) -> InMemoryCommunityRepository:
    return InMemoryCommunityRepository(madrid)


@pytest.fixture
def store() -> InMemoryBridgeStore:
    return InMemoryBridgeStore()


@pytest.fixture
def network(repo, store) -> CommunityNetwork:
    return CommunityNetwork(repo, store, clock=lambda: NOW)


# ── CSV snapshot fixture ─────────────────────────────────────────────────────

COMMUNITIES_CSV = """\
id,name,latitude,longitude,pack_type,created_at
A,Grupo de consumo Lavapiés,40.40,-3.70,CONSUMER_GROUP,2025-07-05T00:00:00Z
B,Grupo de consumo Malasaña,40.42,-3.69,CONSUMER_GROUP,2025-01-01T00:00:00Z
C,Cooperativa de vivienda Sants,41.39,2.17,HOUSING_COOP,2025-01-01T00:00:00Z
E,Centro social La Tabacalera,40.41,-3.71,SOCIAL_CENTER,2025-01-01T00:00:00Z
D,Sin clasificar,40.40,-3.70,,2025-01-01T00:00:00Z
"""


def members_csv() -> str:
    rows = ["community_id,user_id"]
    rows += [f"A,a{i}" for i in range(10)]
    rows += ["B,a8", "B,a9", "B,b0", "B,b1"]
    rows += [f"C,c{i}" for i in range(10)]
    rows += [f"E,e{i}" for i in range(3)]
    rows += [f"D,a{i}" for i in range(5)]
    return "\n".join(rows) + "\n"


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "communities.csv").write_text(COMMUNITIES_CSV, encoding="utf-8")
    (tmp_path / "members.csv").write_text(members_csv(), encoding="utf-8")
    return tmp_path
