"""
community_atlas.storage — Persistence seams.

Modules:
    base          — CommunityRepository and BridgeStore contracts.
    memory        — Thread-safe in-memory implementations.
    csv_snapshot  — Load/save communities, members and bridges as CSV.
"""
