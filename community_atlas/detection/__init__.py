"""
community_atlas.detection — Writing bridges.

Modules:
    detector    — GEOGRAPHIC / THEMATIC / SPONTANEOUS heuristics, hysteresis
                  upsert, and the batch pass over every community pair.
    mentorship  — Explicit MENTORSHIP proposals and acceptance.
"""
