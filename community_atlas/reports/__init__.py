"""
community_atlas.reports — Human-readable outputs.

Modules:
    network_report — Markdown summary of a pipeline run.
"""
