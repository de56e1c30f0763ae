"""
community_atlas — Network graph engine for the community economy platform.

Discovers, scores and analyzes the bridges between communities, and derives
network-level insights from them.

Modules:
- Bridge detection and mentorship (community_atlas.detection)
- Network graph construction and geo distance (community_atlas.graph)
- Reach, centrality, clusters, recommendations, impact (community_atlas.metrics)
- Bridge and community stores, CSV snapshots (community_atlas.storage)
- Facade exposing the call contracts (community_atlas.network)
"""

__version__ = "0.1.0"
