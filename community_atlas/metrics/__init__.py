"""
community_atlas.metrics — Read-only network analytics.

Modules:
    reachability     — BFS count of transitively connected communities.
    centrality       — Normalized degree centrality.
    clusters         — Connected components (DFS) with cohesion scoring.
    recommendations  — Multi-factor scoring of new connections.
    impact           — Reputation tiers and the network leaderboard.
    network_stats    — Totals, counts by kind, strongest bridges.

All metrics operate on the nx.MultiGraph returned by
community_atlas.graph.builder.build_network_graph() and never write.

All thresholds and weights live in community_atlas.config.CommunityAtlasConfig.
"""
