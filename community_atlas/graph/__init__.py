"""
community_atlas.graph — NetworkX graph construction layer.

Modules:
    geo      — Haversine distance between communities.
    builder  — Build the undirected network view from ACTIVE bridges.

The network is an nx.MultiGraph:
    Nodes : community ids (name, pack_type, member_count attributes)
    Edges : one per ACTIVE bridge, keyed by bridge kind
"""
