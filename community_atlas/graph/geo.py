"""
community_atlas/graph/geo.py — Great-circle distance between communities.

Haversine formula on a spherical Earth of radius 6371 km. Identical
coordinates give exactly 0 and the result is symmetric in its arguments.
NaN inputs propagate to a NaN distance.
"""

from typing import Optional

import numpy as np

from community_atlas.models import CommunityNode

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance in kilometres between two (lat, lng) points in degrees.

    Args:
        lat1, lng1: First point.
        lat2, lng2: Second point.

    Returns:
        Distance in km (float). 0.0 for identical points.
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    d_phi = np.radians(lat2 - lat1)
    d_lambda = np.radians(lng2 - lng1)

    a = (
        np.sin(d_phi / 2) ** 2
        + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
    )
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return float(EARTH_RADIUS_KM * c)


def distance_between(a: CommunityNode, b: CommunityNode) -> Optional[float]:
    """Distance in km between two communities, or None if either lacks coordinates."""
    if not (a.has_coordinates and b.has_coordinates):
        return None
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)
