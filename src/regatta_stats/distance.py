"""Great-circle travel distance from the club to an event venue."""

from __future__ import annotations

import math

from regatta_stats.geocode import GeoPoint

EARTH_RADIUS_KM = 6371.0

# Tegeler Segel-Club, Schwarzer Weg 27, 13505 Berlin (on the Tegeler See).
CLUB_ORIGIN = GeoPoint(52.5833, 13.2833, "Tegeler Segel-Club")


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """One-way Haversine distance in kilometres.

    Symmetric, non-negative, and exactly 0.0 for identical points.
    """
    if (a.lat, a.lon) == (b.lat, b.lon):
        return 0.0
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lon - a.lon)
    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def round_trip_km(destination: GeoPoint, origin: GeoPoint = CLUB_ORIGIN) -> float:
    """Distance there and back from origin (unrounded)."""
    return 2 * haversine_km(origin, destination)
