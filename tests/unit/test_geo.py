"""Unit tests for regatta_stats.geocode and regatta_stats.distance."""

from __future__ import annotations

import pytest

from regatta_stats.distance import CLUB_ORIGIN, haversine_km, round_trip_km
from regatta_stats.geocode import (
    KNOWN_LOCATIONS,
    GeoPoint,
    StaticGeocoder,
    resolve_location,
)

KIEL = KNOWN_LOCATIONS["kiel"]
WANNSEE = KNOWN_LOCATIONS["wannsee, berlin"]


# ---------------------------------------------------------------------------
# Geocode resolver
# ---------------------------------------------------------------------------

class TestStaticGeocoder:
    def test_exact_match(self):
        assert resolve_location("kiel") == KIEL

    def test_case_insensitive_and_trimmed(self):
        assert resolve_location("  KIEL ") == KIEL
        assert resolve_location("Wannsee, Berlin") == WANNSEE

    def test_unknown_returns_none(self):
        assert resolve_location("Unknown Lake") is None

    def test_blank_and_none(self):
        assert resolve_location("") is None
        assert resolve_location(None) is None

    def test_no_partial_match(self):
        assert resolve_location("Wannsee") is None

    def test_deterministic(self):
        assert resolve_location("Travemünde") == resolve_location("Travemünde")

    def test_custom_table_rekeyed(self):
        geo = StaticGeocoder({"Müggelsee": GeoPoint(52.43, 13.65, "Müggelsee")})
        assert geo.resolve("müggelsee").display_name == "Müggelsee"
        assert "MÜGGELSEE" in geo
        assert len(geo) == 1
        assert geo.resolve("kiel") is None

    def test_default_table_size(self):
        assert len(StaticGeocoder()) == len(KNOWN_LOCATIONS)


# ---------------------------------------------------------------------------
# Distance calculator
# ---------------------------------------------------------------------------

class TestHaversine:
    def test_symmetric(self):
        assert haversine_km(CLUB_ORIGIN, KIEL) == haversine_km(KIEL, CLUB_ORIGIN)

    def test_identity_is_zero(self):
        assert haversine_km(KIEL, KIEL) == 0.0

    def test_same_coordinates_different_names(self):
        assert haversine_km(CLUB_ORIGIN, KNOWN_LOCATIONS["tegeler see"]) == 0.0

    def test_non_negative(self):
        for point in KNOWN_LOCATIONS.values():
            assert haversine_km(CLUB_ORIGIN, point) >= 0.0

    def test_known_distance_berlin_kiel(self):
        # Tegeler See → Kiel is roughly 285 km as the crow flies.
        assert haversine_km(CLUB_ORIGIN, KIEL) == pytest.approx(285, abs=10)

    def test_one_degree_latitude(self):
        a = GeoPoint(0.0, 0.0)
        b = GeoPoint(1.0, 0.0)
        assert haversine_km(a, b) == pytest.approx(111.19, abs=0.01)


class TestRoundTrip:
    def test_doubles_one_way(self):
        assert round_trip_km(KIEL) == pytest.approx(2 * haversine_km(CLUB_ORIGIN, KIEL))

    def test_custom_origin(self):
        assert round_trip_km(KIEL, origin=KIEL) == 0.0
