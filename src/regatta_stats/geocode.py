"""regatta_stats.geocode

Location name → coordinate lookup against a closed, static table of known
sailing venues.  No network access; unknown names resolve to None.

Any object with a ``resolve(location) -> GeoPoint | None`` method can stand in
for StaticGeocoder (see Geocoder).  A network-backed implementation must
return None on failure; the aggregator additionally treats an exception from
resolve() as an unresolved location.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from regatta_stats.normalize import location_key


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float
    display_name: str = ""


# Keys are lower-cased and trimmed.
KNOWN_LOCATIONS: dict[str, GeoPoint] = {
    "tegeler see": GeoPoint(52.5833, 13.2833, "Tegeler See"),
    "wannsee, berlin": GeoPoint(52.4167, 13.1667, "Wannsee"),
    "warnemünde": GeoPoint(54.1833, 12.0833, "Warnemünde"),
    "kiel": GeoPoint(54.3233, 10.1394, "Kiel"),
    "travemünde": GeoPoint(53.9667, 10.8667, "Travemünde"),
    "steinhuder meer": GeoPoint(52.4500, 9.3333, "Steinhuder Meer"),
}


class Geocoder(Protocol):
    def resolve(self, location: str | None) -> GeoPoint | None: ...


class StaticGeocoder:
    """Case-insensitive, whitespace-trimmed exact match over a fixed table."""

    def __init__(self, table: Mapping[str, GeoPoint] | None = None) -> None:
        source = KNOWN_LOCATIONS if table is None else table
        # Re-key defensively so callers may pass display-cased names.
        self._table: dict[str, GeoPoint] = {}
        for name, point in source.items():
            key = location_key(name)
            if key is not None:
                self._table[key] = point

    def resolve(self, location: str | None) -> GeoPoint | None:
        key = location_key(location)
        if key is None:
            return None
        return self._table.get(key)

    def __contains__(self, location: str) -> bool:
        return self.resolve(location) is not None

    def __len__(self) -> int:
        return len(self._table)


def resolve_location(location: str | None) -> GeoPoint | None:
    """Resolve against the built-in KNOWN_LOCATIONS table."""
    return _DEFAULT_GEOCODER.resolve(location)


_DEFAULT_GEOCODER = StaticGeocoder()
