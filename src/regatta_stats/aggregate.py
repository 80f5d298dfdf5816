"""regatta_stats.aggregate

Per-sailor, per-year metrics (SailorYearStat) derived from Registration.

Processing order for one year:
  1. Group registrations by sailor_id in first-seen order.  Rows without a
     sailor identity are skipped and counted as malformed.
  2. Count events, regattas, training/camp events, championships and
     collect the non-empty boat classes.
  3. Sum round-trip distance from the club origin for every event whose
     location resolves; unresolved (or failing) lookups contribute 0 km.
  4. Sort by event_count descending.  Python's sort is stable, so sailors
     with equal counts keep their first-seen order.

SailorYearStat is recomputed on demand and never persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from regatta_stats.distance import CLUB_ORIGIN, round_trip_km
from regatta_stats.geocode import GeoPoint, Geocoder, StaticGeocoder
from regatta_stats.registrations import TRAINING_EVENT_TYPES, Registration
from regatta_stats.shared import StatsCounters

log = logging.getLogger(__name__)


@dataclass
class SailorYearStat:
    sailor_id: str
    first_name: str
    last_name: str
    event_count: int = 0
    regatta_count: int = 0
    training_count: int = 0
    total_distance_km: int = 0
    boat_classes: set[str] = field(default_factory=set)
    championships_attended: int = 0

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "sailor_id": self.sailor_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "event_count": self.event_count,
            "regatta_count": self.regatta_count,
            "training_count": self.training_count,
            "total_distance_km": self.total_distance_km,
            "boat_classes": sorted(self.boat_classes),
            "championships_attended": self.championships_attended,
        }


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def group_by_sailor(
    registrations: Iterable[Registration],
    counters: StatsCounters | None = None,
) -> dict[str, list[Registration]]:
    """Group by sailor_id; dict insertion order is first-seen order."""
    groups: dict[str, list[Registration]] = {}
    for reg in registrations:
        if not reg.has_sailor:
            if counters is not None:
                counters.records_malformed += 1
                counters.warn(
                    f"{reg.source}: missing sailor_id for event {reg.event_name!r} ({reg.year})"
                )
            log.warning(
                "Skipping %s record without sailor_id (event=%r, year=%s)",
                reg.source, reg.event_name, reg.year,
            )
            continue
        groups.setdefault(reg.sailor_id, []).append(reg)
    return groups


# ---------------------------------------------------------------------------
# Distance
# ---------------------------------------------------------------------------

def _lookup(geocoder: Geocoder, location: str, ctrs: StatsCounters) -> GeoPoint | None:
    try:
        point = geocoder.resolve(location)
    except Exception as exc:
        ctrs.geocode_errors += 1
        ctrs.warn(f"geocode failed for {location!r}: {exc}")
        log.warning("Geocode lookup failed for %r: %s", location, exc)
        return None
    if point is None:
        ctrs.locations_unresolved += 1
        log.debug("Unresolved location %r; counting 0 km", location)
    else:
        ctrs.locations_resolved += 1
    return point


def travel_distance_km(
    events: Iterable[Registration],
    geocoder: Geocoder,
    origin: GeoPoint = CLUB_ORIGIN,
    counters: StatsCounters | None = None,
) -> int:
    """Round-trip kilometres over all events, rounded once at the end."""
    ctrs = counters if counters is not None else StatsCounters()
    total = 0.0
    for event in events:
        if not event.event_location:
            continue
        point = _lookup(geocoder, event.event_location, ctrs)
        if point is not None:
            total += round_trip_km(point, origin)
    return int(round(total))


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def aggregate(
    registrations: Iterable[Registration],
    year: int,
    geocoder: Geocoder | None = None,
    origin: GeoPoint = CLUB_ORIGIN,
    counters: StatsCounters | None = None,
) -> list[SailorYearStat]:
    """Compute SailorYearStat for every sailor with registrations in year.

    Args:
        registrations: Canonical registrations (any years; filtered here).
        year: Target year.
        geocoder: Location resolver; defaults to the built-in venue table.
        origin: Club origin for round-trip distances.
        counters: Optional run counters to update.

    Returns:
        Stats sorted by event_count descending, ties in first-seen order.
        Empty when the year has no registrations.
    """
    ctrs = counters if counters is not None else StatsCounters()
    geocoder = geocoder if geocoder is not None else StaticGeocoder()

    groups = group_by_sailor((r for r in registrations if r.year == year), ctrs)

    stats: list[SailorYearStat] = []
    for sailor_id, events in groups.items():
        head = events[0]
        stats.append(SailorYearStat(
            sailor_id=sailor_id,
            first_name=head.first_name,
            last_name=head.last_name,
            event_count=len(events),
            regatta_count=sum(1 for e in events if e.event_type == "regatta"),
            training_count=sum(1 for e in events if e.event_type in TRAINING_EVENT_TYPES),
            total_distance_km=travel_distance_km(events, geocoder, origin, ctrs),
            boat_classes={e.boat_class for e in events if e.boat_class},
            championships_attended=sum(1 for e in events if e.is_championship),
        ))

    ctrs.sailors_aggregated += len(stats)
    stats.sort(key=lambda s: s.event_count, reverse=True)
    return stats


# ---------------------------------------------------------------------------
# Year-level helpers
# ---------------------------------------------------------------------------

@dataclass
class YearlySummary:
    year: int
    unique_sailors: int
    unique_locations: int
    total_events: int
    regattas: int
    championships: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "unique_sailors": self.unique_sailors,
            "unique_locations": self.unique_locations,
            "total_events": self.total_events,
            "regattas": self.regattas,
            "championships": self.championships,
        }


def yearly_summary(registrations: Iterable[Registration], year: int) -> YearlySummary:
    """Headline counts for a year's dashboard tiles."""
    year_regs = [r for r in registrations if r.year == year]
    return YearlySummary(
        year=year,
        unique_sailors=len({r.sailor_id for r in year_regs if r.has_sailor}),
        unique_locations=len({r.event_location for r in year_regs if r.event_location}),
        total_events=len(year_regs),
        regattas=sum(1 for r in year_regs if r.event_type == "regatta"),
        championships=sum(1 for r in year_regs if r.is_championship),
    )


def available_years(
    registrations: Iterable[Registration],
    today: date | None = None,
) -> list[int]:
    """Years with data plus the current and two previous years, newest first."""
    current = (today or date.today()).year
    years = {r.year for r in registrations}
    years.update(range(current - 2, current + 1))
    return sorted(years, reverse=True)
