"""regatta_stats.ranking

Yearly leaderboards.  Each filter type is an independent algorithm over either
the aggregated SailorYearStat list or the year's raw registrations:

  most_regattas           SailorYearStat   regatta_count > 0, desc
  best_avg_placement      registrations    >= 3 placed entries, mean relative placement asc
  furthest_regatta        SailorYearStat   total_distance_km > 0, desc
  most_distance           (alias of furthest_regatta)
  youngest_participant    sailor directory birth date known, newest birth date first
  most_races              registrations    sum(race_count), desc
  best_single_placement   registrations    flattened; placement asc, relative placement asc
  most_active_boat_class  registrations    grouped by boat class; participations desc
  most_championships      SailorYearStat   championships_attended > 0, desc

Every sort is stable, so ties keep first-seen order.  Results are truncated
to TOP_N entries.  Records without a sailor identity never rank.

Usage:
    from regatta_stats.ranking import rank

    top = rank(registrations, sailor_directory, 2024, "most_regattas")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from regatta_stats.aggregate import SailorYearStat, aggregate, group_by_sailor
from regatta_stats.distance import CLUB_ORIGIN
from regatta_stats.geocode import GeoPoint, Geocoder
from regatta_stats.normalize import coerce_date, split_display_name
from regatta_stats.registrations import Registration
from regatta_stats.shared import StatsCounters, UnknownFilterTypeError

TOP_N = 10

# Minimum number of placed regattas before a sailor's average counts.
MIN_PLACEMENT_SAMPLE = 3


# ---------------------------------------------------------------------------
# Filter catalogue
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterType:
    id: str
    label: str
    empty_hint: str = "Record regatta participations to populate this ranking."


FILTER_TYPES: tuple[FilterType, ...] = (
    FilterType("most_regattas", "Most regattas"),
    FilterType(
        "best_avg_placement", "Best average placement",
        f"At least {MIN_PLACEMENT_SAMPLE} regattas with a placement are required.",
    ),
    FilterType("furthest_regatta", "Furthest travelled"),
    FilterType(
        "youngest_participant", "Youngest participant",
        "Birth dates are required for this ranking.",
    ),
    FilterType("most_races", "Most races sailed"),
    FilterType("best_single_placement", "Best single placement"),
    FilterType("most_active_boat_class", "Most active boat class"),
    FilterType("most_championships", "Most championships"),
)

FILTER_ALIASES = {"most_distance": "furthest_regatta"}


def filter_type_ids() -> list[str]:
    return [f.id for f in FILTER_TYPES] + list(FILTER_ALIASES)


# ---------------------------------------------------------------------------
# Ranked entry shapes
# ---------------------------------------------------------------------------

@dataclass
class PlacementAverage:
    sailor_id: str
    first_name: str
    last_name: str
    regatta_count: int
    avg_placement: float
    avg_relative_placement: float


@dataclass
class YoungestSailor:
    sailor_id: str
    first_name: str
    last_name: str
    birth_date: date
    age: int
    regatta_count: int


@dataclass
class RaceTotal:
    sailor_id: str
    first_name: str
    last_name: str
    total_races: int
    regatta_count: int


@dataclass
class SinglePlacement:
    sailor_id: str
    first_name: str
    last_name: str
    regatta_name: str
    placement: int
    total_participants: int
    relative_placement: float


@dataclass
class BoatClassActivity:
    name: str
    participations: int
    unique_sailors: int
    unique_regattas: int


# ---------------------------------------------------------------------------
# SailorYearStat-based leaderboards
# ---------------------------------------------------------------------------

def _top_by_metric(
    stats: Iterable[SailorYearStat],
    metric: Callable[[SailorYearStat], int],
    limit: int,
) -> list[SailorYearStat]:
    ranked = sorted((s for s in stats if metric(s) > 0), key=metric, reverse=True)
    return ranked[:limit]


def top_by_regattas(stats: Iterable[SailorYearStat], limit: int = TOP_N) -> list[SailorYearStat]:
    return _top_by_metric(stats, lambda s: s.regatta_count, limit)


def top_by_distance(stats: Iterable[SailorYearStat], limit: int = TOP_N) -> list[SailorYearStat]:
    return _top_by_metric(stats, lambda s: s.total_distance_km, limit)


def top_by_championships(stats: Iterable[SailorYearStat], limit: int = TOP_N) -> list[SailorYearStat]:
    return _top_by_metric(stats, lambda s: s.championships_attended, limit)


# ---------------------------------------------------------------------------
# Registration-based leaderboards
# ---------------------------------------------------------------------------

def _placed(regs: Iterable[Registration]) -> list[Registration]:
    return [r for r in regs if r.relative_placement is not None]


def best_avg_placement(
    year_regs: list[Registration],
    limit: int = TOP_N,
    min_sample: int = MIN_PLACEMENT_SAMPLE,
    counters: StatsCounters | None = None,
) -> list[PlacementAverage]:
    """Lowest mean relative placement among sailors with >= min_sample results."""
    out: list[PlacementAverage] = []
    for sailor_id, regs in group_by_sailor(_placed(year_regs), counters).items():
        if len(regs) < min_sample:
            continue
        n = len(regs)
        out.append(PlacementAverage(
            sailor_id=sailor_id,
            first_name=regs[0].first_name,
            last_name=regs[0].last_name,
            regatta_count=n,
            avg_placement=sum(r.placement for r in regs) / n,
            avg_relative_placement=sum(r.relative_placement for r in regs) / n,
        ))
    out.sort(key=lambda p: p.avg_relative_placement)
    return out[:limit]


def most_races(
    year_regs: list[Registration],
    limit: int = TOP_N,
    counters: StatsCounters | None = None,
) -> list[RaceTotal]:
    with_races = [r for r in year_regs if r.race_count is not None]
    out = [
        RaceTotal(
            sailor_id=sailor_id,
            first_name=regs[0].first_name,
            last_name=regs[0].last_name,
            total_races=sum(r.race_count for r in regs),
            regatta_count=len(regs),
        )
        for sailor_id, regs in group_by_sailor(with_races, counters).items()
    ]
    out.sort(key=lambda t: t.total_races, reverse=True)
    return out[:limit]


def best_single_placement(year_regs: list[Registration], limit: int = TOP_N) -> list[SinglePlacement]:
    out = [
        SinglePlacement(
            sailor_id=r.sailor_id,
            first_name=r.first_name,
            last_name=r.last_name,
            regatta_name=r.event_name,
            placement=r.placement,
            total_participants=r.total_participants,
            relative_placement=r.relative_placement,
        )
        for r in _placed(year_regs)
        if r.has_sailor
    ]
    out.sort(key=lambda p: (p.placement, p.relative_placement))
    return out[:limit]


def most_active_boat_class(year_regs: list[Registration], limit: int = TOP_N) -> list[BoatClassActivity]:
    groups: dict[str, list[Registration]] = {}
    for r in year_regs:
        if r.boat_class and r.has_sailor:
            groups.setdefault(r.boat_class, []).append(r)
    out = [
        BoatClassActivity(
            name=name,
            participations=len(regs),
            unique_sailors=len({r.sailor_id for r in regs}),
            unique_regattas=len({r.event_name for r in regs if r.event_name}),
        )
        for name, regs in groups.items()
    ]
    out.sort(key=lambda b: b.participations, reverse=True)
    return out[:limit]


def youngest_participants(
    year_regs: list[Registration],
    sailors: Mapping[str, Mapping[str, Any]] | None,
    year: int,
    limit: int = TOP_N,
    counters: StatsCounters | None = None,
) -> list[YoungestSailor]:
    """Participating sailors with a known birth date, youngest first.

    Age is taken at 31 December of the ranking year.
    """
    if not sailors:
        return []
    out: list[YoungestSailor] = []
    for sailor_id, regs in group_by_sailor(year_regs, counters).items():
        entry = sailors.get(sailor_id)
        if not entry:
            continue
        born = coerce_date(entry.get("birth_date"))
        if born is None:
            continue
        first, last = regs[0].first_name, regs[0].last_name
        if not (first or last):
            first, last = split_display_name(entry.get("name"))
        out.append(YoungestSailor(
            sailor_id=sailor_id,
            first_name=first,
            last_name=last,
            birth_date=born,
            age=year - born.year,
            regatta_count=sum(1 for r in regs if r.event_type == "regatta"),
        ))
    out.sort(key=lambda y: y.birth_date, reverse=True)
    return out[:limit]


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

def rank(
    registrations: Iterable[Registration],
    sailors: Mapping[str, Mapping[str, Any]] | None,
    year: int,
    filter_type: str,
    *,
    stats: list[SailorYearStat] | None = None,
    geocoder: Geocoder | None = None,
    origin: GeoPoint = CLUB_ORIGIN,
    counters: StatsCounters | None = None,
    fallback_unknown: bool = False,
    limit: int = TOP_N,
) -> list[Any]:
    """Return the top-N leaderboard for filter_type in year.

    Args:
        registrations: Canonical registrations (any years; filtered here).
        sailors: Sailor directory (id -> {name, birth_date, boat_class});
                 only consulted by youngest_participant.
        year: Target year.
        filter_type: One of filter_type_ids().
        stats: Precomputed aggregate(registrations, year); computed on demand
               when None.
        fallback_unknown: When True, an unknown filter_type returns the full,
                          untruncated SailorYearStat list instead of raising.

    Raises:
        UnknownFilterTypeError: filter_type is unknown and fallback_unknown is False.
    """
    filter_type = FILTER_ALIASES.get(filter_type, filter_type)
    known = {f.id for f in FILTER_TYPES}
    if filter_type not in known and not fallback_unknown:
        raise UnknownFilterTypeError(
            f"Unknown filter type '{filter_type}'. Must be one of {sorted(filter_type_ids())}."
        )

    year_regs = [r for r in registrations if r.year == year]

    if filter_type == "best_avg_placement":
        return best_avg_placement(year_regs, limit, counters=counters)
    if filter_type == "youngest_participant":
        return youngest_participants(year_regs, sailors, year, limit, counters=counters)
    if filter_type == "most_races":
        return most_races(year_regs, limit, counters=counters)
    if filter_type == "best_single_placement":
        return best_single_placement(year_regs, limit)
    if filter_type == "most_active_boat_class":
        return most_active_boat_class(year_regs, limit)

    if stats is None:
        stats = aggregate(year_regs, year, geocoder=geocoder, origin=origin, counters=counters)

    if filter_type == "most_regattas":
        return top_by_regattas(stats, limit)
    if filter_type == "furthest_regatta":
        return top_by_distance(stats, limit)
    if filter_type == "most_championships":
        return top_by_championships(stats, limit)
    return list(stats)
