"""regatta_stats.awards

Per-year category awards derived from SailorYearStat, and the full-replace
write path into an award store.

Categories (at most one award each per year):
  most_events         event_count             always awarded when any sailor exists
  most_distance       total_distance_km       only when > 0
  most_regattas       regatta_count           only when > 0
  most_championships  championships_attended  only when > 0

The winner is the first sailor holding the maximum, in aggregate() order
(event_count desc, then first-seen), so ties resolve deterministically.

Recompute replaces every award of the year (delete, then insert) as one
critical section per year.  A year without registrations is a no-op: the
store is not touched.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from regatta_stats.aggregate import SailorYearStat, aggregate
from regatta_stats.distance import CLUB_ORIGIN
from regatta_stats.geocode import GeoPoint, Geocoder
from regatta_stats.registrations import Registration
from regatta_stats.shared import AwardStoreError, StatsCounters

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AwardCategory:
    id: str
    label: str
    description: str
    metric: Callable[[SailorYearStat], int]
    unit: str
    requires_positive: bool = True


def _plural(n: int, word: str) -> str:
    return f"{n:,} {word}" if n == 1 else f"{n:,} {word}s"


AWARD_CATEGORIES: tuple[AwardCategory, ...] = (
    AwardCategory(
        "most_events", "Most events",
        "Most participations across trainings, regattas and training camps",
        lambda s: s.event_count, "event", requires_positive=False,
    ),
    AwardCategory(
        "most_distance", "Furthest travelled",
        "Largest total round-trip distance to all events",
        lambda s: s.total_distance_km, "km",
    ),
    AwardCategory(
        "most_regattas", "Regatta champion",
        "Most regatta participations",
        lambda s: s.regatta_count, "regatta",
    ),
    AwardCategory(
        "most_championships", "Championship contender",
        "Most participations in regional and national championships",
        lambda s: s.championships_attended, "championship",
    ),
)

CATEGORY_IDS = tuple(c.id for c in AWARD_CATEGORIES)


@dataclass(frozen=True)
class Award:
    year: int
    category: str
    winner_first_name: str
    winner_last_name: str
    value: int
    description: str

    def to_row(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "category": self.category,
            "sailor_first_name": self.winner_first_name,
            "sailor_last_name": self.winner_last_name,
            "value": self.value,
            "description": self.description,
        }


def _describe(category: AwardCategory, value: int) -> str:
    if category.unit == "km":
        return f"{value:,} km"
    return _plural(value, category.unit)


def compute_awards(stats: list[SailorYearStat], year: int) -> list[Award]:
    """Pick one winner per category; empty when stats is empty."""
    awards: list[Award] = []
    if not stats:
        return awards
    for category in AWARD_CATEGORIES:
        # max() returns the first maximal element, preserving list order on ties.
        winner = max(stats, key=category.metric)
        value = category.metric(winner)
        if category.requires_positive and value <= 0:
            continue
        awards.append(Award(
            year=year,
            category=category.id,
            winner_first_name=winner.first_name,
            winner_last_name=winner.last_name,
            value=value,
            description=_describe(category, value),
        ))
    return awards


# ---------------------------------------------------------------------------
# Store protocol + per-year serialization
# ---------------------------------------------------------------------------

class AwardStore(Protocol):
    def delete_by_year(self, year: int) -> int: ...

    def bulk_insert(self, awards: list[Award]) -> int: ...


class YearLocks:
    """Registry of one lock per year (process-local)."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def for_year(self, year: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(year)
            if lock is None:
                lock = self._locks[year] = threading.Lock()
            return lock


_YEAR_LOCKS = YearLocks()


def replace_year(store: AwardStore, year: int, awards: list[Award]) -> int:
    """Delete all awards of year, then insert awards, as one critical section.

    Stores providing their own atomic replace_year (e.g. a database
    transaction) are delegated to; otherwise the delete/insert pair runs under
    the process-local lock for that year.

    Returns the number of awards inserted.
    """
    own_replace = getattr(store, "replace_year", None)
    if callable(own_replace):
        return own_replace(year, awards)
    with _YEAR_LOCKS.for_year(year):
        store.delete_by_year(year)
        return store.bulk_insert(awards)


class InMemoryAwardStore:
    """Dict-backed award store; replace_year is serialized per year."""

    def __init__(self) -> None:
        self._by_year: dict[int, list[Award]] = {}
        self._locks = YearLocks()

    def delete_by_year(self, year: int) -> int:
        return len(self._by_year.pop(year, []))

    def _merged(self, awards: list[Award], replacing: int | None = None) -> dict[int, list[Award]]:
        """New per-year lists with awards appended; raises before anything is stored."""
        merged: dict[int, list[Award]] = {}
        for award in awards:
            if award.year not in merged:
                existing = [] if award.year == replacing else self._by_year.get(award.year, [])
                merged[award.year] = list(existing)
            rows = merged[award.year]
            if any(a.category == award.category for a in rows):
                raise AwardStoreError(
                    f"duplicate award for year={award.year} category={award.category}"
                )
            rows.append(award)
        return merged

    def bulk_insert(self, awards: list[Award]) -> int:
        self._by_year.update(self._merged(awards))
        return len(awards)

    def replace_year(self, year: int, awards: list[Award]) -> int:
        with self._locks.for_year(year):
            if any(a.year != year for a in awards):
                raise AwardStoreError(f"replace_year({year}) given awards for another year")
            merged = self._merged(awards, replacing=year)
            self._by_year[year] = merged.get(year, [])
            return len(awards)

    def awards_for_year(self, year: int) -> list[Award]:
        return list(self._by_year.get(year, []))

    def all_awards(self) -> list[Award]:
        return [a for year in sorted(self._by_year) for a in self._by_year[year]]


# ---------------------------------------------------------------------------
# Top-level recompute
# ---------------------------------------------------------------------------

def recompute_awards(
    registrations: Iterable[Registration],
    year: int,
    store: AwardStore,
    geocoder: Geocoder | None = None,
    origin: GeoPoint = CLUB_ORIGIN,
    counters: StatsCounters | None = None,
) -> list[Award]:
    """Recompute and persist the awards of year (full replace).

    Args:
        registrations: Canonical registrations (any years; filtered here).
        year: Target year.
        store: Award store; written only when at least one award exists.
        geocoder: Location resolver for the distance category.
        counters: Optional run counters to update.

    Returns:
        The awards now stored for year; [] when the year has no sailors.

    Raises:
        AwardStoreError: The store failed; the year's previous awards are
                         left as the store's atomicity guarantees allow.
    """
    ctrs = counters if counters is not None else StatsCounters()
    stats = aggregate(registrations, year, geocoder=geocoder, origin=origin, counters=ctrs)
    awards = compute_awards(stats, year)
    ctrs.awards_computed += len(awards)

    if not awards:
        log.info("No registrations for %s; award store left untouched.", year)
        return []

    try:
        inserted = replace_year(store, year, awards)
    except AwardStoreError:
        ctrs.award_store_errors += 1
        raise
    except Exception as exc:
        ctrs.award_store_errors += 1
        raise AwardStoreError(f"replacing awards for {year} failed: {exc}") from exc

    ctrs.awards_inserted += inserted
    log.info("Replaced awards for %s: %d categories awarded.", year, inserted)
    return awards
