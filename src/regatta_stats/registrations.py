"""regatta_stats.registrations

Maps the two participation sources onto one canonical Registration shape:

  event_registrations  — season-planning sign-ups linked to an event row
                         (source A; only status 'participated' counts)
  regatta_entries      — entry-fee ledger rows with a combined sailor name,
                         regatta name, date/season and results (source B)

Raw rows arrive as mappings (psycopg dict rows or JSON objects).  Each source
has a staging dataclass and one adapter producing Registration; the
aggregation and ranking layers only ever see Registration.

No identity reconciliation is attempted: the same person under two different
sailor_id values across sources is two sailors.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Union

from regatta_stats.championship import DEFAULT_CLASSIFIER, ChampionshipClassifier
from regatta_stats.normalize import (
    coerce_date,
    normalize_space,
    parse_int,
    parse_season_year,
    split_display_name,
    trim,
)
from regatta_stats.shared import StatsCounters

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SOURCE_EVENT_REGISTRATIONS = "event_registrations"
SOURCE_REGATTA_ENTRIES = "regatta_entries"

EVENT_TYPES = frozenset({"regatta", "training", "camp", "other"})
TRAINING_EVENT_TYPES = frozenset({"training", "camp"})

# Legacy German event-type ids used by the season planner.
_EVENT_TYPE_ALIASES = {
    "trainingslager": "camp",
    "sonstiges": "other",
}

PARTICIPATED_STATUSES = frozenset({"participated", "teilgenommen"})


# ---------------------------------------------------------------------------
# Canonical record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Registration:
    sailor_id: str | None
    first_name: str
    last_name: str
    event_name: str
    event_location: str
    event_type: str
    boat_class: str
    is_championship: bool
    year: int
    placement: int | None = None
    total_participants: int | None = None
    race_count: int | None = None
    source: str = SOURCE_EVENT_REGISTRATIONS

    @property
    def has_sailor(self) -> bool:
        return bool(self.sailor_id)

    @property
    def relative_placement(self) -> float | None:
        """placement / field size, or None when either is missing or invalid."""
        if self.placement is None or not self.total_participants:
            return None
        if self.placement <= 0 or self.total_participants <= 0:
            return None
        return self.placement / self.total_participants


# ---------------------------------------------------------------------------
# Staging dataclasses (one per source)
# ---------------------------------------------------------------------------

@dataclass
class EventRegistrationRecord:
    source = SOURCE_EVENT_REGISTRATIONS

    sailor_id: str | None
    first_name: str
    last_name: str
    status: str | None
    event_name: str
    event_location: str
    event_type: str
    is_championship: bool
    start_date: date | None
    created_at: date | None
    boat_class: str


@dataclass
class RegattaEntryRecord:
    source = SOURCE_REGATTA_ENTRIES

    sailor_id: str | None
    sailor_name: str | None
    regatta_name: str
    regatta_date: date | None
    season: str | None
    placement: int | None
    total_participants: int | None
    race_count: int | None
    boat_class: str


SourceRecord = Union[EventRegistrationRecord, RegattaEntryRecord]


# ---------------------------------------------------------------------------
# Row parsers (staging layer)
# ---------------------------------------------------------------------------

def _str_id(value: Any) -> str | None:
    return trim(str(value)) if value is not None else None


def _mapping(value: Any) -> Mapping[str, Any]:
    """Embedded objects that are not mappings degrade to an empty one."""
    return value if isinstance(value, Mapping) else {}


def _name_of(value: Any) -> str:
    """Accept either a plain string or an embedded {'name': ...} object."""
    if isinstance(value, Mapping):
        value = value.get("name")
    return normalize_space(value) or ""


def canonical_event_type(value: str | None) -> str:
    """Map a source event type onto regatta/training/camp/other."""
    v = trim(value)
    if v is None:
        return "other"
    v = v.lower()
    v = _EVENT_TYPE_ALIASES.get(v, v)
    return v if v in EVENT_TYPES else "other"


def parse_event_registration_row(row: Mapping[str, Any]) -> EventRegistrationRecord:
    event = _mapping(row.get("event"))
    return EventRegistrationRecord(
        sailor_id=_str_id(row.get("sailor_id")),
        first_name=normalize_space(row.get("sailor_first_name")) or "",
        last_name=normalize_space(row.get("sailor_last_name")) or "",
        status=trim(row.get("status")),
        event_name=normalize_space(event.get("name")) or "",
        event_location=normalize_space(event.get("location")) or "",
        event_type=canonical_event_type(event.get("event_type")),
        is_championship=bool(event.get("is_championship")),
        start_date=coerce_date(event.get("start_date")),
        created_at=coerce_date(row.get("created_at")),
        boat_class=_name_of(row.get("boat_class")),
    )


def parse_regatta_entry_row(row: Mapping[str, Any]) -> RegattaEntryRecord:
    sailor = _mapping(row.get("sailor"))
    sailor_id = row.get("sailor_id")
    if sailor_id is None:
        sailor_id = sailor.get("id")
    return RegattaEntryRecord(
        sailor_id=_str_id(sailor_id),
        sailor_name=normalize_space(sailor.get("name") or row.get("sailor_name")),
        regatta_name=normalize_space(row.get("regatta_name")) or "",
        regatta_date=coerce_date(row.get("regatta_date")),
        season=trim(None if row.get("season") is None else str(row.get("season"))),
        placement=parse_int(row.get("placement")),
        total_participants=parse_int(row.get("total_participants")),
        race_count=parse_int(row.get("race_count")),
        boat_class=_name_of(row.get("boat_class")),
    )


# ---------------------------------------------------------------------------
# Adapters (staging → canonical)
# ---------------------------------------------------------------------------

def from_event_registration(rec: EventRegistrationRecord, today: date) -> Registration:
    when = rec.start_date or rec.created_at or today
    return Registration(
        sailor_id=rec.sailor_id,
        first_name=rec.first_name,
        last_name=rec.last_name,
        event_name=rec.event_name,
        event_location=rec.event_location,
        event_type=rec.event_type,
        boat_class=rec.boat_class,
        is_championship=rec.is_championship,
        year=when.year,
        source=SOURCE_EVENT_REGISTRATIONS,
    )


def from_regatta_entry(
    rec: RegattaEntryRecord,
    today: date,
    classifier: ChampionshipClassifier = DEFAULT_CLASSIFIER,
) -> Registration:
    first, last = split_display_name(rec.sailor_name)
    if rec.regatta_date is not None:
        year = rec.regatta_date.year
    else:
        year = parse_season_year(rec.season) or today.year
    return Registration(
        sailor_id=rec.sailor_id,
        first_name=first,
        last_name=last,
        event_name=rec.regatta_name,
        # Entry-fee rows carry no venue.
        event_location="",
        event_type="regatta",
        boat_class=rec.boat_class,
        is_championship=classifier.is_championship(rec.regatta_name),
        year=year,
        placement=rec.placement,
        total_participants=rec.total_participants,
        race_count=rec.race_count,
        source=SOURCE_REGATTA_ENTRIES,
    )


def to_registration(
    rec: SourceRecord,
    today: date,
    classifier: ChampionshipClassifier = DEFAULT_CLASSIFIER,
) -> Registration:
    if isinstance(rec, EventRegistrationRecord):
        return from_event_registration(rec, today)
    return from_regatta_entry(rec, today, classifier)


# ---------------------------------------------------------------------------
# Top-level normalizer
# ---------------------------------------------------------------------------

def _skip_malformed(source: str, row: Any, ctrs: StatsCounters) -> None:
    ctrs.records_malformed += 1
    ctrs.warn(f"{source}: skipped row that is not a mapping: {row!r:.80}")
    log.warning("Skipping %s row that is not a mapping: %r", source, row)


def normalize(
    event_registration_rows: Iterable[Mapping[str, Any]],
    regatta_entry_rows: Iterable[Mapping[str, Any]],
    classifier: ChampionshipClassifier = DEFAULT_CLASSIFIER,
    today: date | None = None,
    counters: StatsCounters | None = None,
) -> list[Registration]:
    """Map both raw sources to Registration, source A first, order preserved.

    Event registrations are kept only when their status is 'participated'.
    Rows without a sailor identity are still emitted (sailor_id=None); the
    aggregation and ranking layers exclude them.

    Args:
        event_registration_rows: Source A rows with an embedded 'event' mapping.
        regatta_entry_rows: Source B rows with an embedded 'sailor' mapping.
        classifier: Championship heuristic for source B regatta names.
        today: Reference date for the current-year fallback (default: today).
        counters: Optional run counters to update.
    """
    ctrs = counters if counters is not None else StatsCounters()
    today = today or date.today()
    out: list[Registration] = []

    for row in event_registration_rows:
        ctrs.event_registrations_read += 1
        if not isinstance(row, Mapping):
            _skip_malformed(SOURCE_EVENT_REGISTRATIONS, row, ctrs)
            continue
        rec = parse_event_registration_row(row)
        if (rec.status or "").lower() not in PARTICIPATED_STATUSES:
            ctrs.event_registrations_skipped_status += 1
            continue
        out.append(to_registration(rec, today, classifier))

    for row in regatta_entry_rows:
        ctrs.regatta_entries_read += 1
        if not isinstance(row, Mapping):
            _skip_malformed(SOURCE_REGATTA_ENTRIES, row, ctrs)
            continue
        rec = parse_regatta_entry_row(row)
        out.append(to_registration(rec, today, classifier))

    ctrs.registrations_normalized += len(out)
    log.debug(
        "Normalized %d registrations (%d event registrations, %d regatta entries read)",
        len(out), ctrs.event_registrations_read, ctrs.regatta_entries_read,
    )
    return out


def registrations_for_year(
    registrations: Iterable[Registration],
    year: int,
) -> list[Registration]:
    return [r for r in registrations if r.year == year]
