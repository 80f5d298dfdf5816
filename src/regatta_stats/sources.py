"""regatta_stats.sources

PostgreSQL loaders for the collaborator data feeding the statistics core:

  event_registrations ⨝ events ⨝ boat_classes   → source A rows
  regatta_entries ⨝ sailors                      → source B rows
  sailors                                        → sailor directory

Rows are returned as mappings in the shape registrations.normalize() expects.
Any psycopg.Error is re-raised as SourceLoadError so that callers can tell a
failed load apart from a year that simply has no data.
"""

from __future__ import annotations

import logging
from typing import Any

import psycopg

from regatta_stats.registrations import PARTICIPATED_STATUSES
from regatta_stats.shared import SourceLoadError

log = logging.getLogger(__name__)

_EVENT_REGISTRATION_COLS = [
    "id", "sailor_id", "sailor_first_name", "sailor_last_name", "status",
    "created_at", "boat_class_name",
    "event_name", "event_location", "event_type", "is_championship", "start_date",
]

_REGATTA_ENTRY_COLS = [
    "id", "sailor_id", "sailor_name", "regatta_name", "regatta_date", "season",
    "placement", "total_participants", "race_count", "boat_class",
]


def _str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


# ---------------------------------------------------------------------------
# Source A: event registrations
# ---------------------------------------------------------------------------

def load_event_registrations(conn: psycopg.Connection) -> list[dict[str, Any]]:
    """Registrations with status 'participated', newest first."""
    try:
        raw_rows = conn.execute(
            """
            SELECT r.id, r.sailor_id, r.sailor_first_name, r.sailor_last_name,
                   r.status, r.created_at, bc.name,
                   e.name, e.location, e.event_type, e.is_championship, e.start_date
            FROM event_registrations r
            LEFT JOIN events e ON e.id = r.event_id
            LEFT JOIN boat_classes bc ON bc.id = r.boat_class_id
            WHERE r.status = ANY(%s)
            ORDER BY r.created_at DESC, r.id
            """,
            (sorted(PARTICIPATED_STATUSES),),
        ).fetchall()
    except psycopg.Error as exc:
        raise SourceLoadError(f"loading event_registrations failed: {exc}") from exc

    out: list[dict[str, Any]] = []
    for raw_row in raw_rows:
        row = dict(zip(_EVENT_REGISTRATION_COLS, raw_row))
        out.append({
            "id": _str_or_none(row["id"]),
            "sailor_id": _str_or_none(row["sailor_id"]),
            "sailor_first_name": row["sailor_first_name"],
            "sailor_last_name": row["sailor_last_name"],
            "status": row["status"],
            "created_at": row["created_at"],
            "boat_class": {"name": row["boat_class_name"]} if row["boat_class_name"] else None,
            "event": {
                "name": row["event_name"],
                "location": row["event_location"],
                "event_type": row["event_type"],
                "is_championship": row["is_championship"],
                "start_date": row["start_date"],
            },
        })
    log.debug("Loaded %d event registrations", len(out))
    return out


# ---------------------------------------------------------------------------
# Source B: regatta entries
# ---------------------------------------------------------------------------

def load_regatta_entries(conn: psycopg.Connection) -> list[dict[str, Any]]:
    try:
        raw_rows = conn.execute(
            """
            SELECT re.id, re.sailor_id, s.name, re.regatta_name, re.regatta_date,
                   re.season, re.placement, re.total_participants, re.race_count,
                   re.boat_class
            FROM regatta_entries re
            LEFT JOIN sailors s ON s.id = re.sailor_id
            ORDER BY re.regatta_date DESC NULLS LAST, re.created_at DESC, re.id
            """
        ).fetchall()
    except psycopg.Error as exc:
        raise SourceLoadError(f"loading regatta_entries failed: {exc}") from exc

    out: list[dict[str, Any]] = []
    for raw_row in raw_rows:
        row = dict(zip(_REGATTA_ENTRY_COLS, raw_row))
        sailor_id = _str_or_none(row.pop("sailor_id"))
        sailor_name = row.pop("sailor_name")
        row["id"] = _str_or_none(row["id"])
        row["sailor_id"] = sailor_id
        row["sailor"] = {"id": sailor_id, "name": sailor_name} if sailor_id else None
        out.append(row)
    log.debug("Loaded %d regatta entries", len(out))
    return out


# ---------------------------------------------------------------------------
# Sailor directory
# ---------------------------------------------------------------------------

def load_sailor_directory(conn: psycopg.Connection) -> dict[str, dict[str, Any]]:
    """id → {name, birth_date, boat_class}."""
    try:
        rows = conn.execute(
            "SELECT id, name, birth_date, boat_class FROM sailors ORDER BY name"
        ).fetchall()
    except psycopg.Error as exc:
        raise SourceLoadError(f"loading sailors failed: {exc}") from exc
    return {
        str(r[0]): {"name": r[1], "birth_date": r[2], "boat_class": r[3]}
        for r in rows
    }
