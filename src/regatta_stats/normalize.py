"""Normalization helpers for raw participation records.

All functions accept loosely-typed source values (str, int, date, None) and
return the appropriate type or None.  None of them raise on bad input.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

_SEASON_YEAR_RE = re.compile(r"\d{4}")


# ---------------------------------------------------------------------------
# Rule 1: trim
# ---------------------------------------------------------------------------

def trim(value: str | None) -> str | None:
    """Strip leading/trailing whitespace; treat empty string as None."""
    if value is None:
        return None
    v = str(value).strip()
    return v if v else None


# ---------------------------------------------------------------------------
# Rule 2: normalize_space
# ---------------------------------------------------------------------------

def normalize_space(value: str | None) -> str | None:
    """Collapse internal runs of whitespace to single spaces, then trim."""
    v = trim(value)
    if v is None:
        return None
    return re.sub(r"\s+", " ", v)


# ---------------------------------------------------------------------------
# Rule 3: location_key  (lookup key for the geocode table)
# ---------------------------------------------------------------------------

def location_key(value: str | None) -> str | None:
    """Lowercase and trim a location name for exact-match lookup."""
    v = trim(value)
    if v is None:
        return None
    return v.lower()


# ---------------------------------------------------------------------------
# Rule 4: split_display_name
# ---------------------------------------------------------------------------

def split_display_name(full_name: str | None) -> tuple[str, str]:
    """Split a "First Last" display name on the first space.

    "Anna Maria Schmidt" → ("Anna", "Maria Schmidt")
    "Anna"               → ("Anna", "")
    None / blank         → ("", "")
    """
    v = trim(full_name)
    if v is None:
        return ("", "")
    first, _, rest = v.partition(" ")
    return (first, rest.strip())


# ---------------------------------------------------------------------------
# Rule 5: parse_int
# ---------------------------------------------------------------------------

def parse_int(value: Any) -> int | None:
    """Parse an integer from int/str input, returning None on failure.

    Booleans are rejected; floats are accepted only when integral.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    v = trim(value)
    if v is None:
        return None
    try:
        return int(v)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Rule 6: coerce_date
# ---------------------------------------------------------------------------

def coerce_date(value: Any) -> date | None:
    """Return a date from a date/datetime or an ISO-8601 string, else None.

    Accepts '2024-05-01', '2024-05-01T10:00:00' and '2024-05-01 10:00:00+00'.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    v = trim(value)
    if v is None:
        return None
    try:
        return date.fromisoformat(v[:10])
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Rule 7: parse_season_year
# ---------------------------------------------------------------------------

def parse_season_year(value: Any) -> int | None:
    """Extract a four-digit year from a season value.

    '2024' → 2024, 'Saison 2023' → 2023, '2023/24' → 2023, 2022 → 2022.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    v = trim(value)
    if v is None:
        return None
    m = _SEASON_YEAR_RE.search(v)
    return int(m.group(0)) if m else None
