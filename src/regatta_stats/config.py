"""regatta_stats.config

YAML configuration for the statistics core.

Responsibilities:
  - Load and validate a YAML config file (club origin, known locations,
    championship pattern)
  - Fall back to the built-in defaults when no file is given
  - Hash YAML content for traceability

Usage:
    from pathlib import Path
    from regatta_stats.config import load_stats_config

    cfg = load_stats_config(Path("config/yearly_stats.yml"))
    stats = aggregate(registrations, 2024, geocoder=cfg.geocoder(), origin=cfg.club_origin)
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from regatta_stats.championship import (
    DEFAULT_CHAMPIONSHIP_PATTERN,
    RegexChampionshipClassifier,
)
from regatta_stats.distance import CLUB_ORIGIN
from regatta_stats.geocode import KNOWN_LOCATIONS, GeoPoint, StaticGeocoder

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

REQUIRED_YAML_KEYS = frozenset({"version", "club_origin", "known_locations"})

REQUIRED_POINT_KEYS = frozenset({"lat", "lon"})


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class StatsConfigValidationError(ValueError):
    """Raised when a YAML config file fails schema validation."""


# ---------------------------------------------------------------------------
# StatsConfig dataclass
# ---------------------------------------------------------------------------

@dataclass
class StatsConfig:
    """Parsed, validated configuration."""

    version: str
    club_origin: GeoPoint
    known_locations: dict[str, GeoPoint]
    championship_pattern: str = DEFAULT_CHAMPIONSHIP_PATTERN
    yaml_hash: str | None = None
    raw_yaml: str = field(repr=False, default="")

    def geocoder(self) -> StaticGeocoder:
        return StaticGeocoder(self.known_locations)

    def classifier(self) -> RegexChampionshipClassifier:
        return RegexChampionshipClassifier(self.championship_pattern)


def default_config() -> StatsConfig:
    return StatsConfig(
        version="builtin",
        club_origin=CLUB_ORIGIN,
        known_locations=dict(KNOWN_LOCATIONS),
    )


# ---------------------------------------------------------------------------
# Loader + validator
# ---------------------------------------------------------------------------

def _point(data: dict[str, Any], default_name: str = "") -> GeoPoint:
    return GeoPoint(
        lat=float(data["lat"]),
        lon=float(data["lon"]),
        display_name=str(data.get("display_name") or data.get("name") or default_name),
    )


def load_stats_config(yaml_path: Path | None = None) -> StatsConfig:
    """Load, validate, and return a StatsConfig.

    Args:
        yaml_path: Path to the YAML file, or None for the built-in defaults.

    Raises:
        StatsConfigValidationError: If any required field is missing or invalid.
        FileNotFoundError: If the YAML file does not exist.
    """
    if yaml_path is None:
        return default_config()
    raw = yaml_path.read_text(encoding="utf-8")
    data: dict[str, Any] = yaml.safe_load(raw)
    validate_stats_config(data)
    locations = {
        str(name).strip().lower(): _point(point, str(name).strip())
        for name, point in data["known_locations"].items()
    }
    return StatsConfig(
        version=str(data["version"]),
        club_origin=_point(data["club_origin"]),
        known_locations=locations,
        championship_pattern=str(data.get("championship_pattern") or DEFAULT_CHAMPIONSHIP_PATTERN),
        yaml_hash=hashlib.sha256(raw.encode("utf-8")).hexdigest(),
        raw_yaml=raw,
    )


def _validate_point(label: str, point: Any) -> None:
    if not isinstance(point, dict):
        raise StatsConfigValidationError(f"'{label}' must be a mapping with lat/lon.")
    missing = REQUIRED_POINT_KEYS - set(point.keys())
    if missing:
        raise StatsConfigValidationError(f"'{label}' missing keys: {sorted(missing)}")
    for key, bound in (("lat", 90.0), ("lon", 180.0)):
        val = point[key]
        try:
            fval = float(val)
        except (TypeError, ValueError):
            raise StatsConfigValidationError(f"'{label}.{key}' value '{val}' is not numeric.")
        if not (-bound <= fval <= bound):
            raise StatsConfigValidationError(
                f"'{label}.{key}' value {fval} must be in [{-bound}, {bound}]."
            )


def validate_stats_config(data: dict[str, Any]) -> None:
    """Raise StatsConfigValidationError if data does not match required schema.

    Validates:
      - Required top-level keys present
      - club_origin and every known location carry numeric, in-range lat/lon
      - known_locations is a non-empty mapping
      - championship_pattern (when given) compiles
    """
    if not isinstance(data, dict):
        raise StatsConfigValidationError("YAML root must be a mapping.")

    missing_keys = REQUIRED_YAML_KEYS - set(data.keys())
    if missing_keys:
        raise StatsConfigValidationError(f"Missing required YAML keys: {sorted(missing_keys)}")

    _validate_point("club_origin", data["club_origin"])

    locations = data["known_locations"]
    if not isinstance(locations, dict) or not locations:
        raise StatsConfigValidationError("'known_locations' must be a non-empty mapping.")
    for name, point in locations.items():
        _validate_point(f"known_locations.{name}", point)

    pattern = data.get("championship_pattern")
    if pattern is not None:
        try:
            re.compile(str(pattern))
        except re.error as exc:
            raise StatsConfigValidationError(f"'championship_pattern' does not compile: {exc}")
