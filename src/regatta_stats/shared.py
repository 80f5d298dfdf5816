"""regatta_stats.shared

Shared utilities used by every computation mode.
Includes the exception types surfaced to callers, StatsCounters, and
report-writing support for the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class UnknownFilterTypeError(ValueError):
    """Raised when a leaderboard id is not one of the known filter types."""


class SourceLoadError(Exception):
    """Raised when a collaborator (registration store, sailor directory) fails.

    Distinct from an empty result: a year without participations yields
    empty lists, never this exception.
    """


class AwardStoreError(Exception):
    """Raised when the award store fails to replace a year's awards."""


# ---------------------------------------------------------------------------
# StatsCounters
# ---------------------------------------------------------------------------

@dataclass
class StatsCounters:
    # Normalization
    event_registrations_read: int = 0
    event_registrations_skipped_status: int = 0
    regatta_entries_read: int = 0
    registrations_normalized: int = 0
    # Aggregation / ranking
    records_malformed: int = 0
    locations_resolved: int = 0
    locations_unresolved: int = 0
    geocode_errors: int = 0
    sailors_aggregated: int = 0
    # Awards
    awards_computed: int = 0
    awards_inserted: int = 0
    award_store_errors: int = 0
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_registrations_read": self.event_registrations_read,
            "event_registrations_skipped_status": self.event_registrations_skipped_status,
            "regatta_entries_read": self.regatta_entries_read,
            "registrations_normalized": self.registrations_normalized,
            "records_malformed": self.records_malformed,
            "locations_resolved": self.locations_resolved,
            "locations_unresolved": self.locations_unresolved,
            "geocode_errors": self.geocode_errors,
            "sailors_aggregated": self.sailors_aggregated,
            "awards_computed": self.awards_computed,
            "awards_inserted": self.awards_inserted,
            "award_store_errors": self.award_store_errors,
            "warnings": self.warnings[:50],
        }


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

def _warning_lines(ctrs: StatsCounters) -> list[str]:
    lines: list[str] = []
    if ctrs.warnings:
        lines.append(f"\nWarnings ({len(ctrs.warnings)}):")
        for w in ctrs.warnings[:20]:
            lines.append(f"  {w}")
        if len(ctrs.warnings) > 20:
            lines.append(f"  ... and {len(ctrs.warnings) - 20} more")
    return lines


def build_run_report(title: str, ctrs: StatsCounters, dry_run: bool = False) -> str:
    """Fixed-width run summary printed at the end of every CLI mode."""
    lines = [
        "=" * 60,
        title,
        f"  dry_run: {dry_run}",
        "=" * 60,
        f"  event registrations read:    {ctrs.event_registrations_read}",
        f"    → skipped (status):        {ctrs.event_registrations_skipped_status}",
        f"  regatta entries read:        {ctrs.regatta_entries_read}",
        f"  registrations normalized:    {ctrs.registrations_normalized}",
        f"  malformed records:           {ctrs.records_malformed}",
        f"  locations resolved:          {ctrs.locations_resolved}",
        f"  locations unresolved:        {ctrs.locations_unresolved}",
        f"  geocode errors:              {ctrs.geocode_errors}",
        f"  sailors aggregated:          {ctrs.sailors_aggregated}",
        f"  awards computed:             {ctrs.awards_computed}",
        f"  awards inserted:             {ctrs.awards_inserted}",
        f"  award store errors:          {ctrs.award_store_errors}",
    ]
    lines.extend(_warning_lines(ctrs))
    lines.append("=" * 60)
    return "\n".join(lines)
