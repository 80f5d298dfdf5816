"""regatta_stats.cli

Unified CLI entrypoint for the yearly statistics core.

Modes (--mode):
  stats    — per-sailor metrics for a year (SailorYearStat, event_count desc)
  rank     — one top-10 leaderboard (--filter-type)
  awards   — recompute and persist the year's awards (full replace)
  summary  — headline counts for a year

Usage:
    python -m regatta_stats.cli \\
        --mode awards \\
        --db-dsn "$DB_DSN" \\
        --year 2024 \\
        --config config/yearly_stats.yml
"""

from __future__ import annotations

import logging
import sys
import uuid
from pathlib import Path
from typing import Any

import click
import psycopg

from regatta_stats.aggregate import aggregate, yearly_summary
from regatta_stats.awards import recompute_awards
from regatta_stats.config import StatsConfig, load_stats_config
from regatta_stats.ranking import filter_type_ids, rank
from regatta_stats.registrations import Registration, normalize
from regatta_stats.shared import (
    AwardStoreError,
    SourceLoadError,
    StatsCounters,
    UnknownFilterTypeError,
    build_run_report,
)
from regatta_stats.sources import (
    load_event_registrations,
    load_regatta_entries,
    load_sailor_directory,
)
from regatta_stats.store import PostgresAwardStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_registrations(
    conn: psycopg.Connection,
    cfg: StatsConfig,
    counters: StatsCounters,
) -> list[Registration]:
    return normalize(
        load_event_registrations(conn),
        load_regatta_entries(conn),
        classifier=cfg.classifier(),
        counters=counters,
    )


def _format_entry(position: int, entry: Any) -> str:
    payload = entry.to_dict() if hasattr(entry, "to_dict") else vars(entry)
    name = payload.get("name") or " ".join(
        p for p in (payload.get("first_name"), payload.get("last_name")) if p
    )
    rest = ", ".join(
        f"{k}={v}" for k, v in payload.items()
        if k not in ("sailor_id", "first_name", "last_name", "name")
    )
    return f"  {position:>2}. {name}  ({rest})"


# ---------------------------------------------------------------------------
# Unified CLI
# ---------------------------------------------------------------------------

@click.command()
@click.option(
    "--mode",
    default="stats",
    type=click.Choice(["stats", "rank", "awards", "summary"]),
    show_default=True,
    help="Computation mode",
)
@click.option("--db-dsn", required=True, help="PostgreSQL DSN")
@click.option("--year", required=True, type=int, help="Target year")
@click.option(
    "--filter-type",
    default="most_regattas",
    show_default=True,
    help=f"[rank] Leaderboard id: {', '.join(filter_type_ids())}",
)
@click.option(
    "--fallback-unknown/--no-fallback-unknown",
    default=False,
    show_default=True,
    help="[rank] Return the unfiltered sailor list for unknown filter ids instead of failing",
)
@click.option("--config", "config_path", default=None, type=click.Path(), help="YAML config file")
@click.option("--dry-run", is_flag=True, default=False, help="[awards] Roll back instead of committing")
@click.option("--run-id", default=None, help="Override UUID for log correlation")
@click.option("--verbose", is_flag=True, default=False, help="Enable DEBUG logging")
def main(
    mode: str,
    db_dsn: str,
    year: int,
    filter_type: str,
    fallback_unknown: bool,
    config_path: str | None,
    dry_run: bool,
    run_id: str | None,
    verbose: bool,
) -> None:
    """Yearly statistics, rankings and awards."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_id = run_id or str(uuid.uuid4())
    counters = StatsCounters()
    cfg = load_stats_config(Path(config_path) if config_path else None)

    click.echo(f"[{run_id}] Starting {mode} run for {year} (dry_run={dry_run}, config={cfg.version})")

    conn = psycopg.connect(db_dsn, autocommit=False)
    try:
        registrations = _load_registrations(conn, cfg, counters)
        click.echo(f"[{run_id}]   {len(registrations)} registrations normalized")

        if mode == "stats":
            stats = aggregate(
                registrations, year,
                geocoder=cfg.geocoder(), origin=cfg.club_origin, counters=counters,
            )
            if not stats:
                click.echo(f"[{run_id}] No participations recorded for {year}.")
            for i, stat in enumerate(stats, start=1):
                click.echo(_format_entry(i, stat))

        elif mode == "rank":
            sailors = load_sailor_directory(conn) if filter_type == "youngest_participant" else None
            entries = rank(
                registrations, sailors, year, filter_type,
                geocoder=cfg.geocoder(), origin=cfg.club_origin,
                counters=counters, fallback_unknown=fallback_unknown,
            )
            click.echo(f"[{run_id}] {filter_type}: top {len(entries)}")
            for i, entry in enumerate(entries, start=1):
                click.echo(_format_entry(i, entry))

        elif mode == "awards":
            store = PostgresAwardStore(conn)
            awards = recompute_awards(
                registrations, year, store,
                geocoder=cfg.geocoder(), origin=cfg.club_origin, counters=counters,
            )
            if not awards:
                click.echo(f"[{run_id}] No participations for {year}; awards unchanged.")
            for award in awards:
                click.echo(
                    f"  {award.category:<20} {award.winner_first_name} "
                    f"{award.winner_last_name}: {award.description}"
                )
            if dry_run:
                conn.rollback()
                click.echo(f"[{run_id}] DRY RUN — rolled back.")
            else:
                conn.commit()

        elif mode == "summary":
            summary = yearly_summary(registrations, year)
            for key, value in summary.to_dict().items():
                click.echo(f"  {key:<18} {value}")

    except UnknownFilterTypeError as exc:
        click.echo(f"[{run_id}] FATAL: {exc}", err=True)
        sys.exit(1)
    except (SourceLoadError, AwardStoreError) as exc:
        if not conn.closed:
            conn.rollback()
        click.echo(f"[{run_id}] FATAL: {exc}", err=True)
        click.echo(build_run_report(f"Yearly Stats Report ({mode})", counters, dry_run))
        sys.exit(1)
    finally:
        if not conn.closed:
            conn.close()

    click.echo(build_run_report(f"Yearly Stats Report ({mode})", counters, dry_run))


if __name__ == "__main__":
    main()
