"""Integration tests for regatta_stats.store.PostgresAwardStore.

Runs the award recompute against the yearly_awards table and checks that a
recompute fully replaces a year's rows without touching other years.
"""

from __future__ import annotations

import threading

import psycopg
import pytest

from regatta_stats.awards import Award, recompute_awards
from regatta_stats.registrations import Registration
from regatta_stats.shared import AwardStoreError
from regatta_stats.store import PostgresAwardStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _reg(sailor_id, first, last, location="", event_type="regatta", championship=False, year=2024):
    return Registration(
        sailor_id=sailor_id,
        first_name=first,
        last_name=last,
        event_name="Event",
        event_location=location,
        event_type=event_type,
        boat_class="",
        is_championship=championship,
        year=year,
    )


REGISTRATIONS = [
    _reg("s", "Sara", "Lang", location="Kiel", championship=True),
    _reg("s", "Sara", "Lang", event_type="training"),
    _reg("b", "Ben", "Kurz", location="Warnemünde"),
    _reg("b", "Ben", "Kurz", location="Warnemünde"),
]


def _count(conn, year) -> int:
    return conn.execute(
        "SELECT count(*) FROM yearly_awards WHERE year = %s", (year,)
    ).fetchone()[0]


# ---------------------------------------------------------------------------
# Basic store operations
# ---------------------------------------------------------------------------

class TestStoreOperations:
    def test_insert_and_read_back(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        award = Award(2024, "most_events", "Sara", "Lang", 7, "7 events")
        assert store.bulk_insert([award]) == 1
        conn.commit()
        assert store.awards_for_year(2024) == [award]

    def test_delete_by_year_returns_rowcount(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        store.bulk_insert([
            Award(2024, "most_events", "A", "B", 1, "1 event"),
            Award(2024, "most_regattas", "A", "B", 1, "1 regatta"),
            Award(2023, "most_events", "C", "D", 2, "2 events"),
        ])
        assert store.delete_by_year(2024) == 2
        conn.commit()
        assert _count(conn, 2024) == 0
        assert _count(conn, 2023) == 1

    def test_bulk_insert_empty(self, db_conn):
        conn, _ = db_conn
        assert PostgresAwardStore(conn).bulk_insert([]) == 0

    def test_duplicate_category_violates_unique(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        award = Award(2024, "most_events", "A", "B", 1, "1 event")
        with pytest.raises(psycopg.errors.UniqueViolation):
            store.bulk_insert([award, award])
        conn.rollback()


# ---------------------------------------------------------------------------
# recompute_awards against Postgres
# ---------------------------------------------------------------------------

class TestRecomputeAwards:
    def test_persists_one_row_per_category(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        awards = recompute_awards(REGISTRATIONS, 2024, store)
        conn.commit()
        assert store.awards_for_year(2024) == awards
        assert len(awards) == 4

    def test_idempotent(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        recompute_awards(REGISTRATIONS, 2024, store)
        conn.commit()
        first = store.awards_for_year(2024)
        recompute_awards(REGISTRATIONS, 2024, store)
        conn.commit()
        assert store.awards_for_year(2024) == first
        assert _count(conn, 2024) == 4

    def test_full_replace_keeps_other_years(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        store.bulk_insert([Award(2023, "most_events", "Cleo", "Mohr", 3, "3 events")])
        recompute_awards(REGISTRATIONS, 2024, store)
        recompute_awards([_reg("t", "Tom", "Rau", event_type="training")], 2024, store)
        conn.commit()
        assert [a.category for a in store.awards_for_year(2024)] == ["most_events"]
        assert store.awards_for_year(2023)[0].winner_first_name == "Cleo"

    def test_empty_year_leaves_rows_untouched(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        recompute_awards(REGISTRATIONS, 2024, store)
        conn.commit()
        before = store.awards_for_year(2024)
        assert recompute_awards(REGISTRATIONS, 2019, store) == []
        assert recompute_awards([], 2024, store) == []
        conn.commit()
        assert store.awards_for_year(2024) == before

    def test_rollback_discards_recompute(self, db_conn):
        conn, _ = db_conn
        # An open outer transaction turns the store block into a savepoint.
        conn.execute("SELECT 1")
        store = PostgresAwardStore(conn)
        recompute_awards(REGISTRATIONS, 2024, store)
        conn.rollback()
        assert _count(conn, 2024) == 0

    def test_failure_wrapped_and_rolled_back(self, db_conn):
        conn, _ = db_conn
        store = PostgresAwardStore(conn)
        recompute_awards(REGISTRATIONS, 2024, store)
        conn.commit()
        conn.execute("ALTER TABLE yearly_awards DROP CONSTRAINT yearly_awards_category_check")
        conn.execute(
            "ALTER TABLE yearly_awards ADD CONSTRAINT yearly_awards_category_check "
            "CHECK (category <> 'most_championships')"
        )
        conn.commit()
        with pytest.raises(AwardStoreError):
            recompute_awards(REGISTRATIONS, 2024, store)
        conn.rollback()
        assert _count(conn, 2024) == 4


class TestConcurrentRecompute:
    def test_two_connections_same_year(self, db_conn):
        _, dsn = db_conn
        errors: list[Exception] = []

        def worker():
            with psycopg.connect(dsn) as conn:
                store = PostgresAwardStore(conn)
                try:
                    for _ in range(10):
                        recompute_awards(REGISTRATIONS, 2024, store)
                        conn.commit()
                except Exception as exc:
                    errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        with psycopg.connect(dsn) as conn:
            assert _count(conn, 2024) == 4
