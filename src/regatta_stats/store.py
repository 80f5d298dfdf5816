"""regatta_stats.store

PostgreSQL award store backed by the yearly_awards table
(migrations/0001_yearly_stats.sql).

replace_year() wraps delete + insert in one transaction (a savepoint when the
caller already has a transaction open) and first takes a transaction-scoped
advisory lock keyed on the year, so concurrent recomputes for the same year
queue behind each other instead of interleaving.
"""

from __future__ import annotations

import psycopg

from regatta_stats.awards import Award

# First key of the two-int advisory lock; second key is the year.
_AWARD_LOCK_NAMESPACE = 7301

_SELECT_COLS = "year, category, sailor_first_name, sailor_last_name, value, description"


class PostgresAwardStore:
    """Award store over an open psycopg connection (caller manages commit)."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    def delete_by_year(self, year: int) -> int:
        cur = self._conn.execute("DELETE FROM yearly_awards WHERE year = %s", (year,))
        return cur.rowcount

    def bulk_insert(self, awards: list[Award]) -> int:
        if not awards:
            return 0
        with self._conn.cursor() as cur:
            cur.executemany(
                """
                INSERT INTO yearly_awards
                    (year, category, sailor_first_name, sailor_last_name,
                     value, description)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                [
                    (a.year, a.category, a.winner_first_name, a.winner_last_name,
                     a.value, a.description)
                    for a in awards
                ],
            )
        return len(awards)

    def replace_year(self, year: int, awards: list[Award]) -> int:
        with self._conn.transaction():
            self._conn.execute(
                "SELECT pg_advisory_xact_lock(%s::int, %s::int)",
                (_AWARD_LOCK_NAMESPACE, year),
            )
            self.delete_by_year(year)
            return self.bulk_insert(awards)

    def awards_for_year(self, year: int) -> list[Award]:
        rows = self._conn.execute(
            f"SELECT {_SELECT_COLS} FROM yearly_awards WHERE year = %s ORDER BY id",
            (year,),
        ).fetchall()
        return [
            Award(
                year=row[0],
                category=row[1],
                winner_first_name=row[2],
                winner_last_name=row[3],
                value=row[4],
                description=row[5] or "",
            )
            for row in rows
        ]
