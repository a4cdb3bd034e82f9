"""
PostgreSQL backend: single-row inserts and point lookups over one connection.

Every insert and every lookup is its own autocommit round trip. Inserts use
`ON CONFLICT DO NOTHING` so re-running against a populated table is a no-op
rather than an error; a lookup that finds no row is skipped.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence

from psycopg import Connection

from ledger_bench.backends.abstract import AbstractBenchmarkBackend
from ledger_bench.config import BenchmarkConfig
from ledger_bench.domain.models import AccountRow
from ledger_bench.infrastructure.connections import get_pg_connection
from ledger_bench.utils.logging import get_logger

log = get_logger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id BIGINT PRIMARY KEY,
    user_data BIGINT NOT NULL,
    timestamp BIGINT NOT NULL
);
"""
DELETE_ALL_SQL = "DELETE FROM accounts;"
INSERT_SQL = (
    "INSERT INTO accounts (id, user_data, timestamp) VALUES (%s, %s, %s) "
    "ON CONFLICT DO NOTHING;"
)
SELECT_SQL = "SELECT id, user_data FROM accounts WHERE id = %s;"


class PostgresBackend(AbstractBenchmarkBackend):
    """
    Relational benchmark against the `accounts` table.
    """

    name: str = "postgres"
    description: str = "psycopg single-row INSERT ... ON CONFLICT DO NOTHING + point SELECT."

    def __init__(
        self,
        dsn_override: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._dsn_override = dsn_override
        self._clock = clock
        self._conn: Optional[Connection] = None

    @property
    def connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("PostgresBackend.connect() has not been called")
        return self._conn

    def connect(self) -> None:
        if self._conn is None:
            self._conn = get_pg_connection(self._dsn_override)

    def prepare(self, config: BenchmarkConfig) -> None:
        """Ensure the table exists, then clear it."""
        with self.connection.cursor() as cur:
            cur.execute(CREATE_TABLE_SQL)
            cur.execute(DELETE_ALL_SQL)

    def insert_batch(self, offsets: Sequence[int]) -> None:
        with self.connection.cursor() as cur:
            for index in offsets:
                row = AccountRow.for_index(index, int(self._clock()))
                cur.execute(INSERT_SQL, (row.id, row.user_data, row.timestamp))

    def lookup_batch(self, offsets: Sequence[int]) -> List[AccountRow]:
        found: List[AccountRow] = []
        with self.connection.cursor() as cur:
            for index in offsets:
                cur.execute(SELECT_SQL, (index,))
                row = cur.fetchone()
                # Missing rows do not stop the read phase.
                if row is None:
                    continue
                found.append(AccountRow(id=row[0], user_data=row[1]))
        return found

    def teardown(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None and not conn.closed:
            conn.close()
            log.debug("[TEARDOWN] PostgreSQL connection closed")


__all__ = ["PostgresBackend"]
