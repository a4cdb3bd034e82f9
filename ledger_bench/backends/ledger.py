"""
immudb backend: the same two-phase workload against immudb's SQL layer.

Statements are sent with named parameters (`@id`, ...) rather than values
formatted into the SQL text.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence

from immudb import ImmudbClient

from ledger_bench.backends.abstract import AbstractBenchmarkBackend
from ledger_bench.config import BenchmarkConfig, Settings
from ledger_bench.domain.models import AccountRow
from ledger_bench.infrastructure.connections import get_immudb_client
from ledger_bench.utils.logging import get_logger

log = get_logger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER,
    user_data INTEGER,
    data_hora INTEGER,
    PRIMARY KEY id
);
"""
DELETE_ALL_SQL = "DELETE FROM accounts;"
INSERT_SQL = "INSERT INTO accounts (id, user_data, data_hora) VALUES (@id, @user_data, @data_hora);"
SELECT_SQL = "SELECT id, user_data FROM accounts WHERE id = @id;"


class ImmudbBackend(AbstractBenchmarkBackend):
    """
    Ledger benchmark against an immudb `accounts` table.
    """

    name: str = "immudb"
    description: str = "immudb-py sqlExec single-row INSERT + sqlQuery point SELECT."

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._clock = clock
        self._client: Optional[ImmudbClient] = None

    @property
    def client(self) -> ImmudbClient:
        if self._client is None:
            raise RuntimeError("ImmudbBackend.connect() has not been called")
        return self._client

    def connect(self) -> None:
        if self._client is None:
            self._client = get_immudb_client(self._settings)

    def prepare(self, config: BenchmarkConfig) -> None:
        self.client.sqlExec(CREATE_TABLE_SQL)
        self.client.sqlExec(DELETE_ALL_SQL)

    def insert_batch(self, offsets: Sequence[int]) -> None:
        for index in offsets:
            row = AccountRow.for_index(index, int(self._clock()))
            self.client.sqlExec(
                INSERT_SQL,
                {"id": row.id, "user_data": row.user_data, "data_hora": row.timestamp},
            )

    def lookup_batch(self, offsets: Sequence[int]) -> List[AccountRow]:
        found: List[AccountRow] = []
        for index in offsets:
            rows = self.client.sqlQuery(SELECT_SQL, {"id": index})
            for row in rows:
                found.append(AccountRow(id=row[0], user_data=row[1]))
        return found

    def teardown(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.logout()
            log.debug("[TEARDOWN] immudb session closed")


__all__ = ["ImmudbBackend"]
