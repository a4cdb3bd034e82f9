"""
TigerBeetle backend: batched account creation and batched lookup-by-id.

The engine is never cleared between runs, so each run draws a random id base
(`run_base`) and writes accounts `base + offset`. Accounts created here are
not cleaned up afterwards.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, List, Optional, Sequence

import tigerbeetle as tb

from ledger_bench.backends.abstract import AbstractBenchmarkBackend
from ledger_bench.config import BenchmarkConfig, Settings, get_settings
from ledger_bench.domain.identifiers import account_ids, category_code, run_base, to_uint128
from ledger_bench.domain.models import LEDGER_TAG, LedgerAccount
from ledger_bench.infrastructure.tigerbeetle_server import TigerBeetleServer
from ledger_bench.utils.logging import get_logger

log = get_logger(__name__)


def build_account(index: int) -> tb.Account:
    """Build the engine account for absolute position `index` (base + offset)."""
    return tb.Account(
        id=to_uint128(index),
        debits_pending=0,
        debits_posted=0,
        credits_pending=0,
        credits_posted=0,
        user_data_128=0,
        user_data_64=0,
        user_data_32=0,
        ledger=LEDGER_TAG,
        code=category_code(index),
        flags=0,
        timestamp=0,
    )


class TigerBeetleBackend(AbstractBenchmarkBackend):
    """
    Accounting benchmark: one `create_accounts` / `lookup_accounts` call per batch.

    Accounts the engine refuses (e.g. `CODE_MUST_NOT_BE_ZERO` when the id window
    crosses a multiple of 65535, or `EXISTS`) are logged and tallied by status
    name in `rejected`; the run carries on and the read phase simply finds
    fewer accounts.
    """

    name: str = "tigerbeetle"
    description: str = "tigerbeetle ClientSync batched create_accounts + lookup_accounts."

    def __init__(
        self,
        settings: Optional[Settings] = None,
        manage_server: Optional[bool] = None,
        base_override: Optional[int] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._manage_server = (
            self._settings.tb_manage_server if manage_server is None else manage_server
        )
        self._base_override = base_override
        self._base: Optional[int] = None
        self._lookup_ids: List[int] = []
        self.rejected: Counter[str] = Counter()
        self._client: Any = None
        self._server: Optional[TigerBeetleServer] = None

    @property
    def base(self) -> int:
        if self._base is None:
            raise RuntimeError("TigerBeetleBackend.prepare() has not been called")
        return self._base

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RuntimeError("TigerBeetleBackend.connect() has not been called")
        return self._client

    def connect(self) -> None:
        """Start the local server (when managed) and open a client to it."""
        if self._client is not None:
            return
        if self._manage_server:
            self._server = TigerBeetleServer.from_settings(self._settings)
            self._server.start()
        self._client = tb.ClientSync(
            cluster_id=self._settings.tb_cluster_id,
            replica_addresses=self._settings.tb_address,
        )

    def prepare(self, config: BenchmarkConfig) -> None:
        """Pick this run's id base and precompute the ids the read phase looks up."""
        self._base = run_base() if self._base_override is None else self._base_override
        self._lookup_ids = account_ids(self._base, config.count)
        self.rejected.clear()
        log.info("TigerBeetle id base selected", extra={"backend": self.name, "base": self._base})

    def insert_batch(self, offsets: Sequence[int]) -> None:
        if not offsets:
            return
        accounts = [build_account(self.base + offset) for offset in offsets]
        results = self.client.create_accounts(accounts)
        # One result per account; only the client call itself can fail the run.
        rejected = Counter(
            result.status.name
            for result in results
            if result.status != tb.CreateAccountStatus.CREATED
        )
        if rejected:
            self.rejected.update(rejected)
            log.warning(
                f"create_accounts did not create {sum(rejected.values())} of {len(accounts)} "
                f"account(s) in batch starting at offset {offsets[0]}: {dict(rejected)}",
                extra={"backend": self.name, "batch_start": offsets[0], "statuses": dict(rejected)},
            )

    def lookup_batch(self, offsets: Sequence[int]) -> List[LedgerAccount]:
        if not offsets:
            return []
        if max(offsets) < len(self._lookup_ids):
            ids = [self._lookup_ids[offset] for offset in offsets]
        else:
            ids = [to_uint128(self.base + offset) for offset in offsets]
        accounts = self.client.lookup_accounts(ids)
        return [
            LedgerAccount(id=account.id, ledger=account.ledger, code=account.code)
            for account in accounts
        ]

    def teardown(self) -> None:
        client, self._client = self._client, None
        server, self._server = self._server, None
        try:
            if client is not None:
                client.close()
                log.debug("[TEARDOWN] TigerBeetle client closed")
        finally:
            if server is not None:
                server.stop()


__all__ = ["TigerBeetleBackend", "build_account"]
