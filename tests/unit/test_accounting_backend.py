from __future__ import annotations

from typing import Any

import pytest
import tigerbeetle as tb

from ledger_bench.backends import accounting as accounting_module
from ledger_bench.backends.accounting import TigerBeetleBackend, build_account
from ledger_bench.config import BenchmarkConfig, Settings
from ledger_bench.domain.identifiers import to_uint128
from ledger_bench.domain.models import LedgerAccount
from ledger_bench.orchestrator import run_backend

BASE = 123_456_789
# 65535 sits at offset 10, so that account gets code 0.
WRAPPING_BASE = 65_525


class _FakeClientSync:
    """In-memory stand-in returning one CreateAccountResult per account, like the real client."""

    instances: list[_FakeClientSync] = []

    def __init__(self, cluster_id: int, replica_addresses: str) -> None:
        self.cluster_id = cluster_id
        self.replica_addresses = replica_addresses
        self.accounts: dict[int, Any] = {}
        self.create_batches: list[int] = []
        self.lookup_batches: list[list[int]] = []
        self.results: list[tb.CreateAccountResult] = []
        self.closed = False
        self._clock = 0
        _FakeClientSync.instances.append(self)

    def _status(self, account: tb.Account) -> tb.CreateAccountStatus:
        if account.code == 0:
            return tb.CreateAccountStatus.CODE_MUST_NOT_BE_ZERO
        if account.id in self.accounts:
            return tb.CreateAccountStatus.EXISTS
        self.accounts[account.id] = account
        return tb.CreateAccountStatus.CREATED

    def create_accounts(self, accounts: list[tb.Account]) -> list[tb.CreateAccountResult]:
        self.create_batches.append(len(accounts))
        results = []
        for account in accounts:
            self._clock += 1
            results.append(tb.CreateAccountResult(timestamp=self._clock, status=self._status(account)))
        self.results.extend(results)
        return results

    def lookup_accounts(self, ids: list[int]) -> list[Any]:
        self.lookup_batches.append(list(ids))
        return [self.accounts[i] for i in ids if i in self.accounts]

    def close(self) -> None:
        self.closed = True


class _FakeServer:
    def __init__(self) -> None:
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, tb_cluster_id=0, tb_address="3000")


@pytest.fixture(autouse=True)
def fake_client_class(monkeypatch):
    _FakeClientSync.instances.clear()
    monkeypatch.setattr(accounting_module.tb, "ClientSync", _FakeClientSync)
    return _FakeClientSync


@pytest.fixture
def backend(settings: Settings) -> TigerBeetleBackend:
    backend = TigerBeetleBackend(settings=settings, manage_server=False, base_override=BASE)
    backend.connect()
    yield backend
    backend.teardown()


def _client() -> _FakeClientSync:
    return _FakeClientSync.instances[-1]


def test_build_account_fields() -> None:
    account = build_account(65536)

    assert account.id == 65536
    assert account.ledger == 1
    assert account.code == 1
    assert account.debits_posted == 0
    assert account.credits_posted == 0


@pytest.mark.parametrize("count", [0, 1, 60, 61, 1000])
def test_insert_then_read_recovers_every_account(backend: TigerBeetleBackend, count: int) -> None:
    result = run_backend(backend, BenchmarkConfig(count=count, batch_size=60))

    assert result["read"]["records_found"] == count
    found = backend.lookup_batch(range(count))
    assert [account.id for account in found] == [to_uint128(BASE + i) for i in range(count)]


def test_default_workload_uses_seventeen_batches(backend: TigerBeetleBackend) -> None:
    run_backend(backend, BenchmarkConfig(count=1000, batch_size=60))

    client = _client()
    assert client.create_batches == [60] * 16 + [40]
    assert [len(batch) for batch in client.lookup_batches] == [60] * 16 + [40]
    assert max(client.create_batches) <= 60


def test_codes_wrap_at_16_bits(settings: Settings) -> None:
    backend = TigerBeetleBackend(settings=settings, manage_server=False, base_override=65534)
    backend.connect()
    backend.prepare(BenchmarkConfig(count=3))
    backend.insert_batch([0, 1, 2])

    found = backend.lookup_batch([0, 1, 2])

    # 65535 wraps to code 0, which the engine refuses to create.
    assert found == [
        LedgerAccount(id=65534, ledger=1, code=65534),
        LedgerAccount(id=65536, ledger=1, code=1),
    ]
    assert backend.rejected == {"CODE_MUST_NOT_BE_ZERO": 1}
    backend.teardown()


def test_prepare_draws_random_base_when_not_overridden(settings: Settings, monkeypatch) -> None:
    monkeypatch.setattr(accounting_module, "run_base", lambda: 42)
    backend = TigerBeetleBackend(settings=settings, manage_server=False)

    backend.prepare(BenchmarkConfig(count=2))

    assert backend.base == 42


def test_all_created_batch_is_accepted(backend: TigerBeetleBackend) -> None:
    result = run_backend(backend, BenchmarkConfig(count=60, batch_size=60))

    client = _client()
    assert len(client.results) == 60
    assert {r.status for r in client.results} == {tb.CreateAccountStatus.CREATED}
    assert backend.rejected == {}
    assert result["read"]["records_found"] == 60


def test_zero_code_in_window_does_not_abort_run(settings: Settings, monkeypatch) -> None:
    warnings: list[str] = []
    monkeypatch.setattr(
        accounting_module.log, "warning", lambda msg, *args, **kwargs: warnings.append(msg)
    )
    backend = TigerBeetleBackend(
        settings=settings, manage_server=False, base_override=WRAPPING_BASE
    )
    backend.connect()

    result = run_backend(backend, BenchmarkConfig(count=120, batch_size=60))

    client = _client()
    assert client.create_batches == [60, 60]
    assert len(client.lookup_batches) == 2
    assert result["read"]["records_found"] == 119
    assert backend.rejected == {"CODE_MUST_NOT_BE_ZERO": 1}
    assert len(warnings) == 1
    assert "1 of 60" in warnings[0]
    assert "CODE_MUST_NOT_BE_ZERO" in warnings[0]
    backend.teardown()


def test_existing_accounts_are_tallied_and_remaining_batches_still_run(
    backend: TigerBeetleBackend,
) -> None:
    client = _client()
    # Collide with the second batch.
    client.accounts[to_uint128(BASE + 70)] = build_account(BASE + 70)

    result = run_backend(backend, BenchmarkConfig(count=300, batch_size=60))

    assert client.create_batches == [60] * 5
    assert backend.rejected == {"EXISTS": 1}
    assert result["read"]["records_found"] == 300


def test_client_error_is_fatal_and_stops_remaining_batches(backend: TigerBeetleBackend) -> None:
    client = _client()
    calls: list[int] = []

    def failing_create(accounts: list[tb.Account]) -> list[tb.CreateAccountResult]:
        calls.append(len(accounts))
        if len(calls) == 2:
            raise ConnectionError("cluster unreachable")
        return [
            tb.CreateAccountResult(timestamp=1, status=tb.CreateAccountStatus.CREATED)
            for _ in accounts
        ]

    client.create_accounts = failing_create

    with pytest.raises(ConnectionError, match="cluster unreachable"):
        run_backend(backend, BenchmarkConfig(count=300, batch_size=60))

    assert calls == [60, 60]
    assert client.lookup_batches == []


def test_prepare_resets_rejected_tally(backend: TigerBeetleBackend) -> None:
    backend.rejected["EXISTS"] = 3

    backend.prepare(BenchmarkConfig(count=1))

    assert backend.rejected == {}


def test_lookup_without_prepare_requires_base(settings: Settings) -> None:
    backend = TigerBeetleBackend(settings=settings, manage_server=False)
    backend.connect()

    with pytest.raises(RuntimeError, match="prepare"):
        backend.lookup_batch([0])
    backend.teardown()


def test_connect_starts_managed_server_and_teardown_stops_it(settings: Settings, monkeypatch) -> None:
    server = _FakeServer()
    monkeypatch.setattr(
        accounting_module.TigerBeetleServer, "from_settings", classmethod(lambda cls, s: server)
    )
    backend = TigerBeetleBackend(settings=settings, manage_server=True)

    backend.connect()
    assert server.started is True
    assert _client().replica_addresses == "3000"

    backend.teardown()
    assert server.stopped is True
    assert _client().closed is True


def test_teardown_stops_server_even_if_client_close_fails(settings: Settings, monkeypatch) -> None:
    server = _FakeServer()
    monkeypatch.setattr(
        accounting_module.TigerBeetleServer, "from_settings", classmethod(lambda cls, s: server)
    )
    backend = TigerBeetleBackend(settings=settings, manage_server=True)
    backend.connect()

    def broken_close() -> None:
        raise RuntimeError("close failed")

    _client().close = broken_close

    with pytest.raises(RuntimeError, match="close failed"):
        backend.teardown()
    assert server.stopped is True
