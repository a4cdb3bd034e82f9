"""
Infrastructure package for ledger-bench.

Centralizes backend connectivity concerns (connection factories, the
TigerBeetle server process). Keep this layer focused on I/O and resource
management, decoupled from benchmark/orchestrator logic.
"""

from ledger_bench.infrastructure.connections import (
    build_immudb_url,
    build_pg_dsn,
    get_immudb_client,
    get_pg_connection,
)
from ledger_bench.infrastructure.tigerbeetle_server import TigerBeetleServer, parse_address

__all__ = [
    "TigerBeetleServer",
    "build_immudb_url",
    "build_pg_dsn",
    "get_immudb_client",
    "get_pg_connection",
    "parse_address",
]
