"""
Connection factory utilities for ledger-bench.

Centralizes how the harness opens its PostgreSQL and immudb handles. Connects
are retried with tenacity for transient failures during bootstrap only;
benchmark requests themselves are never retried.
"""

from __future__ import annotations

from typing import Optional

import grpc
import psycopg
from immudb import ImmudbClient
from psycopg import Connection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ledger_bench.config import Settings, get_settings


def build_pg_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.pg_user}:{settings.pg_password}"
        f"@{settings.pg_host}:{settings.pg_port}/{settings.pg_name}"
    )


def build_immudb_url(settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return f"{settings.immudb_host}:{settings.immudb_port}"


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_pg_connection(dsn: Optional[str] = None) -> Connection:
    """
    Open a dedicated autocommit PostgreSQL connection with automatic retry.

    Autocommit keeps every statement its own round trip with no surrounding
    transaction.

    Parameters
    ----------
    dsn : str | None
        Explicit DSN; defaults to the one built from settings.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_pg_dsn(), autocommit=True)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(grpc.RpcError),
    reraise=True,
)
def get_immudb_client(settings: Optional[Settings] = None) -> ImmudbClient:
    """
    Open an immudb client and log into the configured database.

    Raises
    ------
    grpc.RpcError
        If login fails after all retry attempts.
    """
    settings = settings or get_settings()
    client = ImmudbClient(build_immudb_url(settings))
    client.login(
        settings.immudb_user,
        settings.immudb_password,
        database=settings.immudb_database.encode("utf-8"),
    )
    return client


__all__ = [
    "build_immudb_url",
    "build_pg_dsn",
    "get_immudb_client",
    "get_pg_connection",
]
