"""
Pytest configuration for ledger-bench.

Provides fixtures for:
- Settings isolation (cache reset, env overrides)
- Live backend availability checks for integration tests
"""

from __future__ import annotations

import os
import socket
from typing import Generator

import psycopg
import pytest

from ledger_bench.config import Settings, get_settings
from ledger_bench.infrastructure.connections import build_pg_dsn


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """
    Drop the cached Settings before and after each test so env overrides apply.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        pg_host=os.getenv("PG_HOST", "localhost"),
        pg_port=int(os.getenv("PG_PORT", "5432")),
        pg_user=os.getenv("PG_USER", "test"),
        pg_password=os.getenv("PG_PASSWORD", "test"),
        pg_name=os.getenv("PG_NAME", "ledger"),
        immudb_host=os.getenv("IMMUDB_HOST", "127.0.0.1"),
        immudb_port=int(os.getenv("IMMUDB_PORT", "3322")),
        tb_binary=os.getenv("TB_BINARY", "./tigerbeetle"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    PostgreSQL connection string for tests.
    """
    return build_pg_dsn(test_settings)


@pytest.fixture(scope="session")
def postgres_available(test_dsn: str) -> bool:
    """
    Check if PostgreSQL is reachable.

    Used to conditionally skip integration tests when the database is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def immudb_available(test_settings: Settings) -> bool:
    """
    Check if the immudb gRPC port accepts connections.
    """
    try:
        with socket.create_connection(
            (test_settings.immudb_host, test_settings.immudb_port), timeout=5
        ):
            return True
    except OSError:
        return False


@pytest.fixture(scope="session")
def tigerbeetle_binary_available(test_settings: Settings) -> bool:
    """
    Check if the TigerBeetle binary the harness launches is present.
    """
    return os.path.isfile(test_settings.tb_binary) and os.access(test_settings.tb_binary, os.X_OK)
