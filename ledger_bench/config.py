"""
Configuration settings for ledger-bench.

Uses Pydantic Settings to load environment variables for the three backend
connections (PostgreSQL, immudb, TigerBeetle), logging, and workload defaults.
The workload itself is carried around as an explicit `BenchmarkConfig` so
benchmark runs never read global state.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    pg_host: str = Field("localhost", alias="PG_HOST")
    pg_port: int = Field(5432, alias="PG_PORT")
    pg_user: str = Field("test", alias="PG_USER")
    pg_password: str = Field("test", alias="PG_PASSWORD")
    pg_name: str = Field("ledger", alias="PG_NAME")

    # immudb
    immudb_host: str = Field("127.0.0.1", alias="IMMUDB_HOST")
    immudb_port: int = Field(3322, alias="IMMUDB_PORT")
    immudb_user: str = Field("immudb", alias="IMMUDB_USER")
    immudb_password: str = Field("immudb", alias="IMMUDB_PASSWORD")
    immudb_database: str = Field("defaultdb", alias="IMMUDB_DATABASE")

    # TigerBeetle
    tb_binary: str = Field("./tigerbeetle", alias="TB_BINARY")
    tb_cluster_id: int = Field(0, alias="TB_CLUSTER_ID")
    tb_replica: int = Field(0, alias="TB_REPLICA")
    tb_replica_count: int = Field(1, alias="TB_REPLICA_COUNT")
    tb_address: str = Field("3000", alias="TB_ADDRESS")
    tb_data_file: str = Field("0_0.tigerbeetle", alias="TB_DATA_FILE")
    tb_manage_server: bool = Field(True, alias="TB_MANAGE_SERVER")
    tb_clean_data_file: bool = Field(True, alias="TB_CLEAN_DATA_FILE")
    tb_ready_timeout_seconds: float = Field(10.0, alias="TB_READY_TIMEOUT_SECONDS")
    tb_settle_seconds: float = Field(0.0, alias="TB_SETTLE_SECONDS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Workload defaults
    benchmark_count: int = Field(1000, alias="BENCHMARK_COUNT")
    benchmark_batch_size: int = Field(60, alias="BENCHMARK_BATCH_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@dataclass(frozen=True)
class BenchmarkConfig:
    """
    Workload shape shared by every backend run.

    Attributes
    ----------
    count : int
        Number of records inserted and then looked up.
    batch_size : int
        Maximum number of records handed to a backend per batch call.
    """

    count: int = 1000
    batch_size: int = 60

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"count must be >= 0, got {self.count}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        count: int | None = None,
        batch_size: int | None = None,
    ) -> "BenchmarkConfig":
        """Fill whichever of `count` and `batch_size` is None from settings."""
        return cls(
            count=settings.benchmark_count if count is None else count,
            batch_size=settings.benchmark_batch_size if batch_size is None else batch_size,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["BenchmarkConfig", "Settings", "get_settings"]
