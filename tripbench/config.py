"""
Configuration settings for the order aggregate benchmark.

Uses Pydantic Settings to load environment variables for the database
connection, logging, and bench driver defaults.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("order_tripbench", alias="DB_NAME")
    db_connect_timeout: int = Field(5, alias="DB_CONNECT_TIMEOUT")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Bench driver defaults
    bench_order_id: int = Field(1, alias="BENCH_ORDER_ID")
    bench_runs: int = Field(20, alias="BENCH_RUNS")
    bench_warmup_runs: int = Field(3, alias="BENCH_WARMUP_RUNS")
    bench_track_allocations: bool = Field(True, alias="BENCH_TRACK_ALLOCATIONS")
    bench_results_dir: str = Field("results", alias="BENCH_RESULTS_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
