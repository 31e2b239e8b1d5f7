"""
Configuration for the job statistics persistence layers.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CountsStoreConfig:
    """Connection settings for persisting data counts snapshots"""

    # PostgreSQL settings
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_database: str = "jobstats_db"
    postgres_user: str = "jobstats"
    postgres_password: str = "jobstats_password"

    # Redis settings
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    cache_ttl_seconds: int = 3600
