"""
Configuration for the job data ingestion consumer.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.job.models import CountsStoreConfig


@dataclass
class IngestConfig:
    """Configuration for ingesting one job's data stream"""

    job_id: str = "default-job"

    # Record layout
    time_field: str = "timestamp"
    time_format: str = "epoch"  # 'epoch', 'epoch_ms', 'iso8601' or a strptime pattern
    analysis_fields: list[str] = field(default_factory=list)
    latency_seconds: float = 0.0  # tolerated lateness before a record is out of order

    # Kafka settings
    kafka_bootstrap_servers: str = "localhost:9092"
    kafka_topic: str = "job-data"
    kafka_group_id: str = "job-ingest-consumer-group"
    kafka_auto_offset_reset: str = "earliest"

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

    # Consumer behavior
    snapshot_interval_seconds: float = 30.0
    max_poll_records: int = 500
    enable_auto_commit: bool = False

    def store_config(self) -> CountsStoreConfig:
        """Persistence settings for the data counts snapshots"""
        return CountsStoreConfig(
            postgres_host=self.postgres_host,
            postgres_port=self.postgres_port,
            postgres_database=self.postgres_database,
            postgres_user=self.postgres_user,
            postgres_password=self.postgres_password,
            redis_host=self.redis_host,
            redis_port=self.redis_port,
            redis_db=self.redis_db,
            redis_password=self.redis_password,
            cache_ttl_seconds=self.cache_ttl_seconds,
        )
