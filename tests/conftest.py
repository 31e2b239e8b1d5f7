"""
Pytest configuration and shared fixtures.
"""

from datetime import UTC, datetime

import pytest

from src.ingest.models import IngestConfig
from src.job.data_counts import DataCounts
from src.job.models import CountsStoreConfig


# Data counts fixtures
@pytest.fixture
def full_counts():
    """DataCounts with every field set to a distinct value."""
    return DataCounts(
        bucket_count=12,
        processed_record_count=100,
        processed_field_count=290,
        input_bytes=4096,
        input_field_count=420,
        invalid_date_count=3,
        missing_field_count=10,
        out_of_order_timestamp_count=2,
        failed_transform_count=5,
        latest_record_timestamp=datetime(2026, 3, 1, 12, 30, 15, 250000, tzinfo=UTC),
    )


# Persistence fixtures
@pytest.fixture
def store_config():
    """Store configuration for testing."""
    return CountsStoreConfig(
        postgres_host="localhost",
        postgres_port=5432,
        postgres_database="test_db",
        postgres_user="test_user",
        postgres_password="test_password",
        redis_host="localhost",
        redis_port=6379,
        cache_ttl_seconds=60,
    )


# Ingest fixtures
@pytest.fixture
def ingest_config():
    """Ingest configuration with two analysis fields."""
    return IngestConfig(
        job_id="test-job",
        time_field="time",
        time_format="epoch",
        analysis_fields=["responsetime", "airline"],
        kafka_bootstrap_servers="localhost:9092",
        kafka_topic="test-topic",
        kafka_group_id="test-group",
        postgres_database="test_db",
        postgres_user="test_user",
        postgres_password="test_password",
        snapshot_interval_seconds=1.0,
    )
