"""
PostgreSQL persistence for data counts snapshots.

One row per job holding the latest snapshot as JSONB in its wire format.
"""

import json

import structlog

from src.core.database import PostgresConnection

from .data_counts import DataCounts
from .models import CountsStoreConfig

logger = structlog.get_logger(__name__)


class DataCountsStore(PostgresConnection):
    """Saves and restores the data counts of each job"""

    def __init__(self, config: CountsStoreConfig):
        super().__init__(
            host=config.postgres_host,
            port=config.postgres_port,
            database=config.postgres_database,
            user=config.postgres_user,
            password=config.postgres_password,
        )
        self.config = config
        self._saved: dict[str, DataCounts] = {}

    def ensure_table_exists(self) -> bool:
        """Create the job_data_counts table if it doesn't exist"""
        query = """
            CREATE TABLE IF NOT EXISTS job_data_counts (
                job_id VARCHAR(100) PRIMARY KEY,
                counts JSONB NOT NULL,
                updated_at TIMESTAMPTZ DEFAULT NOW()
            );
        """
        created = self.execute_query(query)
        if created:
            logger.info("Ensured job_data_counts table exists")
        return created

    def save_counts(self, job_id: str, counts: DataCounts) -> bool:
        """Upsert the snapshot for a job, skipping it if nothing changed

        Returns:
            True if the snapshot is stored (or already was)
        """
        if self._saved.get(job_id) == counts:
            logger.debug("Data counts unchanged, skipping save", job_id=job_id)
            return True

        query = """
            INSERT INTO job_data_counts (job_id, counts, updated_at)
            VALUES (%(job_id)s, %(counts)s, NOW())
            ON CONFLICT (job_id)
            DO UPDATE SET
                counts = EXCLUDED.counts,
                updated_at = EXCLUDED.updated_at
        """
        saved = self.execute_query(query, {"job_id": job_id, "counts": counts.to_json()})
        if saved:
            self._saved[job_id] = counts.copy()
            logger.debug(
                "Data counts saved",
                job_id=job_id,
                input_records=counts.input_record_count,
                processed_records=counts.processed_record_count,
            )
        return saved

    def load_counts(self, job_id: str) -> DataCounts | None:
        """Load the latest snapshot for a job, or None if there is none"""
        query = "SELECT counts FROM job_data_counts WHERE job_id = %s"
        try:
            row = self.fetch_one(query, (job_id,))
        except Exception as e:
            logger.error("Failed to load data counts", job_id=job_id, error=str(e))
            return None

        if row is None:
            return None

        # psycopg2 decodes JSONB to a dict already
        data = row[0] if isinstance(row[0], dict) else json.loads(row[0])
        counts = DataCounts.from_dict(data)
        self._saved[job_id] = counts.copy()
        return counts

    def delete_counts(self, job_id: str) -> bool:
        """Remove the stored snapshot when a job is deleted or reset"""
        self._saved.pop(job_id, None)
        return self.execute_query(
            "DELETE FROM job_data_counts WHERE job_id = %(job_id)s", {"job_id": job_id}
        )
