"""
Redis cache for the latest data counts of each job.
"""

from typing import Optional

import redis
import structlog

from .data_counts import DataCounts
from .models import CountsStoreConfig

logger = structlog.get_logger(__name__)


class DataCountsCache:
    """Redis cache backend for data counts snapshots"""

    def __init__(self, config: CountsStoreConfig):
        try:
            self.redis = redis.Redis(
                host=config.redis_host,
                port=config.redis_port,
                db=config.redis_db,
                password=config.redis_password,
                decode_responses=True,
            )
            self.ttl = config.cache_ttl_seconds
            self.redis.ping()
            logger.info("Redis cache initialized", host=config.redis_host, port=config.redis_port)
        except Exception as e:
            logger.error("Failed to initialize Redis", error=str(e))
            raise

    def save_counts(self, job_id: str, counts: DataCounts) -> bool:
        """Save a snapshot to Redis"""
        key = self._make_key(job_id)
        try:
            self.redis.setex(key, self.ttl, counts.to_json())
            logger.debug("Data counts cached", key=key)
            return True
        except Exception as e:
            logger.error("Failed to cache data counts", key=key, error=str(e))
            return False

    def load_counts(self, job_id: str) -> Optional[DataCounts]:
        """Load a snapshot from Redis"""
        key = self._make_key(job_id)
        try:
            data = self.redis.get(key)
            if data is None:
                return None
            return DataCounts.from_json(data)
        except Exception as e:
            logger.error("Failed to load cached data counts", key=key, error=str(e))
            return None

    def delete_counts(self, job_id: str) -> bool:
        key = self._make_key(job_id)
        try:
            self.redis.delete(key)
            return True
        except Exception as e:
            logger.error("Failed to delete cached data counts", key=key, error=str(e))
            return False

    def _make_key(self, job_id: str) -> str:
        return f"datacounts:{job_id}"
