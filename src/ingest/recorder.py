"""
Drives a job's DataCounts from the records it receives.

Each record is classified as it arrives:
- bad or missing time field -> invalid date, dropped
- earlier than the latest record (less the allowed latency) -> out of order, dropped
- otherwise processed, counting any analysis fields it lacks and any
  field transforms that fail
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from src.job.data_counts import DataCounts, normalize_timestamp

from .models import IngestConfig

logger = structlog.get_logger(__name__)

Transform = Callable[[Any], Any]


class DataCountsRecorder:
    """Classifies incoming records and keeps the job's counts up to date

    Not thread safe: one recorder per ingestion worker.
    """

    def __init__(
        self,
        config: IngestConfig,
        counts: DataCounts | None = None,
        transforms: dict[str, Transform] | None = None,
    ):
        self.config = config
        self.counts = counts if counts is not None else DataCounts()
        self.transforms = transforms or {}
        self.latency = timedelta(seconds=config.latency_seconds)

    def record(self, record: dict[str, Any], num_bytes: int) -> dict[str, Any] | None:
        """Account for one input record

        Args:
            record: Decoded record
            num_bytes: Size of the raw record as received

        Returns:
            The (transformed) record if it is passed on for analysis, else None
        """
        self.counts.increment_input_bytes(num_bytes)
        self.counts.increment_input_field_count(len(record))

        timestamp = self._parse_time(record.get(self.config.time_field))
        if timestamp is None:
            self.counts.increment_invalid_date_count(1)
            logger.debug(
                "Record has an invalid date",
                job_id=self.config.job_id,
                value=record.get(self.config.time_field),
            )
            return None

        latest = self.counts.latest_record_timestamp
        if latest is not None and timestamp < latest - self.latency:
            self.counts.increment_out_of_order_timestamp_count(1)
            logger.debug(
                "Record is out of order",
                job_id=self.config.job_id,
                timestamp=timestamp.isoformat(),
                latest=latest.isoformat(),
            )
            return None

        accepted = self._apply_transforms(record)

        missing = sum(1 for name in self.config.analysis_fields if accepted.get(name) is None)
        self.counts.increment_missing_field_count(missing)
        self.counts.increment_processed_record_count(1)

        if latest is None or timestamp > latest:
            self.counts.latest_record_timestamp = timestamp

        return accepted

    def finish_batch(self) -> DataCounts:
        """Bring the derived field count up to date and return a snapshot"""
        self.counts.calc_processed_field_count(len(self.config.analysis_fields))
        return self.counts.copy()

    def reset(self) -> None:
        self.counts = DataCounts()

    def _apply_transforms(self, record: dict[str, Any]) -> dict[str, Any]:
        if not self.transforms:
            return record

        transformed = dict(record)
        for field_name, transform in self.transforms.items():
            if field_name not in transformed:
                continue
            try:
                transformed[field_name] = transform(transformed[field_name])
            except Exception as e:
                self.counts.increment_failed_transform_count(1)
                logger.debug("Transform failed", field=field_name, error=str(e))
        return transformed

    def _parse_time(self, value: Any) -> datetime | None:
        if value is None:
            return None

        time_format = self.config.time_format
        try:
            if time_format == "epoch":
                parsed = datetime.fromtimestamp(float(value), tz=UTC)
            elif time_format == "epoch_ms":
                parsed = datetime.fromtimestamp(float(value) / 1000, tz=UTC)
            elif time_format == "iso8601":
                parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
            else:
                parsed = datetime.strptime(str(value), time_format)
        except (ValueError, TypeError, OverflowError, OSError):
            return None

        # same precision as the stored latest time, so comparisons line up
        return normalize_timestamp(parsed)
