"""
Job processed record counts.

The ``input_*`` counts are everything sent to the job, including records that
were rejected. The ``processed_*`` counts are only what was passed on to the
analysis engine.

``input_record_count`` is calculated from the other counters, so it is written
when serialising but never read back when deserialising.
"""

import json
from dataclasses import dataclass, fields, replace
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

BUCKET_COUNT = "bucketCount"
PROCESSED_RECORD_COUNT = "processedRecordCount"
PROCESSED_FIELD_COUNT = "processedFieldCount"
INPUT_BYTES = "inputBytes"
INPUT_RECORD_COUNT = "inputRecordCount"
INPUT_FIELD_COUNT = "inputFieldCount"
INVALID_DATE_COUNT = "invalidDateCount"
MISSING_FIELD_COUNT = "missingFieldCount"
OUT_OF_ORDER_TIME_COUNT = "outOfOrderTimeStampCount"
FAILED_TRANSFORM_COUNT = "failedTransformCount"
LATEST_RECORD_TIME = "latestRecordTimeStamp"

# Wire key -> attribute name, in wire order (inputRecordCount is emitted separately)
_WIRE_FIELDS = {
    BUCKET_COUNT: "bucket_count",
    PROCESSED_RECORD_COUNT: "processed_record_count",
    PROCESSED_FIELD_COUNT: "processed_field_count",
    INPUT_BYTES: "input_bytes",
    INPUT_FIELD_COUNT: "input_field_count",
    INVALID_DATE_COUNT: "invalid_date_count",
    MISSING_FIELD_COUNT: "missing_field_count",
    OUT_OF_ORDER_TIME_COUNT: "out_of_order_timestamp_count",
    FAILED_TRANSFORM_COUNT: "failed_transform_count",
    LATEST_RECORD_TIME: "latest_record_timestamp",
}

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class IllegalStateError(RuntimeError):
    """Raised when a caller writes to a value that is only ever derived"""


def normalize_timestamp(value: datetime | None) -> datetime | None:
    """UTC-aware and truncated to whole milliseconds, the wire precision.

    Naive values are taken as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    else:
        value = value.astimezone(UTC)
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def timestamp_to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are taken as UTC)"""
    return (normalize_timestamp(value) - _EPOCH) // timedelta(milliseconds=1)


def parse_timestamp(value: Any) -> datetime | None:
    """Read a wire timestamp: epoch milliseconds, ISO-8601 text or a datetime"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return normalize_timestamp(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return normalize_timestamp(_EPOCH + timedelta(milliseconds=value))
    if isinstance(value, str):
        return normalize_timestamp(datetime.fromisoformat(value.replace("Z", "+00:00")))
    raise TypeError(f"Unsupported timestamp value: {value!r}")


@dataclass
class DataCounts:
    """Ingestion statistics for one job.

    A fresh instance is all zeros with ``bucket_count`` 0. Counters are only
    ever added to by the ``increment_*`` methods; plain attribute assignment
    overwrites them, which is how a stored snapshot is restored.
    """

    bucket_count: int | None = 0
    processed_record_count: int = 0
    processed_field_count: int = 0
    input_bytes: int = 0
    input_field_count: int = 0
    invalid_date_count: int = 0
    missing_field_count: int = 0
    out_of_order_timestamp_count: int = 0
    failed_transform_count: int = 0
    latest_record_timestamp: datetime | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        # stored at wire precision so snapshots survive serialisation unchanged
        if name == "latest_record_timestamp":
            value = normalize_timestamp(value)
        super().__setattr__(name, value)

    @property
    def input_record_count(self) -> int:
        """Total number of input records read.

        Processed records plus records with an unparsable date plus records
        that were out of order. Records with missing fields are still written
        to the engine so they are part of the processed count.
        """
        return (
            self.processed_record_count
            + self.out_of_order_timestamp_count
            + self.invalid_date_count
        )

    @input_record_count.setter
    def input_record_count(self, value: int) -> None:
        raise IllegalStateError("inputRecordCount is derived and cannot be set")

    def increment_processed_record_count(self, additional: int) -> None:
        self.processed_record_count += additional

    def increment_input_bytes(self, additional: int) -> None:
        self.input_bytes += additional

    def increment_input_field_count(self, additional: int) -> None:
        self.input_field_count += additional

    def increment_invalid_date_count(self, additional: int) -> None:
        self.invalid_date_count += additional

    def increment_missing_field_count(self, additional: int) -> None:
        self.missing_field_count += additional

    def increment_out_of_order_timestamp_count(self, additional: int) -> None:
        self.out_of_order_timestamp_count += additional

    def increment_failed_transform_count(self, additional: int) -> None:
        self.failed_transform_count += additional

    def calc_processed_field_count(self, analysis_fields_per_record: int) -> None:
        """Recalculate the number of analysed data points.

        Must be called after the record and missing field counts change. The
        time field is not counted.
        """
        count = self.processed_record_count * analysis_fields_per_record - self.missing_field_count
        # negative when no records have been written yet
        self.processed_field_count = max(count, 0)

    def copy(self) -> "DataCounts":
        """Independent snapshot of the current counts"""
        return replace(self)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, f.name) for f in fields(self)))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation, omitting unset optional fields"""
        data: dict[str, Any] = {}
        for key, attr in _WIRE_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if key == LATEST_RECORD_TIME:
                value = timestamp_to_epoch_ms(value)
            data[key] = value
            if key == INPUT_BYTES:
                data[INPUT_RECORD_COUNT] = self.input_record_count
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DataCounts":
        """Create from the wire representation.

        ``inputRecordCount`` is ignored if present; it is always recomputed.
        """
        counts = cls()
        for key, value in data.items():
            if key == INPUT_RECORD_COUNT:
                logger.debug("Ignoring derived field on input", field=key, value=value)
                continue
            attr = _WIRE_FIELDS.get(key)
            if attr is None:
                logger.warning("Ignoring unknown data counts field", field=key)
                continue
            if key == LATEST_RECORD_TIME:
                value = parse_timestamp(value)
            setattr(counts, attr, value)
        return counts

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str | bytes) -> "DataCounts":
        return cls.from_dict(json.loads(text))
