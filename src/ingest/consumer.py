"""
Ingest consumer that keeps a job's data counts from a Kafka stream.
"""

import json
import time

import structlog
from kafka import KafkaConsumer

from src.job.cache import DataCountsCache
from src.job.store import DataCountsStore

from .models import IngestConfig
from .recorder import DataCountsRecorder

logger = structlog.get_logger(__name__)


class IngestConsumer:
    """Consumes a job's input records from Kafka and tracks its data counts"""

    def __init__(self, config: IngestConfig):
        self.config = config
        logger.info("Initializing ingest consumer", job_id=config.job_id)

        store_config = config.store_config()
        self.store = DataCountsStore(store_config)
        if not self.store.check_health():
            raise RuntimeError("Database health check failed")
        self.store.ensure_table_exists()

        self.cache = DataCountsCache(store_config)

        # Resume from the last snapshot so counts keep growing across restarts
        counts = self.cache.load_counts(config.job_id) or self.store.load_counts(config.job_id)
        if counts is not None:
            logger.info(
                "Restored data counts",
                job_id=config.job_id,
                input_records=counts.input_record_count,
            )
        self.recorder = DataCountsRecorder(config, counts=counts)

        try:
            # Raw bytes: input bytes are counted before decoding
            self.consumer = KafkaConsumer(
                config.kafka_topic,
                bootstrap_servers=config.kafka_bootstrap_servers,
                group_id=config.kafka_group_id,
                auto_offset_reset=config.kafka_auto_offset_reset,
                enable_auto_commit=config.enable_auto_commit,
                max_poll_records=config.max_poll_records,
            )
            logger.info(
                "Kafka consumer initialized",
                bootstrap_servers=config.kafka_bootstrap_servers,
                topic=config.kafka_topic,
                group_id=config.kafka_group_id,
            )
        except Exception as e:
            logger.error("Failed to initialize Kafka consumer", error=str(e))
            raise

        self.last_snapshot_time = time.time()

        self.stats = {
            "total_consumed": 0,
            "accepted": 0,
            "rejected": 0,
            "parse_errors": 0,
            "snapshots_saved": 0,
            "snapshot_errors": 0,
        }

    def _process_message(self, raw: bytes | None) -> bool:
        """Decode one message and pass it to the recorder"""
        if raw is None:
            # tombstone: nothing received
            self.stats["parse_errors"] += 1
            logger.warning("Received message with no value", job_id=self.config.job_id)
            return False

        try:
            record = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            # still received, so the bytes count
            self.recorder.counts.increment_input_bytes(len(raw))
            self.stats["parse_errors"] += 1
            logger.warning("Failed to decode message", error=str(e), size=len(raw))
            return False

        if not isinstance(record, dict):
            self.recorder.counts.increment_input_bytes(len(raw))
            self.stats["parse_errors"] += 1
            logger.warning("Message is not a JSON object", type=type(record).__name__)
            return False

        if self.recorder.record(record, len(raw)) is None:
            self.stats["rejected"] += 1
            return False

        self.stats["accepted"] += 1
        return True

    def _should_snapshot(self) -> bool:
        return time.time() - self.last_snapshot_time >= self.config.snapshot_interval_seconds

    def _save_snapshot(self) -> bool:
        """Finish the current batch and persist the resulting snapshot"""
        snapshot = self.recorder.finish_batch()

        saved = self.store.save_counts(self.config.job_id, snapshot)
        self.cache.save_counts(self.config.job_id, snapshot)

        if saved:
            self.stats["snapshots_saved"] += 1
        else:
            self.stats["snapshot_errors"] += 1

        self.last_snapshot_time = time.time()
        return saved

    def run(self, duration_seconds: int = None):
        """Run the consumer continuously or for a specified duration

        Args:
            duration_seconds: Optional duration in seconds. If None, runs indefinitely.
        """
        logger.info(
            "Starting ingest consumer",
            job_id=self.config.job_id,
            topic=self.config.kafka_topic,
            duration=duration_seconds if duration_seconds else "indefinite",
        )

        start_time = time.time()
        last_log_time = start_time

        try:
            for message in self.consumer:
                self.stats["total_consumed"] += 1

                self._process_message(message.value)

                if self._should_snapshot():
                    if self._save_snapshot() and not self.config.enable_auto_commit:
                        self.consumer.commit()

                elapsed = time.time() - start_time
                if time.time() - last_log_time >= 10:
                    counts = self.recorder.counts
                    logger.info(
                        "Ingest stats",
                        job_id=self.config.job_id,
                        input_records=counts.input_record_count,
                        processed_records=counts.processed_record_count,
                        invalid_dates=counts.invalid_date_count,
                        out_of_order=counts.out_of_order_timestamp_count,
                        missing_fields=counts.missing_field_count,
                        parse_errors=self.stats["parse_errors"],
                        elapsed_sec=round(elapsed, 1),
                    )
                    last_log_time = time.time()

                if duration_seconds and elapsed >= duration_seconds:
                    logger.info("Duration limit reached", duration_seconds=duration_seconds)
                    break

        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping consumer")

        except Exception as e:
            logger.error("Consumer error", error=str(e), exc_info=True)
            raise

        finally:
            logger.info("Saving final data counts snapshot")
            if self._save_snapshot() and not self.config.enable_auto_commit:
                self.consumer.commit()

            self.consumer.close()
            self.store.close()

            elapsed = time.time() - start_time
            counts = self.recorder.counts
            logger.info(
                "Consumer stopped",
                job_id=self.config.job_id,
                total_consumed=self.stats["total_consumed"],
                input_records=counts.input_record_count,
                processed_records=counts.processed_record_count,
                processed_fields=counts.processed_field_count,
                input_bytes=counts.input_bytes,
                snapshots_saved=self.stats["snapshots_saved"],
                elapsed_sec=round(elapsed, 1),
            )
