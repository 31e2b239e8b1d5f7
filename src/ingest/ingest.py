"""
Ingest Consumer - CLI Entry Point
Consumes a job's input records from Kafka and keeps its data counts in PostgreSQL/Redis
"""

import argparse
import logging
import os
import sys

import structlog

from src.core.logger import setup_logging
from src.ingest.consumer import IngestConsumer
from src.ingest.models import IngestConfig

logger = structlog.get_logger(__name__)


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Job data ingestion consumer tracking data counts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Count a job's records with default settings
        python -m src.ingest.ingest --job-id farequote

        # Records with ISO timestamps and two analysed fields
        python -m src.ingest.ingest --job-id farequote --time-format iso8601 \\
            --analysis-fields responsetime,airline

        # Using environment variables
        export KAFKA_BOOTSTRAP_SERVERS=kafka:9092
        export POSTGRES_HOST=postgres
        python -m src.ingest.ingest --job-id farequote
        """,
    )

    # Job settings
    parser.add_argument(
        "--job-id",
        default=os.getenv("JOB_ID", "default-job"),
        help="Job identifier (default: default-job or JOB_ID env var)",
    )
    parser.add_argument(
        "--time-field",
        default="timestamp",
        help="Name of the record time field (default: timestamp)",
    )
    parser.add_argument(
        "--time-format",
        default="epoch",
        help="epoch, epoch_ms, iso8601 or a strptime pattern (default: epoch)",
    )
    parser.add_argument(
        "--analysis-fields",
        default="",
        help="Comma separated fields configured for analysis",
    )
    parser.add_argument(
        "--latency",
        type=float,
        default=0.0,
        help="Seconds a record may lag the latest one before it is out of order (default: 0)",
    )

    # Kafka settings
    parser.add_argument(
        "--kafka-servers",
        default=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
        help="Kafka bootstrap servers (default: localhost:9092 or KAFKA_BOOTSTRAP_SERVERS env var)",
    )
    parser.add_argument(
        "--topic",
        default=os.getenv("KAFKA_TOPIC", "job-data"),
        help="Kafka topic name (default: job-data or KAFKA_TOPIC env var)",
    )
    parser.add_argument(
        "--group-id",
        default="job-ingest-consumer-group",
        help="Kafka consumer group ID (default: job-ingest-consumer-group)",
    )
    parser.add_argument(
        "--offset-reset",
        choices=["earliest", "latest"],
        default="earliest",
        help="Auto offset reset strategy (default: earliest)",
    )

    # PostgreSQL settings
    parser.add_argument(
        "--postgres-host",
        default=os.getenv("POSTGRES_HOST", "localhost"),
        help="PostgreSQL host (default: localhost or POSTGRES_HOST env var)",
    )
    parser.add_argument(
        "--postgres-port",
        type=int,
        default=int(os.getenv("POSTGRES_PORT", "5432")),
        help="PostgreSQL port (default: 5432 or POSTGRES_PORT env var)",
    )
    parser.add_argument(
        "--postgres-db",
        default=os.getenv("POSTGRES_DB", "jobstats_db"),
        help="PostgreSQL database (default: jobstats_db or POSTGRES_DB env var)",
    )
    parser.add_argument(
        "--postgres-user",
        default=os.getenv("POSTGRES_USER", "jobstats"),
        help="PostgreSQL user (default: jobstats or POSTGRES_USER env var)",
    )
    parser.add_argument(
        "--postgres-password",
        default=os.getenv("POSTGRES_PASSWORD", "jobstats_password"),
        help="PostgreSQL password (default: jobstats_password or POSTGRES_PASSWORD env var)",
    )

    # Redis settings
    parser.add_argument(
        "--redis-host",
        default=os.getenv("REDIS_HOST", "localhost"),
        help="Redis host (default: localhost or REDIS_HOST env var)",
    )
    parser.add_argument(
        "--redis-port",
        type=int,
        default=int(os.getenv("REDIS_PORT", "6379")),
        help="Redis port (default: 6379 or REDIS_PORT env var)",
    )

    # Consumer behavior
    parser.add_argument(
        "--snapshot-interval",
        type=float,
        default=30.0,
        help="Seconds between data counts snapshots (default: 30.0)",
    )
    parser.add_argument(
        "--max-poll-records",
        type=int,
        default=500,
        help="Max records per poll (default: 500)",
    )

    # Runtime settings
    parser.add_argument(
        "--duration",
        type=int,
        help="Duration to run in seconds (default: infinite)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )

    return parser.parse_args(argv)


def build_config_from_args(args) -> IngestConfig:
    """Build an IngestConfig from command-line arguments"""
    analysis_fields = [name.strip() for name in args.analysis_fields.split(",") if name.strip()]

    config = IngestConfig(
        job_id=args.job_id,
        time_field=args.time_field,
        time_format=args.time_format,
        analysis_fields=analysis_fields,
        latency_seconds=args.latency,
        kafka_bootstrap_servers=args.kafka_servers,
        kafka_topic=args.topic,
        kafka_group_id=args.group_id,
        kafka_auto_offset_reset=args.offset_reset,
        postgres_host=args.postgres_host,
        postgres_port=args.postgres_port,
        postgres_database=args.postgres_db,
        postgres_user=args.postgres_user,
        postgres_password=args.postgres_password,
        redis_host=args.redis_host,
        redis_port=args.redis_port,
        snapshot_interval_seconds=args.snapshot_interval,
        max_poll_records=args.max_poll_records,
    )

    logger.info("Configuration built from arguments", job_id=config.job_id)
    return config


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    log_level = getattr(logging, args.log_level)
    setup_logging(level=log_level)

    logger.info("Starting ingest consumer")

    try:
        config = build_config_from_args(args)

        consumer = IngestConsumer(config)
        consumer.run(duration_seconds=args.duration)

        logger.info("Consumer completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Consumer failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
