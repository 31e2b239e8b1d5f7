"""
Job data ingestion.

Usage:
    # Count a job's input stream and persist its data counts
    python -m src.ingest.ingest --job-id <job>
"""

from .consumer import IngestConsumer
from .models import IngestConfig
from .recorder import DataCountsRecorder

__all__ = ["IngestConsumer", "IngestConfig", "DataCountsRecorder"]
