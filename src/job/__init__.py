"""
Job ingestion statistics.

Tracks how many records, fields and bytes a job has received, how many were
rejected and why, and how many reached the analysis engine.
"""

from .cache import DataCountsCache
from .data_counts import DataCounts, IllegalStateError
from .models import CountsStoreConfig
from .store import DataCountsStore

__all__ = [
    "DataCounts",
    "IllegalStateError",
    "CountsStoreConfig",
    "DataCountsStore",
    "DataCountsCache",
]
