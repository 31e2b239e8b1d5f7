"""
Core utilities shared by the job statistics services.
"""

from .database import PostgresConnection
from .logger import setup_logging

__all__ = ["PostgresConnection", "setup_logging"]
