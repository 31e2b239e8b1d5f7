"""
PostgreSQL connection shared by the job statistics persistence layers.
"""

from contextlib import contextmanager
from typing import Any

import psycopg2
import structlog

logger = structlog.get_logger(__name__)


class PostgresConnection:
    """One psycopg2 connection with transactional cursor handling"""

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        connect_timeout: int = 10,
    ):
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.connect_timeout = connect_timeout
        self.connection = None
        self._connect()

    def _connect(self):
        try:
            self.connection = psycopg2.connect(
                host=self.host,
                port=self.port,
                database=self.database,
                user=self.user,
                password=self.password,
                connect_timeout=self.connect_timeout,
            )
        except Exception as e:
            logger.error("Could not open PostgreSQL connection", host=self.host, error=str(e))
            raise
        logger.info("Connected to PostgreSQL", host=self.host, database=self.database)

    @contextmanager
    def get_cursor(self):
        """Cursor whose work is committed on success and rolled back on error"""
        cursor = self.connection.cursor()
        try:
            yield cursor
            self.connection.commit()
        except Exception as e:
            self.connection.rollback()
            logger.error("Transaction rolled back", error=str(e))
            raise
        finally:
            cursor.close()

    def execute_query(self, query: str, params: dict[str, Any] | None = None) -> bool:
        """Run a write statement; failures are logged and reported as False"""
        try:
            with self.get_cursor() as cursor:
                cursor.execute(query, params or {})
        except Exception as e:
            logger.error("Statement failed", error=str(e), query=query)
            return False
        return True

    def fetch_one(self, query: str, params: tuple | dict | None = None) -> tuple | None:
        """First row of a query, or None. Errors propagate"""
        with self.get_cursor() as cursor:
            cursor.execute(query, params or ())
            return cursor.fetchone()

    def check_health(self) -> bool:
        try:
            row = self.fetch_one("SELECT 1")
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False
        return row is not None and row[0] == 1

    def close(self):
        if self.connection is None:
            return
        self.connection.close()
        self.connection = None
        logger.info("PostgreSQL connection closed")
