"""
Tests for core PostgreSQL connection management.
"""

from unittest.mock import MagicMock, patch

import pytest

from src.core.database import PostgresConnection


def connect(**overrides) -> PostgresConnection:
    settings = {
        "host": "localhost",
        "port": 5432,
        "database": "test_db",
        "user": "test_user",
        "password": "test_password",
    }
    settings.update(overrides)
    return PostgresConnection(**settings)


@pytest.fixture
def mock_cursor():
    """Cursor returned by a patched psycopg2 connection."""
    with patch("src.core.database.psycopg2.connect") as mock_connect:
        mock_connection = MagicMock()
        cursor = MagicMock()
        mock_connection.cursor.return_value = cursor
        mock_connect.return_value = mock_connection
        cursor.connect = mock_connect
        cursor.owner = mock_connection
        yield cursor


class TestPostgresConnection:
    """Tests for PostgresConnection base class."""

    def test_initialization(self, mock_cursor):
        """Test connection parameters are passed to psycopg2."""
        conn = connect(connect_timeout=3)

        mock_cursor.connect.assert_called_once_with(
            host="localhost",
            port=5432,
            database="test_db",
            user="test_user",
            password="test_password",
            connect_timeout=3,
        )
        assert conn.connection == mock_cursor.owner

    @patch("src.core.database.psycopg2.connect")
    def test_initialization_failure(self, mock_connect):
        """Test connection failures are raised."""
        mock_connect.side_effect = Exception("Connection failed")

        with pytest.raises(Exception, match="Connection failed"):
            connect()

    def test_get_cursor_commits(self, mock_cursor):
        """Test a successful block is committed and the cursor closed."""
        conn = connect()

        with conn.get_cursor() as cursor:
            cursor.execute("SELECT 1")

        mock_cursor.owner.commit.assert_called_once()
        mock_cursor.close.assert_called_once()

    def test_get_cursor_rolls_back(self, mock_cursor):
        """Test a failing block is rolled back and re-raised."""
        mock_cursor.execute.side_effect = Exception("Query failed")
        conn = connect()

        with pytest.raises(Exception, match="Query failed"):  # noqa: SIM117
            with conn.get_cursor() as cursor:
                cursor.execute("BAD SQL")

        mock_cursor.owner.rollback.assert_called_once()
        mock_cursor.owner.commit.assert_not_called()

    def test_execute_query(self, mock_cursor):
        """Test statements run with their parameters."""
        conn = connect()

        assert conn.execute_query("DELETE FROM t WHERE id = %(id)s", {"id": 1}) is True
        mock_cursor.execute.assert_called_once_with("DELETE FROM t WHERE id = %(id)s", {"id": 1})

    def test_execute_query_failure(self, mock_cursor):
        """Test failed statements report False."""
        mock_cursor.execute.side_effect = Exception("Query error")

        assert connect().execute_query("BAD QUERY") is False

    def test_fetch_one(self, mock_cursor):
        """Test the first row is returned."""
        mock_cursor.fetchone.return_value = ("row",)

        assert connect().fetch_one("SELECT x FROM t WHERE id = %s", (1,)) == ("row",)
        mock_cursor.execute.assert_called_once_with("SELECT x FROM t WHERE id = %s", (1,))

    def test_fetch_one_raises(self, mock_cursor):
        """Test fetch errors propagate to the caller."""
        mock_cursor.execute.side_effect = Exception("Query error")

        with pytest.raises(Exception, match="Query error"):
            connect().fetch_one("SELECT 1")

    @pytest.mark.parametrize("row,expected", [((1,), True), ((0,), False)])
    def test_check_health(self, mock_cursor, row, expected):
        """Test health depends on SELECT 1 returning 1."""
        mock_cursor.fetchone.return_value = row

        assert connect().check_health() is expected

    def test_check_health_failure(self, mock_cursor):
        """Test health check errors report False."""
        mock_cursor.owner.cursor.side_effect = Exception("Connection lost")

        assert connect().check_health() is False

    def test_close(self, mock_cursor):
        """Test close closes the connection once."""
        conn = connect()

        conn.close()
        conn.close()

        mock_cursor.owner.close.assert_called_once()
        assert conn.connection is None

    def test_check_health_no_row(self, mock_cursor):
        """Test an empty result is unhealthy."""
        mock_cursor.fetchone.return_value = None

        assert connect().check_health() is False
