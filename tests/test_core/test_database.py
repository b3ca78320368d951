"""
Tests for the connection helpers
"""
import pytest
from unittest.mock import MagicMock, patch

import psycopg2

from gestionale.core.database import borrow_connection, get_db_connection_with_retry


class TestBorrowConnection:

    def test_opens_and_closes_own_connection(self):
        factory = MagicMock()

        with borrow_connection(factory) as conn:
            assert conn is factory.return_value

        factory.return_value.close.assert_called_once()

    def test_callers_connection_left_open(self):
        factory = MagicMock()
        callers_conn = MagicMock()

        with borrow_connection(factory, callers_conn) as conn:
            assert conn is callers_conn

        factory.assert_not_called()
        callers_conn.close.assert_not_called()
        callers_conn.commit.assert_not_called()

    def test_own_connection_closed_on_error(self):
        factory = MagicMock()

        with pytest.raises(ValueError):
            with borrow_connection(factory):
                raise ValueError("boom")

        factory.return_value.close.assert_called_once()


class TestConnectionRetry:

    @patch('gestionale.core.database.time.sleep')
    def test_retries_then_succeeds(self, mock_sleep):
        good_conn = MagicMock()
        factory = MagicMock(side_effect=[
            psycopg2.OperationalError("SSL connection has been closed unexpectedly"),
            good_conn,
        ])

        conn = get_db_connection_with_retry(max_retries=3, retry_delay=0.5, factory=factory)

        assert conn is good_conn
        mock_sleep.assert_called_once_with(0.5)

    @patch('gestionale.core.database.time.sleep')
    def test_exponential_backoff_and_last_error(self, mock_sleep):
        factory = MagicMock(side_effect=psycopg2.OperationalError("could not connect"))

        with pytest.raises(psycopg2.OperationalError):
            get_db_connection_with_retry(max_retries=3, retry_delay=1.0, factory=factory)

        assert factory.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    def test_missing_database_url(self):
        with patch('gestionale.core.database.settings.DATABASE_URL', ''):
            with pytest.raises(RuntimeError):
                get_db_connection_with_retry(max_retries=1)
