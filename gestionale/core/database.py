"""
PostgreSQL connection helpers

Centralizes every way the application reaches the database:
- psycopg2 direct connections (all runtime queries, RealDictCursor rows)
- SQLAlchemy engine + declarative Base (schema declaration in app models)

No connection or pool is opened at import time. Services and repositories
receive a connection factory (by default get_db_connection_dict) and open
their own connections from it.
"""
import time
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from .config import settings

logger = logging.getLogger(__name__)

# Seconds psycopg2 waits for the server before giving up
CONNECTION_TIMEOUT = 10

# Base for schema models (gestionale.models)
Base = declarative_base()


def _database_url() -> str:
    database_url = settings.DATABASE_URL
    if not database_url:
        raise RuntimeError("DATABASE_URL not configured")
    return database_url


def get_engine() -> Engine:
    """
    Build a SQLAlchemy engine for schema management (scripts/init_db.py)

    Runtime queries go through psycopg2, the engine is only used to emit DDL.
    """
    return create_engine(_database_url(), pool_pre_ping=True)


def get_db_connection():
    """
    Get a direct psycopg2 database connection (returns tuples)

    Returns:
        psycopg2 connection object

    Raises:
        RuntimeError if DATABASE_URL is not configured
    """
    return psycopg2.connect(_database_url(), connect_timeout=CONNECTION_TIMEOUT)


def get_db_connection_dict():
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    This is the default connection factory of every repository: rows come
    back as dicts that map straight onto the domain models.

    Example:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM ordini")
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """
    return psycopg2.connect(
        _database_url(),
        cursor_factory=RealDictCursor,
        connect_timeout=CONNECTION_TIMEOUT,
    )


@contextmanager
def borrow_connection(
    connection_factory: Callable,
    conn=None,
) -> Iterator:
    """
    Yield a usable connection.

    When the caller passes an open connection (it owns a transaction) it is
    yielded untouched: no commit, no close. Otherwise a fresh connection is
    opened from the factory and closed afterwards.
    """
    if conn is not None:
        yield conn
        return

    own_conn = connection_factory()
    try:
        yield own_conn
    finally:
        own_conn.close()


# ============================================================================
# Database Connection with Retry Logic (SSL Failure Recovery)
# ============================================================================

def get_db_connection_with_retry(max_retries=3, retry_delay=1.0, factory: Optional[Callable] = None):
    """
    Get a psycopg2 connection with automatic retry on connection failures

    - Retries failed connections up to max_retries times
    - Exponential backoff between retries
    - Each attempt is verified with SELECT 1

    Args:
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)
        factory: Connection factory (default: get_db_connection)

    Returns:
        psycopg2 connection object

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    factory = factory or get_db_connection
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = factory()

            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")

    raise last_error
