"""
Raw statement execution on a borrowed DB-API connection.

The dialect never owns connections. These helpers open a cursor on whatever
connection the host framework hands in, run one statement and close the
cursor again.
"""
import logging
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)


def get_raw_connection(connection: Any) -> Any:
    """Extract the raw DBAPI connection from a wrapper."""
    raw_conn = connection
    if getattr(connection, 'driver_connection', None) is not None:
        raw_conn = connection.driver_connection
    return raw_conn


@contextmanager
def open_cursor(cn: Any, sql: str):
    """Context manager for cursor lifecycle.

    Handles cursor creation, SQL execution, and cleanup.
    """
    logger.debug(sql)
    cursor = get_raw_connection(cn).cursor()
    try:
        cursor.execute(sql)
        yield cursor
    finally:
        cursor.close()


def execute(cn: Any, sql: str) -> int:
    """Execute SQL and return the driver rowcount.
    """
    with open_cursor(cn, sql) as cursor:
        return cursor.rowcount


def select_first_row(cn: Any, sql: str) -> tuple | None:
    """Execute a query and return its first row, or None when it returns nothing.
    """
    with open_cursor(cn, sql) as cursor:
        row = cursor.fetchone()
    if row is None:
        return None
    if isinstance(row, Mapping):
        return tuple(row.values())
    return tuple(row)

