"""
Transaction and savepoint handling on borrowed connections.
"""
import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Any

from kairos_dialect.cursor import execute, get_raw_connection
from kairos_dialect.sql import quote_identifier

logger = logging.getLogger(__name__)


_local = threading.local()


def is_autocommit(connection: Any) -> bool:
    """Check whether a connection commits every statement on its own.

    Works with:
    - psycopg-style connections (boolean ``autocommit`` attribute)
    - sqlite3 (``isolation_level`` of None)
    - Raw DBAPI connections without either attribute (assumed transactional)
    """
    raw_conn = get_raw_connection(connection)
    autocommit = getattr(raw_conn, 'autocommit', None)
    if isinstance(autocommit, bool):
        return autocommit
    if hasattr(raw_conn, 'isolation_level'):
        return raw_conn.isolation_level is None
    return False


@contextmanager
def autocommit_disabled(connection: Any):
    """Context manager to temporarily disable autocommit on a connection.

    Saves current autocommit state, disables autocommit, executes the block,
    then restores the original state. Connections already in manual commit
    mode are left untouched.
    """
    raw_conn = get_raw_connection(connection)
    if isinstance(getattr(raw_conn, 'autocommit', None), bool):
        original = raw_conn.autocommit
        if original:
            raw_conn.autocommit = False
        try:
            yield
        finally:
            if original:
                raw_conn.autocommit = True
    elif hasattr(raw_conn, 'isolation_level') and raw_conn.isolation_level is None:
        raw_conn.isolation_level = 'DEFERRED'
        try:
            yield
        finally:
            raw_conn.isolation_level = None
    else:
        yield


class Transaction:
    """Context manager for running multiple statements as one unit.

    Commits when the block completes, rolls back when it raises. Nested
    transactions on the same connection within one thread are refused.

    Examples
        with Transaction(cn):
            execute(cn, 'DELETE FROM ...')
            execute(cn, 'INSERT INTO ...')
    """

    def __init__(self, cn: Any) -> None:
        self.connection = cn
        self._autocommit = None

        if not hasattr(_local, 'active_transactions'):
            _local.active_transactions = set()

        if id(cn) in _local.active_transactions:
            raise RuntimeError('Nested transactions are not supported')

    def __enter__(self):
        _local.active_transactions.add(id(self.connection))
        self._autocommit = autocommit_disabled(self.connection)
        self._autocommit.__enter__()
        logger.debug(f'Started transaction for connection {id(self.connection)}')
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        raw_conn = get_raw_connection(self.connection)
        try:
            if exc_type is not None:
                raw_conn.rollback()
                logger.warning('Rolling back the current transaction')
            else:
                raw_conn.commit()
                logger.debug(f'Committed transaction for connection {id(self.connection)}')
        finally:
            _local.active_transactions.discard(id(self.connection))
            self._autocommit.__exit__(None, None, None)


@contextmanager
def savepoint(cn: Any, name: str | None = None):
    """Establish a savepoint for the duration of the block.

    Rolls back to the savepoint when the block raises, then re-raises. The
    savepoint is released on both paths.
    """
    name = name or f'sp_{uuid.uuid4().hex}'
    quoted_name = quote_identifier(name)
    execute(cn, f'SAVEPOINT {quoted_name}')
    try:
        yield name
    except Exception:
        execute(cn, f'ROLLBACK TO SAVEPOINT {quoted_name}')
        raise
    finally:
        execute(cn, f'RELEASE SAVEPOINT {quoted_name}')
