"""
Sequence handling for generated primary keys.

Kairos has no serial columns. Primary keys of feature tables are fed from a
sequence named ``seq_<table>_<column>``, created by the catalog synchronizer
when the table is created.
"""
import logging
from typing import Any

from kairos_dialect.cursor import execute, select_first_row
from kairos_dialect.sql import quote_identifier, quote_literal

logger = logging.getLogger(__name__)

SEQUENCE_CATALOG = 'syssequence'

_GEOMETRY_NAME_MARKERS = ('GEOM', 'SHAPE')


def sequence_name(table: str, column: str) -> str:
    """Return the deterministic sequence name for a table column.

    >>> sequence_name('building', 'fid')
    'seq_building_fid'
    """
    return f'seq_{table}_{column}'


def is_geometry_column_name(column: str) -> bool:
    """Check whether a column name marks a geometry/shape column.

    Such columns never get a sequence.
    """
    upper = column.upper()
    return any(marker in upper for marker in _GEOMETRY_NAME_MARKERS)


class SequenceKeyProvider:
    """Resolve and query the sequences behind generated primary keys.
    """

    def sequence_name_for(self, cn: Any, schema: str | None, table: str,
                          column: str) -> str | None:
        """Return the existing sequence for a column, or None.

        Geometry and shape columns are skipped without touching the
        database.
        """
        if is_geometry_column_name(column):
            return None

        name = sequence_name(table, column)
        sql = f'SELECT seqname FROM {SEQUENCE_CATALOG} WHERE seqname = {quote_literal(name)}'
        row = select_first_row(cn, sql)
        if row is None:
            return None
        return row[0]

    def next_value(self, cn: Any, schema: str | None, name: str) -> int | None:
        """Draw the next value from a sequence.

        Returns
            The value, or None when the engine returned no row
        """
        sql = f'SELECT {quote_identifier(name)}.NEXTVAL FROM DUAL'
        row = select_first_row(cn, sql)
        if row is None or row[0] is None:
            logger.warning(f'Failed to retrieve sequence from {name}')
            return None
        return int(row[0])

    def last_generated_value(self, cn: Any) -> int | None:
        """Return the value most recently generated in this session.

        Must run on the same connection immediately after the insert,
        before any other statement; otherwise the result is undefined.
        """
        row = select_first_row(cn, 'SELECT lastval()')
        if row is None or row[0] is None:
            return None
        return int(row[0])

    def create_sequence(self, cn: Any, name: str) -> None:
        """Create a sequence counting up from 1.
        """
        execute(cn, f'CREATE SEQUENCE {quote_identifier(name)} '
                    'START WITH 1 INCREMENT BY 1 MINVALUE 1 NOMAXVALUE')

    def drop_sequence(self, cn: Any, name: str) -> None:
        execute(cn, f'DROP SEQUENCE {quote_identifier(name)}')

    def recreate_sequence(self, cn: Any, schema: str | None, table: str,
                          column: str) -> str | None:
        """Drop any leftover sequence for a column and create a fresh one.

        Returns
            The sequence name, or None for geometry/shape columns
        """
        if is_geometry_column_name(column):
            logger.debug(f'Skipping sequence for geometry column {table}.{column}')
            return None

        name = sequence_name(table, column)
        if self.sequence_name_for(cn, schema, table, column) is not None:
            self.drop_sequence(cn, name)
        self.create_sequence(cn, name)
        return name
