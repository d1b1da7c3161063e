"""
Catalog metadata lookups for geometry columns.

All lookups match on (schema, table, column) exactly and degrade to a
documented default when the catalog has no row or the query fails. They
never raise: introspection must keep going when a catalog is incomplete.
"""
import logging
from typing import Any

from kairos_dialect.cursor import select_first_row
from kairos_dialect.schema import GeometryColumnMetadata
from kairos_dialect.sql import quote_literal

logger = logging.getLogger(__name__)

GEOMETRY_COLUMNS = 'GEOMETRY_COLUMNS'

DEFAULT_SRID = -1
DEFAULT_DIMENSION = 2


def geometry_columns_filter(schema: str | None, table: str, column: str,
                            exact: bool = False) -> str:
    """WHERE clause matching one GEOMETRY_COLUMNS row.

    A None schema matches any schema, unless ``exact`` is set: then it
    matches the empty schema that registrations without one are written with.
    """
    clauses = []
    if schema is not None or exact:
        clauses.append(f'F_TABLE_SCHEMA = {quote_literal(schema)}')
    clauses.append(f'F_TABLE_NAME = {quote_literal(table)}')
    clauses.append(f'F_GEOMETRY_COLUMN = {quote_literal(column)}')
    return ' AND '.join(clauses)


class MetadataResolver:
    """Resolve SRID, dimension and subtype of geometry columns from GEOMETRY_COLUMNS.
    """

    def _lookup(self, cn: Any, sql: str, what: str, qualified: str) -> Any | None:
        """Run a single-value catalog query, returning None on no row or failure.
        """
        logger.debug(f'Geometry {what} check; {sql}')
        try:
            row = select_first_row(cn, sql)
        except Exception:
            logger.warning(f'Failed to retrieve {what} of {qualified} from the catalog',
                           exc_info=True)
            return None
        if row is None:
            logger.debug(f'No {what} registered for {qualified}')
            return None
        return row[0]

    def _geometry_columns_value(self, cn: Any, field: str, what: str,
                                schema: str | None, table: str, column: str) -> Any | None:
        where = geometry_columns_filter(schema, table, column)
        sql = f'SELECT {field} FROM {GEOMETRY_COLUMNS} WHERE {where}'
        return self._lookup(cn, sql, what, f'{schema}.{table}.{column}')

    def resolve_srid(self, cn: Any, schema: str | None, table: str, column: str) -> int:
        """Return the registered SRID of a geometry column, -1 when unknown.
        """
        value = self._geometry_columns_value(cn, 'SRID', 'srid', schema, table, column)
        if value is None:
            return DEFAULT_SRID
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f'Ignoring non-integer srid {value!r} for {table}.{column}')
            return DEFAULT_SRID

    def resolve_dimension(self, cn: Any, schema: str | None, table: str, column: str) -> int:
        """Return the registered coordinate dimension of a geometry column, 2 when unknown.
        """
        value = self._geometry_columns_value(cn, 'COORD_DIMENSION', 'dimension',
                                             schema, table, column)
        if value is None:
            return DEFAULT_DIMENSION
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f'Ignoring non-integer dimension {value!r} for {table}.{column}')
            return DEFAULT_DIMENSION

    def resolve_native_subtype(self, cn: Any, schema: str | None, table: str,
                               column: str) -> str | None:
        """Return the registered geometry type name (e.g. ``POINT``), None when unregistered.
        """
        value = self._geometry_columns_value(cn, 'F_GEOMETRY_TYPE', 'type',
                                             schema, table, column)
        if value is None:
            return None
        return str(value).strip() or None

    def resolve_declared_type_name(self, cn: Any, schema: str | None, table: str,
                                   column: str) -> str | None:
        """Return the underlying storage type of a column from information_schema.

        Used to see through user-defined and aliased types.
        """
        clauses = []
        if schema is not None:
            clauses.append(f'table_schema = {quote_literal(schema)}')
        clauses.append(f'table_name = {quote_literal(table)}')
        clauses.append(f'column_name = {quote_literal(column)}')
        sql = f"SELECT udt_name FROM information_schema.columns WHERE {' AND '.join(clauses)}"
        value = self._lookup(cn, sql, 'declared type', f'{schema}.{table}.{column}')
        if value is None:
            return None
        return str(value)

    def resolve(self, cn: Any, schema: str | None, table: str, column: str) -> GeometryColumnMetadata:
        """Return the full GEOMETRY_COLUMNS registration, with defaults for missing parts.
        """
        return GeometryColumnMetadata(
            schema=schema,
            table=table,
            column=column,
            srid=self.resolve_srid(cn, schema, table, column),
            dimension=self.resolve_dimension(cn, schema, table, column),
            geometry_type=self.resolve_native_subtype(cn, schema, table, column) or 'GEOMETRY',
            )
