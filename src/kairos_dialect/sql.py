"""
SQL text helpers for the Kairos dialect.

Every identifier and string value that ends up in generated SQL passes
through this module:

- `quote_identifier()` - Quote table/column/index/sequence names
- `quote_literal()` - Quote a string value as a SQL literal
- `encode_column_name()` - Optionally prefixed, quoted column reference
- `apply_limit_offset()` - Append LIMIT/OFFSET clauses
"""

MAX_LIMIT = 2**31 - 1


def quote_identifier(identifier: str) -> str:
    """Safely quote database identifiers.

    Parameters
        identifier: Table, column, index or sequence name

    Returns
        Quoted identifier with embedded double quotes doubled
    """
    return '"' + str(identifier).replace('"', '""') + '"'


def escape_string_literal(s: str) -> str:
    """Escape a string for use inside a single-quoted SQL literal."""
    return s.replace("'", "''")


def quote_literal(value: str | None) -> str:
    """Quote a string value as a SQL literal.

    Parameters
        value: String value, None renders as an empty string literal

    Returns
        Single-quoted literal
    """
    if value is None:
        value = ''
    return "'" + escape_string_literal(str(value)) + "'"


def encode_column_name(prefix: str | None, name: str) -> str:
    """Encode a column reference, optionally qualified by a table alias.

    >>> encode_column_name('a', 'geom')
    '"a"."geom"'
    >>> encode_column_name(None, 'geom')
    '"geom"'
    """
    if prefix is not None:
        return f'{quote_identifier(prefix)}.{quote_identifier(name)}'
    return quote_identifier(name)


def apply_limit_offset(sql: str, limit: int | None, offset: int | None) -> str:
    """Append LIMIT/OFFSET clauses to a SELECT statement.

    A limit is applied only when it is non-negative and below the maximum
    integer; an offset only when it is positive.

    >>> apply_limit_offset('SELECT 1', 10, 5)
    'SELECT 1 LIMIT 10 OFFSET 5'
    >>> apply_limit_offset('SELECT 1', None, 5)
    'SELECT 1 OFFSET 5'
    """
    limit = MAX_LIMIT if limit is None else limit
    offset = offset or 0

    if 0 <= limit < MAX_LIMIT:
        sql += f' LIMIT {int(limit)}'
        if offset > 0:
            sql += f' OFFSET {int(offset)}'
    elif offset > 0:
        sql += f' OFFSET {int(offset)}'
    return sql
