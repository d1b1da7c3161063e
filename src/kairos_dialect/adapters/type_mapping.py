"""
Type mapping between semantic value types and Kairos native types.

This module provides the lookup tables the dialect uses in both directions:

1. Value type -> native type code, for binding values and creating columns
2. Native type name -> value type, for inferring attribute types on read
3. Native type code -> native type name, for DDL

Semantic value types are plain Python types plus the shapely geometry
classes. `BaseGeometry` stands for a column of unspecified geometry subtype.

The registry is built once per dialect instance and never mutated; all
tables are exposed read-only.
"""
import datetime
import decimal
import logging
import uuid
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from shapely.geometry import GeometryCollection, LineString, MultiLineString
from shapely.geometry import MultiPoint, MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry

if TYPE_CHECKING:
    from kairos_dialect.metadata import MetadataResolver
    from kairos_dialect.schema import ColumnInfo

logger = logging.getLogger(__name__)


class SqlType(IntEnum):
    """Generic SQL type codes, numbered as the JDBC ``java.sql.Types`` constants.
    """
    BIT = -7
    TINYINT = -6
    BIGINT = -5
    LONGVARBINARY = -4
    VARBINARY = -3
    BINARY = -2
    LONGVARCHAR = -1
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111
    BLOB = 2004
    CLOB = 2005


class GeometryTypeCode(IntEnum):
    """Internal dispatch codes for the seven geometry subtypes.

    Only used for routing inside the dialect; never sent to the driver.
    """
    POINT = 4000
    LINESTRING = 4001
    POLYGON = 4002
    MULTIPOINT = 4003
    MULTILINESTRING = 4004
    MULTIPOLYGON = 4005
    GEOMCOLLECTION = 4006


# subtype class -> (canonical native name, dispatch code)
GEOMETRY_SUBTYPES: dict[type, tuple[str, GeometryTypeCode]] = {
    Point: ('POINT', GeometryTypeCode.POINT),
    LineString: ('LINESTRING', GeometryTypeCode.LINESTRING),
    Polygon: ('POLYGON', GeometryTypeCode.POLYGON),
    MultiPoint: ('MULTIPOINT', GeometryTypeCode.MULTIPOINT),
    MultiLineString: ('MULTILINESTRING', GeometryTypeCode.MULTILINESTRING),
    MultiPolygon: ('MULTIPOLYGON', GeometryTypeCode.MULTIPOLYGON),
    GeometryCollection: ('GEOMCOLLECTION', GeometryTypeCode.GEOMCOLLECTION),
    }

# Kairos declares single line and polygon columns with the multi-part types
GEOMETRY_DDL_NAMES: dict[int, str] = {
    GeometryTypeCode.POINT: 'ST_POINT',
    GeometryTypeCode.LINESTRING: 'ST_MULTILINESTRING',
    GeometryTypeCode.POLYGON: 'ST_MULTIPOLYGON',
    GeometryTypeCode.MULTIPOINT: 'ST_MULTIPOINT',
    GeometryTypeCode.MULTILINESTRING: 'ST_MULTILINESTRING',
    GeometryTypeCode.MULTIPOLYGON: 'ST_MULTIPOLYGON',
    GeometryTypeCode.GEOMCOLLECTION: 'ST_GEOMCOLLECTION',
    }

GENERIC_GEOMETRY_NAMES = frozenset({'GEOMETRY', 'ST_GEOMETRY'})

_MEASURE_SUFFIXES = ('ZM', 'M', 'Z')


def _scalar_value_types() -> dict[type, int]:
    return {
        str: SqlType.VARCHAR,
        bool: SqlType.BOOLEAN,
        int: SqlType.INTEGER,
        float: SqlType.DOUBLE,
        decimal.Decimal: SqlType.NUMERIC,
        datetime.datetime: SqlType.TIMESTAMP,
        datetime.date: SqlType.DATE,
        datetime.time: SqlType.TIME,
        bytes: SqlType.BLOB,
        bytearray: SqlType.BLOB,
        uuid.UUID: SqlType.OTHER,
        BaseGeometry: SqlType.OTHER,
        }


def _scalar_native_names() -> dict[str, type]:
    return {
        'TEXT': str,
        'VARCHAR': str,
        'CHAR': str,
        'BPCHAR': str,
        'CLOB': str,
        'BIT': bool,
        'BOOL': bool,
        'BOOLEAN': bool,
        'SMALLINT': int,
        'INT': int,
        'INTEGER': int,
        'BIGINT': int,
        'REAL': float,
        'FLOAT': float,
        'DOUBLE': float,
        'NUMBER': decimal.Decimal,
        'NUMERIC': decimal.Decimal,
        'DECIMAL': decimal.Decimal,
        'DATE': datetime.date,
        'TIME': datetime.time,
        'TIMESTAMP': datetime.datetime,
        'DATETIME': datetime.datetime,
        'BYTEA': bytes,
        'BLOB': bytes,
        'UUID': uuid.UUID,
        }


def _sql_type_name_overrides() -> dict[int, str]:
    return {
        SqlType.BIT: 'BIT',
        SqlType.VARCHAR: 'VARCHAR',
        SqlType.BOOLEAN: 'BOOL',
        SqlType.SMALLINT: 'SMALLINT',
        SqlType.INTEGER: 'INTEGER',
        SqlType.BIGINT: 'BIGINT',
        SqlType.REAL: 'REAL',
        SqlType.FLOAT: 'FLOAT',
        SqlType.DOUBLE: 'DOUBLE',
        SqlType.DECIMAL: 'DECIMAL',
        SqlType.NUMERIC: 'NUMBER',
        SqlType.BLOB: 'BLOB',
        }


class TypeMappingRegistry:
    """Bidirectional lookup between value types and Kairos native types.

    Examples
        registry = TypeMappingRegistry()
        registry.map_value_type(Point)          # GeometryTypeCode.POINT
        registry.map_native_name('polygonz')    # Polygon
        registry.native_type_name(MultiPoint)   # 'MULTIPOINT'
    """

    def __init__(self) -> None:
        value_types = _scalar_value_types()
        native_names = _scalar_native_names()
        canonical_names: dict[type, str] = {BaseGeometry: 'GEOMETRY', bytes: 'BYTEA'}

        for name in GENERIC_GEOMETRY_NAMES:
            native_names[name] = BaseGeometry

        for geometry_class, (name, code) in GEOMETRY_SUBTYPES.items():
            value_types[geometry_class] = code
            canonical_names[geometry_class] = name
            native_names[name] = geometry_class
            native_names[f'ST_{name}'] = geometry_class
        native_names['GEOMETRYCOLLECTION'] = GeometryCollection
        native_names['ST_GEOMETRYCOLLECTION'] = GeometryCollection

        self._value_types = MappingProxyType(value_types)
        self._native_names = MappingProxyType(native_names)
        self._canonical_names = MappingProxyType(canonical_names)
        self._type_name_overrides = MappingProxyType(_sql_type_name_overrides())

    @property
    def value_type_codes(self) -> MappingProxyType:
        """Read-only value type -> native code table."""
        return self._value_types

    @property
    def native_name_types(self) -> MappingProxyType:
        """Read-only native name -> value type table (upper-case names)."""
        return self._native_names

    @property
    def sql_type_name_overrides(self) -> MappingProxyType:
        """Read-only SQL type code -> Kairos type name table."""
        return self._type_name_overrides

    def map_value_type(self, value_type: type) -> int | None:
        """Return the native type code for a value type.

        Walks the class hierarchy so subclasses bind like their nearest
        mapped ancestor (``LinearRing`` binds as a line string).

        Args:
            value_type: Python type or shapely geometry class

        Returns
            SqlType or GeometryTypeCode member, or None when unmapped
        """
        for cls in getattr(value_type, '__mro__', ()):
            code = self._value_types.get(cls)
            if code is not None:
                return code
        return None

    def map_native_name(self, name: str | None) -> type | None:
        """Return the value type for a native type name.

        Lookup is case-insensitive. Measured and elevated geometry names
        (``POINTM``, ``POLYGONZ``, ``LINESTRINGZM``) resolve to the same type
        as the unqualified name.
        """
        if not name:
            return None
        key = name.strip().upper()
        value_type = self._native_names.get(key)
        if value_type is not None:
            return value_type
        for suffix in _MEASURE_SUFFIXES:
            if key.endswith(suffix):
                value_type = self._native_names.get(key[:-len(suffix)])
                if value_type is not None and issubclass(value_type, BaseGeometry):
                    return value_type
        return None

    def native_type_name(self, value_type: type) -> str | None:
        """Return the canonical native name stored in GEOMETRY_COLUMNS for a value type.
        """
        for cls in getattr(value_type, '__mro__', ()):
            name = self._canonical_names.get(cls)
            if name is not None:
                return name
        return None

    def geometry_type_name(self, code: int | None) -> str:
        """Return the DDL column type for a geometry dispatch code.
        """
        return GEOMETRY_DDL_NAMES.get(code, 'ST_GEOMETRY')

    def sql_type_name(self, code: int) -> str | None:
        """Return the Kairos type name override for a SQL type code, if any.
        """
        return self._type_name_overrides.get(code)

    def resolve_column_value_type(self, column: 'ColumnInfo',
                                  resolver: 'MetadataResolver',
                                  cn: Any) -> type | None:
        """Resolve the value type of an introspected column.

        Generic geometry columns are narrowed to the subtype registered in
        GEOMETRY_COLUMNS. Columns with a concrete geometry type name map
        directly.

        Args:
            column: Introspected column metadata
            resolver: Catalog metadata resolver
            cn: Borrowed database connection

        Returns
            Value type, or None when the column is not geometry related and
            the framework should apply its default inference
        """
        type_name = (column.type_name or '').strip().upper()
        if type_name not in GENERIC_GEOMETRY_NAMES:
            value_type = self.map_native_name(type_name)
            if value_type is not None and issubclass(value_type, BaseGeometry):
                return value_type
            return None

        subtype = resolver.resolve_native_subtype(cn, column.schema, column.table, column.column)
        if subtype is None:
            return BaseGeometry

        value_type = self.map_native_name(subtype)
        if value_type is None or not issubclass(value_type, BaseGeometry):
            logger.debug(f'Unknown geometry subtype {subtype!r} for '
                         f'{column.table}.{column.column}, using generic geometry')
            return BaseGeometry
        return value_type
