"""
Capability-set interface for spatial SQL dialects.

Defines every hook the host feature-store framework calls on a dialect.
The framework depends on this interface only; concrete dialects implement
the whole set and inherit no behavior from it.

Hooks are grouped by concern:
- type mapping and introspection
- geometry encoding and decoding
- spatial catalog metadata and synchronization
- primary key sequences
- bounds estimation
- SQL text (limit/offset, literals, identifiers)
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from kairos_dialect.adapters.type_mapping import TypeMappingRegistry
    from kairos_dialect.geometry import Envelope, GeometryCodec, GeometryFactory
    from kairos_dialect.geometry import ReferencedEnvelope
    from kairos_dialect.options import DialectOptions
    from kairos_dialect.schema import ColumnInfo, FeatureType, FilterToSQL

# Registry of dialect name -> dialect class
# Defined here to avoid circular imports (concrete dialects import from base)
_DIALECT_REGISTRY: dict[str, type['SpatialDialect']] = {}


def register_dialect(name: str):
    """Decorator to register a dialect class under a name.

    Usage:
        @register_dialect('kairos')
        class KairosDialect(SpatialDialect):
            ...
    """
    def decorator(cls: type['SpatialDialect']) -> type['SpatialDialect']:
        _DIALECT_REGISTRY[name] = cls
        return cls
    return decorator


class SpatialDialect(ABC):
    """Hooks a spatial database dialect provides to the feature store.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'kairos')."""

    @property
    @abstractmethod
    def options(self) -> 'DialectOptions':
        """Return the options this dialect was built with."""

    # -- type mapping ------------------------------------------------------

    @property
    @abstractmethod
    def type_registry(self) -> 'TypeMappingRegistry':
        """Return the immutable type mapping registry owned by this dialect."""

    @abstractmethod
    def map_value_type(self, value_type: type) -> int | None:
        """Return the native type code used to bind values of a type.

        Args:
            value_type: Python type or shapely geometry class

        Returns
            Native type code, or None when the type is not mapped
        """

    @abstractmethod
    def map_native_name(self, name: str) -> type | None:
        """Return the value type for a native column type name.

        Args:
            name: Native type name, any case

        Returns
            Value type, or None when the name is not mapped
        """

    @abstractmethod
    def get_mapping(self, cn: Any, column: 'ColumnInfo') -> type | None:
        """Resolve the value type of an introspected column.

        Args:
            cn: Borrowed database connection
            column: Introspected column metadata

        Returns
            Value type, or None to let the framework apply default inference
        """

    @abstractmethod
    def handle_user_defined_type(self, cn: Any, column: 'ColumnInfo') -> None:
        """Replace a user-defined column type name with its storage type.

        Args:
            cn: Borrowed database connection
            column: Introspected column metadata, updated in place
        """

    @abstractmethod
    def geometry_type_name(self, code: int | None) -> str:
        """Return the DDL type name for a geometry dispatch code."""

    @abstractmethod
    def sql_type_name(self, code: int) -> str | None:
        """Return the native type name override for a SQL type code."""

    @property
    @abstractmethod
    def default_varchar_size(self) -> int:
        """Return the VARCHAR length used when an attribute declares none."""

    @property
    @abstractmethod
    def desired_table_types(self) -> tuple[str, ...]:
        """Return the table types listed during schema discovery."""

    @abstractmethod
    def include_table(self, schema: str | None, table: str) -> bool:
        """Check whether a table takes part in schema discovery."""

    # -- geometry ----------------------------------------------------------

    @abstractmethod
    def create_geometry_codec(self) -> 'GeometryCodec':
        """Return a new codec for one worker.

        Codecs are not safe for concurrent use; each worker owns one.
        """

    @abstractmethod
    def decode_geometry_value(self, codec: 'GeometryCodec', row: Any, column: int | str,
                              factory: 'GeometryFactory | None' = None) -> 'BaseGeometry | None':
        """Decode a geometry column value read through `encode_geometry_column`.

        Args:
            codec: The calling worker's codec
            row: Result row
            column: Column position or name
            factory: Geometry factory to build with
        """

    @abstractmethod
    def encode_geometry_column(self, column: str, prefix: str | None = None) -> str:
        """Return the SELECT list fragment reading a geometry column."""

    @abstractmethod
    def encode_geometry_envelope(self, column: str) -> str:
        """Return the SELECT list fragment reading a geometry column's envelope."""

    @abstractmethod
    def decode_geometry_envelope(self, row: Any, column: int | str) -> 'Envelope':
        """Decode an envelope column value; NULL yields the empty envelope."""

    @abstractmethod
    def encode_geometry_value(self, geometry: 'BaseGeometry | None', dimension: int | None,
                              srid: int | None) -> str:
        """Return a geometry as an inline SQL literal."""

    @property
    @abstractmethod
    def supports_geography(self) -> bool:
        """Check whether the engine has a geography type."""

    # -- catalog -----------------------------------------------------------

    @abstractmethod
    def get_geometry_srid(self, cn: Any, schema: str | None, table: str, column: str) -> int:
        """Return the registered SRID of a geometry column, -1 when unknown."""

    @abstractmethod
    def get_geometry_dimension(self, cn: Any, schema: str | None, table: str,
                               column: str) -> int:
        """Return the registered coordinate dimension, 2 when unknown."""

    @abstractmethod
    def post_create_table(self, cn: Any, schema: str | None, feature_type: 'FeatureType') -> None:
        """Register a newly created table in the spatial catalog.

        Raises
            CatalogSyncError: Registration failed and was rolled back
        """

    @abstractmethod
    def post_drop_table(self, cn: Any, schema: str | None, feature_type: 'FeatureType') -> None:
        """Remove a dropped table from the spatial catalog."""

    # -- sequences ---------------------------------------------------------

    @abstractmethod
    def get_sequence_for_column(self, cn: Any, schema: str | None, table: str,
                                column: str) -> str | None:
        """Return the sequence feeding a column, or None."""

    @abstractmethod
    def get_next_sequence_value(self, cn: Any, schema: str | None, sequence: str) -> int | None:
        """Return the next value of a sequence, or None when unavailable."""

    @abstractmethod
    def get_last_auto_generated_value(self, cn: Any, schema: str | None, table: str,
                                      column: str) -> int | None:
        """Return the key generated by the last insert on this session."""

    @property
    @abstractmethod
    def lookup_generated_values_post_insert(self) -> bool:
        """Check whether generated keys are read back after the insert."""

    # -- bounds ------------------------------------------------------------

    @abstractmethod
    def get_optimized_bounds(self, cn: Any, schema: str | None,
                             feature_type: 'FeatureType') -> 'list[ReferencedEnvelope] | None':
        """Return fast bounds for a feature type, or None when unavailable."""

    # -- SQL text ----------------------------------------------------------

    @property
    @abstractmethod
    def is_limit_offset_supported(self) -> bool:
        """Check whether `apply_limit_offset` can page queries."""

    @abstractmethod
    def apply_limit_offset(self, sql: str, limit: int | None, offset: int | None) -> str:
        """Return ``sql`` with paging clauses appended."""

    @abstractmethod
    def encode_value(self, value: Any, value_type: type | None = None) -> str:
        """Return a value as an inline SQL literal."""

    @abstractmethod
    def encode_column_name(self, prefix: str | None, name: str) -> str:
        """Return a quoted, optionally prefixed, column reference."""

    @abstractmethod
    def encode_primary_key(self, column: str) -> str:
        """Return the column definition of a generated primary key."""

    @abstractmethod
    def is_aggregated_sort_supported(self, function: str) -> bool:
        """Check whether an aggregate can be combined with ORDER BY."""

    @abstractmethod
    def create_filter_to_sql(self) -> 'FilterToSQL':
        """Return the settings for the framework's filter encoder."""
