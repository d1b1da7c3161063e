"""
Kairos-specific dialect implementation.

This module implements the SpatialDialect interface for the Kairos spatial
database. It handles Kairos's particular features such as:
- GEOMETRY_COLUMNS registration and RSTREE spatial indexes
- Sequences named ``seq_<table>_<column>`` for generated primary keys
- WKB reads through ST_ASBINARY and WKT writes through ST_GeomFromText
- ST_EXTENT based bounds estimation
- Bytea style escaping of binary literals
"""
from typing import Any

from shapely.geometry.base import BaseGeometry

from kairos_dialect.adapters.type_mapping import TypeMappingRegistry
from kairos_dialect.bounds import BoundsEstimator
from kairos_dialect.catalog import SpatialCatalogSynchronizer
from kairos_dialect.geometry import Envelope, GeometryCodec, GeometryFactory
from kairos_dialect.geometry import ReferencedEnvelope
from kairos_dialect.literals import ValueLiteralEncoder
from kairos_dialect.metadata import MetadataResolver
from kairos_dialect.options import DialectOptions
from kairos_dialect.schema import ColumnInfo, FeatureType, FilterToSQL
from kairos_dialect.sequence import SequenceKeyProvider
from kairos_dialect.sql import apply_limit_offset, encode_column_name
from kairos_dialect.strategy.base import SpatialDialect, register_dialect

SYSTEM_TABLES = frozenset({'GEOMETRY_COLUMNS', 'SPATIAL_REF_SYS', 'SYS_PLAN_VIEW'})


@register_dialect('kairos')
class KairosDialect(SpatialDialect):
    """Kairos spatial database dialect.

    Owns one instance of each component; components hold no per-call state
    apart from the geometry codec, which workers obtain through
    `create_geometry_codec`.
    """

    def __init__(self, options: DialectOptions | None = None) -> None:
        self._options = options or DialectOptions()
        self._registry = TypeMappingRegistry()
        self.metadata = MetadataResolver()
        self.sequences = SequenceKeyProvider()
        self.literals = ValueLiteralEncoder()
        self._codec = GeometryCodec()
        self.bounds = BoundsEstimator(GeometryCodec())
        self.catalog = SpatialCatalogSynchronizer(
            self._registry, self.sequences,
            drop_sequence_on_drop_table=self._options.drop_sequence_on_drop_table,
            )

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for Kairos."""
        return 'kairos'

    @property
    def options(self) -> DialectOptions:
        return self._options

    @property
    def type_registry(self) -> TypeMappingRegistry:
        return self._registry

    def map_value_type(self, value_type: type) -> int | None:
        return self._registry.map_value_type(value_type)

    def map_native_name(self, name: str) -> type | None:
        return self._registry.map_native_name(name)

    def get_mapping(self, cn: Any, column: ColumnInfo) -> type | None:
        """Narrow generic geometry columns to their registered subtype.
        """
        return self._registry.resolve_column_value_type(column, self.metadata, cn)

    def handle_user_defined_type(self, cn: Any, column: ColumnInfo) -> None:
        """Replace the column type name with its declared storage type, if found.
        """
        declared = self.metadata.resolve_declared_type_name(cn, column.schema, column.table,
                                                            column.column)
        if declared is not None:
            column.type_name = declared

    def geometry_type_name(self, code: int | None) -> str:
        return self._registry.geometry_type_name(code)

    def sql_type_name(self, code: int) -> str | None:
        return self._registry.sql_type_name(code)

    @property
    def default_varchar_size(self) -> int:
        return self._options.default_varchar_size

    @property
    def desired_table_types(self) -> tuple[str, ...]:
        return ('TABLE', 'VIEW', 'MATERIALIZED VIEW')

    def include_table(self, schema: str | None, table: str) -> bool:
        """Hide the Kairos system tables from schema discovery.
        """
        return table.upper() not in SYSTEM_TABLES

    def create_geometry_codec(self) -> GeometryCodec:
        return GeometryCodec()

    def decode_geometry_value(self, codec: GeometryCodec, row: Any, column: int | str,
                              factory: GeometryFactory | None = None) -> BaseGeometry | None:
        return codec.decode(row, column, factory)

    def encode_geometry_column(self, column: str, prefix: str | None = None) -> str:
        return self._codec.encode_column_reference(column, prefix)

    def encode_geometry_envelope(self, column: str) -> str:
        return self._codec.encode_envelope_reference(column)

    def decode_geometry_envelope(self, row: Any, column: int | str) -> Envelope:
        return self._codec.decode_envelope(row, column)

    def encode_geometry_value(self, geometry: BaseGeometry | None, dimension: int | None,
                              srid: int | None) -> str:
        return self._codec.encode_literal(geometry, dimension, srid)

    @property
    def supports_geography(self) -> bool:
        return False

    def get_geometry_srid(self, cn: Any, schema: str | None, table: str, column: str) -> int:
        return self.metadata.resolve_srid(cn, schema, table, column)

    def get_geometry_dimension(self, cn: Any, schema: str | None, table: str,
                               column: str) -> int:
        return self.metadata.resolve_dimension(cn, schema, table, column)

    def post_create_table(self, cn: Any, schema: str | None, feature_type: FeatureType) -> None:
        """Creates GEOMETRY_COLUMNS registrations and spatial indexes for all geometry columns.
        """
        self.catalog.on_table_created(cn, schema, feature_type)

    def post_drop_table(self, cn: Any, schema: str | None, feature_type: FeatureType) -> None:
        self.catalog.on_table_dropped(cn, schema, feature_type)

    def get_sequence_for_column(self, cn: Any, schema: str | None, table: str,
                                column: str) -> str | None:
        return self.sequences.sequence_name_for(cn, schema, table, column)

    def get_next_sequence_value(self, cn: Any, schema: str | None, sequence: str) -> int | None:
        return self.sequences.next_value(cn, schema, sequence)

    def get_last_auto_generated_value(self, cn: Any, schema: str | None, table: str,
                                      column: str) -> int | None:
        return self.sequences.last_generated_value(cn)

    @property
    def lookup_generated_values_post_insert(self) -> bool:
        return True

    def get_optimized_bounds(self, cn: Any, schema: str | None,
                             feature_type: FeatureType) -> list[ReferencedEnvelope] | None:
        """Estimate the bounds of the default geometry with ST_EXTENT.

        Returns None when estimated extents are disabled, the feature type
        has no geometry, or the estimate failed. A table without geometries
        yields an empty list.
        """
        if not self._options.estimated_extents_enabled:
            return None

        geometry = feature_type.default_geometry
        if geometry is None:
            return None

        envelope = self.bounds.estimate(cn, feature_type.name, geometry.name, geometry.crs)
        if envelope is None:
            return None
        if envelope.is_empty:
            return []
        return [envelope]

    @property
    def is_limit_offset_supported(self) -> bool:
        return True

    def apply_limit_offset(self, sql: str, limit: int | None, offset: int | None) -> str:
        return apply_limit_offset(sql, limit, offset)

    def encode_value(self, value: Any, value_type: type | None = None) -> str:
        if isinstance(value, BaseGeometry):
            return self.encode_geometry_value(value, 2, -1)
        return self.literals.encode_value(value, value_type)

    def encode_column_name(self, prefix: str | None, name: str) -> str:
        return encode_column_name(prefix, name)

    def encode_primary_key(self, column: str) -> str:
        return f'{encode_column_name(None, column)} INTEGER PRIMARY KEY'

    def is_aggregated_sort_supported(self, function: str) -> bool:
        return (function or '').lower() == 'distinct'

    def create_filter_to_sql(self) -> FilterToSQL:
        return FilterToSQL(dialect=self, loose_bbox_enabled=self._options.loose_bbox_enabled)
