"""
Spatial catalog synchronization on table create and drop.

Kairos keeps spatial metadata outside the data tables:

- GEOMETRY_COLUMNS: one row per geometry column (SRID, dimension, subtype)
- an RSTREE spatial index per geometry column
- a sequence feeding the generated primary key

Registration after CREATE TABLE runs as one transaction and commits once,
after every geometry column is registered. Any failure rolls the whole
registration back and is raised as `CatalogSyncError`. Rows are written
delete-then-insert so a retry after a failed run finds no duplicates.
"""
import logging
from typing import Any

import pyproj

from kairos_dialect.adapters.type_mapping import TypeMappingRegistry
from kairos_dialect.cursor import execute
from kairos_dialect.exceptions import CatalogSyncError
from kairos_dialect.metadata import DEFAULT_DIMENSION, DEFAULT_SRID, GEOMETRY_COLUMNS
from kairos_dialect.metadata import geometry_columns_filter
from kairos_dialect.schema import Attribute, FeatureType, GeometryColumnMetadata
from kairos_dialect.sequence import SequenceKeyProvider
from kairos_dialect.sql import quote_identifier, quote_literal
from kairos_dialect.transaction import Transaction

logger = logging.getLogger(__name__)


def spatial_index_name(table: str, column: str) -> str:
    """Return the deterministic spatial index name for a geometry column.

    >>> spatial_index_name('roads', 'geom')
    'spatial_roads_geom'
    """
    return f'spatial_{table}_{column}'


def lookup_epsg_code(crs: Any) -> int | None:
    """Return the EPSG code of a coordinate reference system, or None.

    Accepts a ``pyproj.CRS`` or anything ``pyproj.CRS.from_user_input``
    understands (``'EPSG:4326'``, WKT, PROJ strings, EPSG integers).
    """
    if crs is None:
        return None
    try:
        return pyproj.CRS.from_user_input(crs).to_epsg()
    except Exception:
        logger.debug(f'Error looking up the epsg code of {crs!r} for metadata insertion, '
                     'assuming -1', exc_info=True)
        return None


class SpatialCatalogSynchronizer:
    """Keep GEOMETRY_COLUMNS, spatial indexes and key sequences in step with tables.
    """

    def __init__(self, registry: TypeMappingRegistry,
                 sequences: SequenceKeyProvider | None = None,
                 drop_sequence_on_drop_table: bool = True) -> None:
        self.registry = registry
        self.sequences = sequences or SequenceKeyProvider()
        self.drop_sequence_on_drop_table = drop_sequence_on_drop_table

    def resolve_srid(self, attribute: Attribute) -> int:
        """SRID to register: explicit hint, else the CRS EPSG code, else -1.
        """
        if attribute.srid is not None:
            return int(attribute.srid)
        epsg = lookup_epsg_code(attribute.crs)
        return DEFAULT_SRID if epsg is None else epsg

    def geometry_metadata(self, schema: str | None, table: str,
                          attribute: Attribute) -> GeometryColumnMetadata:
        """Build the GEOMETRY_COLUMNS registration for a geometry attribute.
        """
        dimension = attribute.dimension if attribute.dimension is not None else DEFAULT_DIMENSION
        geometry_type = self.registry.native_type_name(attribute.binding) or 'GEOMETRY'
        return GeometryColumnMetadata(
            schema=schema,
            table=table,
            column=attribute.name,
            srid=self.resolve_srid(attribute),
            dimension=int(dimension),
            geometry_type=geometry_type,
            )

    def register_geometry_column(self, cn: Any, metadata: GeometryColumnMetadata) -> None:
        """Replace the GEOMETRY_COLUMNS row of a column.

        Any leftover row from an earlier failed run is removed first.
        """
        where = geometry_columns_filter(metadata.schema, metadata.table, metadata.column,
                                        exact=True)
        execute(cn, f"DELETE FROM {GEOMETRY_COLUMNS} WHERE F_TABLE_CATALOG = '' AND {where}")

        values = ', '.join([
            quote_literal(''),
            quote_literal(metadata.schema),
            quote_literal(metadata.table),
            quote_literal(metadata.column),
            str(int(metadata.dimension)),
            str(int(metadata.srid)),
            quote_literal(metadata.geometry_type),
            ])
        execute(cn, f'INSERT INTO {GEOMETRY_COLUMNS} '
                    '(F_TABLE_CATALOG, F_TABLE_SCHEMA, F_TABLE_NAME, F_GEOMETRY_COLUMN, '
                    'COORD_DIMENSION, SRID, F_GEOMETRY_TYPE) '
                    f'VALUES ({values})')

    def create_spatial_index(self, cn: Any, table: str, column: str) -> str:
        """Create the RSTREE index of a geometry column and return its name.
        """
        name = spatial_index_name(table, column)
        execute(cn, f'CREATE RSTREE INDEX {quote_identifier(name)} '
                    f'ON {quote_identifier(table)} ({quote_identifier(column)})')
        return name

    def on_table_created(self, cn: Any, schema: str | None,
                         feature_type: FeatureType) -> list[GeometryColumnMetadata]:
        """Register a freshly created table in the spatial catalog.

        For each geometry attribute, in attribute order, writes the
        GEOMETRY_COLUMNS row and creates the spatial index. Then recreates
        the primary key sequence. Commits once at the end.

        Returns
            The registrations written, in attribute order

        Raises
            CatalogSyncError: Any statement failed; nothing was committed
        """
        table = feature_type.name
        registered = []
        try:
            with Transaction(cn):
                for attribute in feature_type.geometry_attributes:
                    metadata = self.geometry_metadata(schema, table, attribute)
                    self.register_geometry_column(cn, metadata)
                    self.create_spatial_index(cn, table, attribute.name)
                    registered.append(metadata)

                if feature_type.primary_key:
                    self.sequences.recreate_sequence(cn, schema, table, feature_type.primary_key)
        except Exception as e:
            raise CatalogSyncError(f'Failed to register {table} in the spatial catalog') from e

        logger.debug(f'Registered {len(registered)} geometry columns for {table=}')
        return registered

    def on_table_dropped(self, cn: Any, schema: str | None, feature_type: FeatureType) -> None:
        """Remove a dropped table from the spatial catalog.

        Deletes all GEOMETRY_COLUMNS rows of the table and drops the primary
        key sequence when ``drop_sequence_on_drop_table`` is set. Spatial
        indexes belong to the table and go with it.

        Raises
            CatalogSyncError: Any statement failed; nothing was committed
        """
        table = feature_type.name
        # rows registered without a schema carry the empty schema
        clauses = [f'F_TABLE_NAME = {quote_literal(table)}',
                   f'F_TABLE_SCHEMA = {quote_literal(schema)}']

        try:
            with Transaction(cn):
                execute(cn, f"DELETE FROM {GEOMETRY_COLUMNS} WHERE {' AND '.join(clauses)}")

                if self.drop_sequence_on_drop_table and feature_type.primary_key:
                    name = self.sequences.sequence_name_for(cn, schema, table,
                                                            feature_type.primary_key)
                    if name is not None:
                        self.sequences.drop_sequence(cn, name)
        except Exception as e:
            raise CatalogSyncError(f'Failed to unregister {table} from the spatial catalog') from e
