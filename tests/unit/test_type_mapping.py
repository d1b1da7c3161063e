"""Tests for the value type / native type lookup tables."""
import datetime
import decimal

import pytest
from kairos_dialect.adapters.type_mapping import GeometryTypeCode, SqlType
from kairos_dialect.adapters.type_mapping import TypeMappingRegistry
from kairos_dialect.metadata import MetadataResolver
from kairos_dialect.schema import ColumnInfo
from shapely.geometry import GeometryCollection, LinearRing, LineString
from shapely.geometry import MultiLineString, MultiPoint, MultiPolygon, Point
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry


@pytest.fixture
def registry():
    return TypeMappingRegistry()


class TestValueTypes:

    @pytest.mark.parametrize(('value_type', 'code'), [
        (Point, GeometryTypeCode.POINT),
        (LineString, GeometryTypeCode.LINESTRING),
        (Polygon, GeometryTypeCode.POLYGON),
        (MultiPoint, GeometryTypeCode.MULTIPOINT),
        (MultiLineString, GeometryTypeCode.MULTILINESTRING),
        (MultiPolygon, GeometryTypeCode.MULTIPOLYGON),
        (GeometryCollection, GeometryTypeCode.GEOMCOLLECTION),
    ])
    def test_geometry_subtypes(self, registry, value_type, code):
        assert registry.map_value_type(value_type) == code

    def test_geometry_codes_are_distinct(self):
        codes = [int(code) for code in GeometryTypeCode]
        assert codes == list(range(4000, 4007))

    def test_subclass_binds_like_parent(self, registry):
        """Linear rings bind as line strings"""
        assert registry.map_value_type(LinearRing) == GeometryTypeCode.LINESTRING

    def test_scalars(self, registry):
        assert registry.map_value_type(str) == SqlType.VARCHAR
        assert registry.map_value_type(bool) == SqlType.BOOLEAN
        assert registry.map_value_type(int) == SqlType.INTEGER
        assert registry.map_value_type(float) == SqlType.DOUBLE
        assert registry.map_value_type(decimal.Decimal) == SqlType.NUMERIC
        assert registry.map_value_type(datetime.datetime) == SqlType.TIMESTAMP
        assert registry.map_value_type(datetime.date) == SqlType.DATE
        assert registry.map_value_type(bytes) == SqlType.BLOB

    def test_unmapped(self, registry):
        assert registry.map_value_type(dict) is None

    def test_tables_are_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.value_type_codes[dict] = SqlType.OTHER
        with pytest.raises(TypeError):
            registry.native_name_types['JSON'] = dict


class TestNativeNames:

    @pytest.mark.parametrize(('name', 'expected'), [
        ('POINT', Point),
        ('pointm', Point),
        ('POLYGONZ', Polygon),
        ('LineStringZM', LineString),
        ('ST_MULTIPOLYGON', MultiPolygon),
        ('GEOMCOLLECTION', GeometryCollection),
        ('GEOMETRYCOLLECTION', GeometryCollection),
        ('geometry', BaseGeometry),
        ('text', str),
        ('BYTEA', bytes),
    ])
    def test_lookup(self, registry, name, expected):
        assert registry.map_native_name(name) is expected

    def test_suffix_only_stripped_for_geometry(self, registry):
        assert registry.map_native_name('NUMBERZ') is None

    def test_unknown(self, registry):
        assert registry.map_native_name('HSTORE') is None
        assert registry.map_native_name('') is None
        assert registry.map_native_name(None) is None

    def test_canonical_names(self, registry):
        assert registry.native_type_name(GeometryCollection) == 'GEOMCOLLECTION'
        assert registry.native_type_name(Polygon) == 'POLYGON'
        assert registry.native_type_name(BaseGeometry) == 'GEOMETRY'
        assert registry.native_type_name(bytes) == 'BYTEA'


class TestDdlNames:

    @pytest.mark.parametrize(('code', 'name'), [
        (GeometryTypeCode.POINT, 'ST_POINT'),
        (GeometryTypeCode.LINESTRING, 'ST_MULTILINESTRING'),
        (GeometryTypeCode.POLYGON, 'ST_MULTIPOLYGON'),
        (GeometryTypeCode.MULTIPOINT, 'ST_MULTIPOINT'),
        (GeometryTypeCode.MULTILINESTRING, 'ST_MULTILINESTRING'),
        (GeometryTypeCode.MULTIPOLYGON, 'ST_MULTIPOLYGON'),
        (GeometryTypeCode.GEOMCOLLECTION, 'ST_GEOMCOLLECTION'),
        (None, 'ST_GEOMETRY'),
        (SqlType.OTHER, 'ST_GEOMETRY'),
    ])
    def test_geometry_type_name(self, registry, code, name):
        assert registry.geometry_type_name(code) == name

    def test_sql_type_name_overrides(self, registry):
        assert registry.sql_type_name(SqlType.BOOLEAN) == 'BOOL'
        assert registry.sql_type_name(SqlType.NUMERIC) == 'NUMBER'
        assert registry.sql_type_name(SqlType.DATE) is None


class TestColumnResolution:

    def test_concrete_geometry_skips_catalog(self, registry, mocker):
        resolver = mocker.Mock(spec=MetadataResolver)
        column = ColumnInfo(table='roads', column='geom', type_name='ST_POLYGON')

        assert registry.resolve_column_value_type(column, resolver, None) is Polygon
        resolver.resolve_native_subtype.assert_not_called()

    def test_non_geometry_defers_to_framework(self, registry, mocker):
        resolver = mocker.Mock(spec=MetadataResolver)
        column = ColumnInfo(table='roads', column='name', type_name='TEXT')

        assert registry.resolve_column_value_type(column, resolver, None) is None

    def test_generic_narrowed_from_catalog(self, registry, roads_table):
        column = ColumnInfo(table='roads', column='geom', type_name='GEOMETRY', schema='public')

        value_type = registry.resolve_column_value_type(column, MetadataResolver(), roads_table)

        assert value_type is LineString

    def test_generic_narrowed_to_point(self, registry, sqlite_catalog):
        sqlite_catalog.execute(
            "INSERT INTO GEOMETRY_COLUMNS VALUES ('', 'public', 'sites', 'location', 2, 4326, 'POINT')")
        column = ColumnInfo(table='sites', column='location', type_name='GEOMETRY', schema='public')

        value_type = registry.resolve_column_value_type(column, MetadataResolver(), sqlite_catalog)

        assert value_type is Point

    def test_generic_without_registration(self, registry, sqlite_catalog):
        column = ColumnInfo(table='lakes', column='geom', type_name='GEOMETRY')

        value_type = registry.resolve_column_value_type(column, MetadataResolver(), sqlite_catalog)

        assert value_type is BaseGeometry

    def test_generic_with_unknown_subtype(self, registry, mocker):
        resolver = mocker.Mock(spec=MetadataResolver)
        resolver.resolve_native_subtype.return_value = 'CIRCULARSTRING'
        column = ColumnInfo(table='roads', column='geom', type_name='st_geometry')

        assert registry.resolve_column_value_type(column, resolver, None) is BaseGeometry
