"""
Descriptors exchanged with the host feature-store framework.

The framework describes tables as feature types made of attributes, and
hands introspected columns over as `ColumnInfo` records. The dialect only
reads these; it never mutates them except for `ColumnInfo.type_name` in the
user-defined type hook.
"""
from dataclasses import dataclass
from typing import Any

from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True)
class Attribute:
    """A feature type attribute.

    Args:
        name: Column name
        binding: Semantic value type (a Python type or shapely geometry class)
        crs: Coordinate reference system for geometry attributes, anything
            ``pyproj.CRS.from_user_input`` accepts
        srid: Explicit native SRID hint, takes precedence over ``crs``
        dimension: Explicit coordinate dimension hint
        nullable: Whether the column allows NULL values
    """
    name: str
    binding: type
    crs: Any = None
    srid: int | None = None
    dimension: int | None = None
    nullable: bool = True

    @property
    def is_geometry(self) -> bool:
        return isinstance(self.binding, type) and issubclass(self.binding, BaseGeometry)


@dataclass(frozen=True)
class FeatureType:
    """A table as seen by the feature store.

    Args:
        name: Table name
        attributes: Attributes in column order
        primary_key: Name of the generated primary key column, if any
    """
    name: str
    attributes: tuple[Attribute, ...] = ()
    primary_key: str | None = 'fid'

    @property
    def geometry_attributes(self) -> list[Attribute]:
        return [att for att in self.attributes if att.is_geometry]

    @property
    def default_geometry(self) -> Attribute | None:
        """Return the first geometry attribute."""
        geometries = self.geometry_attributes
        return geometries[0] if geometries else None


@dataclass
class ColumnInfo:
    """Introspected column metadata, one row of the driver's column listing.
    """
    table: str
    column: str
    type_name: str | None = None
    schema: str | None = None
    data_type: int | None = None


@dataclass(frozen=True)
class GeometryColumnMetadata:
    """A GEOMETRY_COLUMNS registration.
    """
    schema: str | None
    table: str
    column: str
    srid: int = -1
    dimension: int = 2
    geometry_type: str = 'GEOMETRY'


@dataclass(frozen=True)
class FilterToSQL:
    """Settings handed to the framework's filter encoder.

    Predicate translation itself belongs to the framework; the dialect only
    supplies itself (for literal encoding) and the loose bbox flag.
    """
    dialect: Any
    loose_bbox_enabled: bool = False

    def encode_geometry(self, geometry: BaseGeometry | None, srid: int,
                        dimension: int = 2) -> str:
        """Encode a filter literal geometry through the dialect."""
        return self.dialect.encode_geometry_value(geometry, dimension, srid)
