"""
Geometry codec for the Kairos dialect.

Geometries travel between Kairos and Python in two forms:

- Reads: the SELECT list wraps geometry columns in ``ST_ASBINARY`` so the
  driver returns WKB, which `WKBReader` parses into shapely geometries.
- Writes: geometries are rendered inline as ``ST_GeomFromText('<WKT>', srid)``.

A `GeometryCodec` holds a mutable reader and is not safe for concurrent use.
Each worker creates its own codec and passes it along with its calls.
"""
from dataclasses import dataclass
from typing import Any

import shapely
from shapely.errors import ShapelyError
from shapely.geometry import LinearRing, LineString
from shapely.geometry.base import BaseGeometry

from kairos_dialect.exceptions import GeometryDecodeError
from kairos_dialect.sql import encode_column_name, quote_literal


@dataclass(frozen=True)
class GeometryFactory:
    """Post-processing applied to every decoded geometry.

    Args:
        srid: SRID stamped on created geometries, None leaves them untagged
        grid_size: Precision grid snapped to, None keeps full precision
    """
    srid: int | None = None
    grid_size: float | None = None

    def create(self, geometry: BaseGeometry) -> BaseGeometry:
        if self.grid_size:
            geometry = shapely.set_precision(geometry, self.grid_size)
        if self.srid is not None:
            geometry = shapely.set_srid(geometry, self.srid)
        return geometry


DEFAULT_FACTORY = GeometryFactory()


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned bounding box.

    The empty envelope has ``maxx < minx``.
    """
    minx: float = 0.0
    miny: float = 0.0
    maxx: float = -1.0
    maxy: float = -1.0

    @classmethod
    def empty(cls, **kwargs) -> 'Envelope':
        return cls(**kwargs)

    @classmethod
    def from_geometry(cls, geometry: BaseGeometry, **kwargs) -> 'Envelope':
        if geometry is None or geometry.is_empty:
            return cls.empty(**kwargs)
        minx, miny, maxx, maxy = geometry.bounds
        return cls(minx=minx, miny=miny, maxx=maxx, maxy=maxy, **kwargs)

    @property
    def is_empty(self) -> bool:
        return self.maxx < self.minx

    @property
    def bounds(self) -> tuple[float, float, float, float] | None:
        if self.is_empty:
            return None
        return self.minx, self.miny, self.maxx, self.maxy

    def to_geometry(self) -> BaseGeometry:
        if self.is_empty:
            return shapely.Polygon()
        return shapely.box(self.minx, self.miny, self.maxx, self.maxy)


@dataclass(frozen=True)
class ReferencedEnvelope(Envelope):
    """Envelope tagged with the coordinate reference system of its geometry column.
    """
    crs: Any = None

    @classmethod
    def from_envelope(cls, envelope: Envelope, crs: Any) -> 'ReferencedEnvelope':
        return cls(minx=envelope.minx, miny=envelope.miny,
                   maxx=envelope.maxx, maxy=envelope.maxy, crs=crs)


def _column_value(row: Any, column: int | str) -> Any:
    """Fetch a column from a tuple-like row by position or a mapping row by name."""
    value = row[column]
    if isinstance(value, (memoryview, bytearray)):
        return bytes(value)
    return value


class WKBReader:
    """Reusable WKB parser bound to a geometry factory.

    Rebinding the factory is cheap and keeps the reader instance.
    """

    def __init__(self, factory: GeometryFactory = DEFAULT_FACTORY) -> None:
        self.factory = factory

    def set_factory(self, factory: GeometryFactory) -> None:
        self.factory = factory

    def parse(self, data: bytes | str) -> BaseGeometry:
        """Parse raw WKB (bytes or hex string)."""
        if isinstance(data, (memoryview, bytearray)):
            data = bytes(data)
        try:
            geometry = shapely.from_wkb(data)
        except (ShapelyError, TypeError, ValueError) as e:
            raise GeometryDecodeError('Error decoding wkb') from e
        return self.factory.create(geometry)

    def read(self, row: Any, column: int | str) -> BaseGeometry | None:
        """Read the WKB value of a column from a result row.
        """
        value = _column_value(row, column)
        if value is None:
            return None
        return self.parse(value)


class GeometryCodec:
    """Encode and decode geometry values for Kairos.

    Examples
        codec = GeometryCodec()
        sql = f'SELECT{codec.encode_column_reference("geom", "a")} FROM "roads" "a"'
        geometry = codec.decode(row, 0, GeometryFactory(srid=4326))
        literal = codec.encode_literal(geometry, 2, 4326)
    """

    def __init__(self, factory: GeometryFactory | None = None) -> None:
        self._reader = WKBReader(factory or DEFAULT_FACTORY)

    @property
    def reader(self) -> WKBReader:
        return self._reader

    def decode(self, row: Any, column: int | str,
               factory: GeometryFactory | None = None) -> BaseGeometry | None:
        """Decode the WKB value of a column.

        Args:
            row: Result row, tuple-like or mapping
            column: Column position or name
            factory: Factory to build geometries with; the reader is rebound
                when it differs from the one last used

        Raises
            GeometryDecodeError: The value is not valid WKB
        """
        if factory is not None and factory != self._reader.factory:
            self._reader.set_factory(factory)
        return self._reader.read(row, column)

    def encode_column_reference(self, column: str, prefix: str | None = None) -> str:
        """SELECT list fragment returning a geometry column as WKB."""
        return f' ST_ASBINARY({encode_column_name(prefix, column)})'

    def encode_envelope_reference(self, column: str) -> str:
        """SELECT list fragment returning a geometry column's envelope as WKB."""
        return f' ST_ASBINARY(ST_ENVELOPE({encode_column_name(None, column)}))'

    def encode_literal(self, geometry: BaseGeometry | None, dimension: int | None,
                       srid: int | None) -> str:
        """Render a geometry as an inline SQL constructor call.

        Linear rings are written as line strings since WKT has no ring type.
        Kairos rejects literals longer than 4096 characters (ERROR 43003);
        nothing here checks or splits them.

        Args:
            geometry: Geometry to encode, None renders NULL
            dimension: Coordinate dimension to write (2 or 3)
            srid: SRID to tag the geometry with, None is written as -1
        """
        if geometry is None:
            return 'NULL'

        if isinstance(geometry, LinearRing):
            geometry = LineString(geometry.coords)

        output_dimension = 3 if dimension and dimension >= 3 else 2
        wkt = shapely.to_wkt(geometry, rounding_precision=-1, output_dimension=output_dimension)
        srid = -1 if srid is None else int(srid)
        return f'ST_GeomFromText({quote_literal(wkt)}, {srid})'

    def decode_envelope(self, row: Any, column: int | str) -> Envelope:
        """Decode an envelope column value.

        Accepts WKT text or WKB bytes. A NULL value yields the empty
        envelope rather than an error.

        Raises
            GeometryDecodeError: The value cannot be parsed
        """
        value = _column_value(row, column)
        if value is None:
            return Envelope.empty()

        try:
            if isinstance(value, bytes):
                geometry = shapely.from_wkb(value)
            else:
                geometry = shapely.from_wkt(value)
        except (ShapelyError, TypeError, ValueError) as e:
            raise GeometryDecodeError('Error occurred parsing the bounds WKT') from e
        return Envelope.from_geometry(geometry)
