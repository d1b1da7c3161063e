"""
Spatial SQL dialect adapter for the Kairos database.

Plugs into a generic feature-store framework and supplies:
- type mapping between Python/shapely types and Kairos column types
- geometry encoding (WKT literals) and decoding (WKB reads)
- GEOMETRY_COLUMNS lookups and synchronization on table create and drop
- sequence based primary keys and ST_EXTENT bounds estimation

Dialects are obtained by name:
    dialect = kd.get_dialect('kairos', kd.load_options())
"""
__version__ = '0.1.0'

from kairos_dialect.exceptions import CatalogSyncError, DialectError
from kairos_dialect.exceptions import GeometryDecodeError, ValidationError
from kairos_dialect.geometry import Envelope, GeometryCodec, GeometryFactory
from kairos_dialect.geometry import ReferencedEnvelope
from kairos_dialect.options import DialectOptions, load_options
from kairos_dialect.schema import Attribute, ColumnInfo, FeatureType, FilterToSQL
from kairos_dialect.strategy import KairosDialect, SpatialDialect
from kairos_dialect.strategy import get_available_dialects, get_dialect
from kairos_dialect.strategy import is_supported_dialect, register_dialect
from kairos_dialect.transaction import Transaction as transaction

__all__ = [
    'Attribute',
    'CatalogSyncError',
    'ColumnInfo',
    'DialectError',
    'DialectOptions',
    'Envelope',
    'FeatureType',
    'FilterToSQL',
    'GeometryCodec',
    'GeometryDecodeError',
    'GeometryFactory',
    'KairosDialect',
    'ReferencedEnvelope',
    'SpatialDialect',
    'ValidationError',
    'get_available_dialects',
    'get_dialect',
    'is_supported_dialect',
    'load_options',
    'register_dialect',
    'transaction',
    ]
