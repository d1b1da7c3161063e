"""
Fast bounds estimation from the engine's extent aggregate.
"""
import logging
from contextlib import nullcontext
from typing import Any

from kairos_dialect.cursor import select_first_row
from kairos_dialect.geometry import Envelope, GeometryCodec, ReferencedEnvelope
from kairos_dialect.sql import quote_identifier
from kairos_dialect.transaction import is_autocommit, savepoint

logger = logging.getLogger(__name__)


class BoundsEstimator:
    """Estimate the extent of a geometry column with ``ST_EXTENT``.

    The estimate is an optimization. Every failure is logged and reported
    as None so the caller can fall back to scanning the features.
    """

    def __init__(self, codec: GeometryCodec | None = None) -> None:
        self.codec = codec or GeometryCodec()

    def estimate(self, cn: Any, table: str, geometry_column: str,
                 crs: Any = None) -> ReferencedEnvelope | None:
        """Return the extent of ``geometry_column`` tagged with ``crs``.

        A savepoint guards the query whenever the connection is inside a
        transaction, so a failure does not poison the caller's transaction.

        Returns
            The envelope (empty for a table without geometries), or None
            when the estimate is unavailable
        """
        sql = (f'SELECT ST_ASBINARY(ST_EXTENT({quote_identifier(geometry_column)}))'
               f' FROM {quote_identifier(table)}')

        guard = nullcontext() if is_autocommit(cn) else savepoint(cn)
        try:
            with guard:
                row = select_first_row(cn, sql)
                if row is None or row[0] is None:
                    return ReferencedEnvelope.empty(crs=crs)
                geometry = self.codec.reader.parse(row[0])
                return ReferencedEnvelope.from_envelope(Envelope.from_geometry(geometry), crs)
        except Exception:
            logger.warning(f'Failed to use ST_EXTENT on {table}.{geometry_column}, '
                           'falling back on envelope aggregation', exc_info=True)
            return None
