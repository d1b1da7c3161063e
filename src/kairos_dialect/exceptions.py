"""
Dialect-specific exception classes.
"""


class DialectError(Exception):
    """Base class for all dialect module errors.
    """


class GeometryDecodeError(DialectError):
    """Error parsing a WKB or WKT value read from the database.

    Recoverable: the original parse failure is chained as ``__cause__``.
    """


class CatalogSyncError(DialectError):
    """Error registering or unregistering a table in the spatial catalog.
    """


class ValidationError(DialectError):
    """Error in input validation.
    """
