"""
Dialect factory for spatial database engines.
"""
from kairos_dialect.options import DialectOptions
from kairos_dialect.strategy.base import _DIALECT_REGISTRY
from kairos_dialect.strategy.base import SpatialDialect as SpatialDialect
from kairos_dialect.strategy.base import register_dialect as register_dialect
from kairos_dialect.strategy.kairos import KairosDialect as KairosDialect


def _validate_dialect(name: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if name not in _DIALECT_REGISTRY:
        available = list(_DIALECT_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {name}. Available: {available}')


def get_dialect(name: str, options: DialectOptions | None = None) -> SpatialDialect:
    """Return a new dialect instance for a dialect name.

    Each call builds a fresh instance; callers own it and pass it along.
    """
    _validate_dialect(name)
    return _DIALECT_REGISTRY[name](options)


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_DIALECT_REGISTRY.keys())


def is_supported_dialect(name: str) -> bool:
    """Check if a dialect is supported."""
    return name in _DIALECT_REGISTRY


def get_dialect_class(name: str) -> type[SpatialDialect]:
    """Get the dialect class for a name without instantiating."""
    _validate_dialect(name)
    return _DIALECT_REGISTRY[name]
