"""
Dialect options and their configuration file.
"""
import dataclasses
import json
import logging
import pathlib
from dataclasses import dataclass
from typing import Any, Self

from kairos_dialect.exceptions import ValidationError

logger = logging.getLogger(__name__)

__all__ = ['DialectOptions', 'load_options', 'DEFAULT_LOCATIONS']

DEFAULT_LOCATIONS = (
    '~/.config/kairos_dialect/dialect.json',
    '/etc/kairos_dialect/dialect.json',
    'kairos_dialect.json',  # Current directory
    )


@dataclass(frozen=True)
class DialectOptions:
    """Options

    - loose_bbox_enabled: Let the filter encoder use envelope-only bbox tests
    - estimated_extents_enabled: Answer bounds requests from ST_EXTENT
    - default_varchar_size: Length used for VARCHAR columns without one
    - drop_sequence_on_drop_table: Drop the primary key sequence with the table
    """
    loose_bbox_enabled: bool = False
    estimated_extents_enabled: bool = True
    default_varchar_size: int = 255
    drop_sequence_on_drop_table: bool = True

    def __post_init__(self):
        if self.default_varchar_size <= 0:
            raise ValidationError('default_varchar_size must be positive')

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> Self:
        """Build options from a mapping, rejecting unknown keys.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValidationError(f'Unknown dialect options: {unknown}. Available: {sorted(known)}')
        return cls(**values)


def load_options(config_file: str | pathlib.Path | None = None) -> DialectOptions:
    """Load dialect options from a JSON file.

    Without an explicit file the default locations are tried in order. A
    missing or unreadable file yields the default options.
    """
    if config_file is not None:
        candidates = [pathlib.Path(config_file)]
    else:
        candidates = [pathlib.Path(location).expanduser() for location in DEFAULT_LOCATIONS]

    for location in candidates:
        if not location.exists():
            continue
        try:
            with location.open() as f:
                options = DialectOptions.from_dict(json.load(f))
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning(f'Failed to load dialect options from {location}: {e}')
            return DialectOptions()
        logger.info(f'Loaded dialect options from {location}')
        return options

    return DialectOptions()
