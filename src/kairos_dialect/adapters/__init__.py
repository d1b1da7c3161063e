"""
Dialect adapters package.

- type_mapping: value type <-> native type lookups (no conversion)

Value conversion in both directions is left to the driver and to the
geometry codec; this package only identifies types.
"""
from kairos_dialect.adapters.type_mapping import GeometryTypeCode
from kairos_dialect.adapters.type_mapping import SqlType, TypeMappingRegistry

__all__ = ['GeometryTypeCode', 'SqlType', 'TypeMappingRegistry']
