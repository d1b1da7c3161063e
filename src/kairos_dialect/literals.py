"""
Inline SQL literal encoding for scalar values.
"""
import datetime
import decimal
from typing import Any

from kairos_dialect.sql import quote_literal


class ValueLiteralEncoder:
    """Render Python values as Kairos SQL literals.
    """

    def encode_binary(self, data: bytes | bytearray | memoryview) -> str:
        """Escape a byte string into a quoted bytea literal.

        Per byte:
        - ``0x00`` becomes ``\\000``
        - ``'`` becomes ``\\'``
        - ``\\`` becomes ``\\134``
        - bytes outside printable ASCII become ``\\`` plus three octal digits
        - everything else passes through

        The escaped text is then quoted as an ordinary string literal.

        >>> ValueLiteralEncoder().encode_binary(b'ab')
        "'ab'"
        """
        parts = []
        for b in bytes(data):
            if b == 0x00:
                parts.append('\\000')
            elif b == 0x27:
                parts.append("\\'")
            elif b == 0x5C:
                parts.append('\\134')
            elif b < 0x20 or b >= 0x7F:
                parts.append(f'\\{b:03o}')
            else:
                parts.append(chr(b))
        return quote_literal(''.join(parts))

    def encode_value(self, value: Any, value_type: type | None = None) -> str:
        """Render a value as a SQL literal.

        Args:
            value: Value to render
            value_type: Declared attribute type, defaults to ``type(value)``
        """
        if value is None:
            return 'NULL'

        value_type = value_type or type(value)
        if isinstance(value_type, type) and issubclass(value_type, (bytes, bytearray, memoryview)):
            return self.encode_binary(value)
        if isinstance(value, bool):
            return 'TRUE' if value else 'FALSE'
        if isinstance(value, (int, float, decimal.Decimal)):
            return str(value)
        if isinstance(value, (datetime.date, datetime.time)):
            return quote_literal(value.isoformat(sep=' ') if isinstance(value, datetime.datetime)
                                 else value.isoformat())
        return quote_literal(str(value))
