"""Tests for inline SQL literal encoding."""
import datetime
import decimal

import pytest
from kairos_dialect.literals import ValueLiteralEncoder
from shapely.geometry import Point


@pytest.fixture
def encoder():
    return ValueLiteralEncoder()


class TestBinary:

    def test_escape_sequence(self, encoder):
        """NUL, quote, backslash and control bytes are escaped in order"""
        assert encoder.encode_binary(bytes([0x00, 0x27, 0x5C, 0x01])) == "'\\000\\''\\134\\001'"

    def test_printable_passthrough(self, encoder):
        assert encoder.encode_binary(b'abc XYZ 09') == "'abc XYZ 09'"

    def test_high_and_delete_bytes(self, encoder):
        assert encoder.encode_binary(b'\x7f\xff\x80') == "'\\177\\377\\200'"

    def test_empty(self, encoder):
        assert encoder.encode_binary(b'') == "''"

    def test_bytearray_and_memoryview(self, encoder):
        assert encoder.encode_binary(bytearray(b'\n')) == "'\\012'"
        assert encoder.encode_binary(memoryview(b'a\x00')) == "'a\\000'"


class TestValues:

    def test_null(self, encoder):
        assert encoder.encode_value(None) == 'NULL'
        assert encoder.encode_value(None, bytes) == 'NULL'

    def test_booleans(self, encoder):
        assert encoder.encode_value(True) == 'TRUE'
        assert encoder.encode_value(False) == 'FALSE'

    def test_numbers(self, encoder):
        assert encoder.encode_value(42) == '42'
        assert encoder.encode_value(2.5) == '2.5'
        assert encoder.encode_value(decimal.Decimal('1.50')) == '1.50'

    def test_strings_are_quoted(self, encoder):
        assert encoder.encode_value("O'Brien") == "'O''Brien'"

    def test_temporal(self, encoder):
        assert encoder.encode_value(datetime.date(2024, 1, 2)) == "'2024-01-02'"
        assert encoder.encode_value(datetime.datetime(2024, 1, 2, 3, 4, 5)) == "'2024-01-02 03:04:05'"
        assert encoder.encode_value(datetime.time(13, 30)) == "'13:30:00'"

    def test_declared_binary_type(self, encoder):
        assert encoder.encode_value(b'\x00', bytes) == "'\\000'"


def test_dialect_encodes_geometry_values(dialect):
    assert dialect.encode_value(Point(1, 2)) == "ST_GeomFromText('POINT (1 2)', -1)"
    assert dialect.encode_value('x') == "'x'"
