"""Tests for primary key sequences."""
import logging

import pytest
from kairos_dialect.sequence import SequenceKeyProvider, is_geometry_column_name
from kairos_dialect.sequence import sequence_name


@pytest.fixture
def sequences():
    return SequenceKeyProvider()


def test_sequence_name():
    assert sequence_name('building', 'fid') == 'seq_building_fid'


@pytest.mark.parametrize(('column', 'expected'), [
    ('geom', True),
    ('the_geom', True),
    ('Shape', True),
    ('fid', False),
    ('id', False),
])
def test_geometry_column_names(column, expected):
    assert is_geometry_column_name(column) is expected


class TestLookup:

    def test_found(self, sequences, sqlite_catalog):
        sqlite_catalog.execute("INSERT INTO syssequence VALUES ('seq_roads_fid')")
        assert sequences.sequence_name_for(sqlite_catalog, None, 'roads', 'fid') == 'seq_roads_fid'

    def test_missing(self, sequences, sqlite_catalog):
        assert sequences.sequence_name_for(sqlite_catalog, None, 'roads', 'fid') is None

    def test_geometry_column_skips_database(self, sequences, recording_connection):
        cn = recording_connection()
        assert sequences.sequence_name_for(cn, None, 'roads', 'geom') is None
        assert cn.statements == []

    def test_errors_propagate(self, sequences, recording_connection):
        cn = recording_connection()
        cn.respond('syssequence', error=RuntimeError('no catalog'))
        with pytest.raises(RuntimeError):
            sequences.sequence_name_for(cn, None, 'roads', 'fid')


class TestValues:

    def test_next_value(self, sequences, recording_connection):
        cn = recording_connection()
        cn.respond('NEXTVAL', rows=[(7,)])

        assert sequences.next_value(cn, None, 'seq_roads_fid') == 7
        assert cn.statements == ['SELECT "seq_roads_fid".NEXTVAL FROM DUAL']

    def test_next_value_without_row(self, sequences, recording_connection, caplog):
        cn = recording_connection()

        with caplog.at_level(logging.WARNING, logger='kairos_dialect.sequence'):
            assert sequences.next_value(cn, None, 'seq_roads_fid') is None

        assert 'Failed to retrieve sequence' in caplog.text

    def test_last_generated_value(self, sequences, recording_connection):
        cn = recording_connection()
        cn.respond('lastval', rows=[(42,)])

        assert sequences.last_generated_value(cn) == 42
        assert cn.statements == ['SELECT lastval()']


class TestRecreate:

    def test_replaces_existing(self, sequences, recording_connection):
        cn = recording_connection()
        cn.respond('syssequence', rows=[('seq_roads_fid',)])

        assert sequences.recreate_sequence(cn, None, 'roads', 'fid') == 'seq_roads_fid'
        assert cn.statements[1:] == [
            'DROP SEQUENCE "seq_roads_fid"',
            'CREATE SEQUENCE "seq_roads_fid" START WITH 1 INCREMENT BY 1 MINVALUE 1 NOMAXVALUE',
            ]

    def test_creates_new(self, sequences, recording_connection):
        cn = recording_connection()

        sequences.recreate_sequence(cn, None, 'roads', 'fid')

        assert len(cn.statements) == 2
        assert cn.statements[1].startswith('CREATE SEQUENCE "seq_roads_fid"')

    def test_geometry_key_skipped(self, sequences, recording_connection):
        cn = recording_connection()
        assert sequences.recreate_sequence(cn, None, 'roads', 'shape') is None
        assert cn.statements == []
