"""Tests for ST_EXTENT bounds estimation."""
import logging

import pytest
import shapely
from kairos_dialect.bounds import BoundsEstimator


@pytest.fixture
def estimator():
    return BoundsEstimator()


def test_extent_of_table(estimator, roads_table):
    envelope = estimator.estimate(roads_table, 'roads', 'geom', 'EPSG:4326')

    assert envelope.bounds == (-2, 0, 10, 20)
    assert envelope.crs == 'EPSG:4326'
    assert not roads_table.in_transaction


def test_table_without_geometries(estimator, sqlite_catalog):
    sqlite_catalog.execute('CREATE TABLE lakes (geom BLOB)')

    envelope = estimator.estimate(sqlite_catalog, 'lakes', 'geom', 4326)

    assert envelope.is_empty
    assert envelope.crs == 4326


def test_failure_is_unavailable(estimator, sqlite_catalog, caplog):
    """A failed estimate leaves no outstanding savepoint behind"""
    with caplog.at_level(logging.WARNING, logger='kairos_dialect.bounds'):
        assert estimator.estimate(sqlite_catalog, 'missing', 'geom') is None

    assert 'Failed to use ST_EXTENT' in caplog.text
    assert not sqlite_catalog.in_transaction


def test_failure_keeps_caller_transaction(estimator, roads_table):
    roads_table.execute('INSERT INTO roads (geom) VALUES (?)',
                        (shapely.to_wkb(shapely.Point(100, 100)),))
    assert roads_table.in_transaction

    assert estimator.estimate(roads_table, 'missing', 'geom') is None

    assert roads_table.in_transaction
    roads_table.commit()
    assert roads_table.execute('SELECT count(*) FROM roads').fetchone() == (3,)


def test_savepoint_statements(estimator, recording_connection):
    cn = recording_connection()
    cn.respond('ST_EXTENT', error=RuntimeError('no extent'))

    assert estimator.estimate(cn, 'roads', 'geom') is None

    assert cn.statements[0].startswith('SAVEPOINT "sp_')
    assert cn.statements[1] == 'SELECT ST_ASBINARY(ST_EXTENT("geom")) FROM "roads"'
    assert cn.statements[2].startswith('ROLLBACK TO SAVEPOINT "sp_')
    assert cn.statements[3].startswith('RELEASE SAVEPOINT "sp_')
    assert len(cn.statements) == 4


def test_autocommit_skips_savepoint(estimator, recording_connection):
    cn = recording_connection(autocommit=True)
    cn.respond('ST_EXTENT', rows=[(None,)])

    envelope = estimator.estimate(cn, 'roads', 'geom')

    assert envelope.is_empty
    assert cn.statements == ['SELECT ST_ASBINARY(ST_EXTENT("geom")) FROM "roads"']
