import json
import logging

import pytest
from kairos_dialect.exceptions import ValidationError
from kairos_dialect.options import DialectOptions, load_options


def test_defaults():
    options = DialectOptions()

    assert options.loose_bbox_enabled is False
    assert options.estimated_extents_enabled is True
    assert options.default_varchar_size == 255
    assert options.drop_sequence_on_drop_table is True


def test_validation():
    with pytest.raises(ValidationError):
        DialectOptions(default_varchar_size=0)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValidationError, match='Unknown dialect options'):
        DialectOptions.from_dict({'loose_bbox': True})


def test_load_explicit_file(tmp_path):
    config = tmp_path / 'dialect.json'
    config.write_text(json.dumps({'loose_bbox_enabled': True, 'default_varchar_size': 64}))

    options = load_options(config)

    assert options.loose_bbox_enabled is True
    assert options.default_varchar_size == 64
    assert options.estimated_extents_enabled is True


def test_load_bad_file_falls_back(tmp_path, caplog):
    config = tmp_path / 'dialect.json'
    config.write_text('{not json')

    with caplog.at_level(logging.WARNING, logger='kairos_dialect.options'):
        assert load_options(config) == DialectOptions()

    assert 'Failed to load dialect options' in caplog.text


def test_load_default_locations(tmp_path, monkeypatch):
    missing = tmp_path / 'missing.json'
    present = tmp_path / 'present.json'
    present.write_text(json.dumps({'estimated_extents_enabled': False}))
    monkeypatch.setattr('kairos_dialect.options.DEFAULT_LOCATIONS', (str(missing), str(present)))

    assert load_options().estimated_extents_enabled is False


def test_no_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr('kairos_dialect.options.DEFAULT_LOCATIONS', (str(tmp_path / 'none.json'),))
    assert load_options() == DialectOptions()
