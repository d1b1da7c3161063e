import pathlib
import site

import pytest
from kairos_dialect import DialectOptions, KairosDialect

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture
def dialect():
    """Kairos dialect with default options."""
    return KairosDialect(DialectOptions())


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
