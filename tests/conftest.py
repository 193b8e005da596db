# tests/conftest.py
from pathlib import Path

import pytest

from mensura.core.unit import Unit
from mensura.units.catalogue import UnitCatalogue

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(scope="session")
def units_text():
    return (DATA_DIR / "units_sample.txt").read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def catalogue(units_text):
    ok, cat = UnitCatalogue.try_parse(units_text)
    assert ok and cat is not None
    return cat


@pytest.fixture
def length_units():
    """m, cm and inch built directly with unit algebra."""
    m = Unit.primitive("Length", "m")
    cm = (1 / 100) * m
    inch = 2.54 * cm
    return m, cm, inch


@pytest.fixture
def assert_same():
    def _assert_same(a, b):
        # same value, same dimension vector, same scale
        assert a.value == b.value
        assert tuple(a.unit.dim) == tuple(b.unit.dim)
        assert a.unit.scale == b.unit.scale
    return _assert_same
