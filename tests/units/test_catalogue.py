import threading

import pytest

from mensura.core.errors import UnitParseError, UnknownUnitError
from mensura.core.rational import Rational
from mensura.core.unit import Unit
from mensura.units.catalogue import UnitCatalogue


@pytest.fixture
def small():
    m = Unit.primitive("Length", "m")
    s = Unit.primitive("Time", "s")
    cat = UnitCatalogue(
        {"m": m, "meter": m.renamed("meter"), "s": s, "inch": m.scaled("0.0254").renamed("inch")},
        {"kilo": 1000, "k": 1000, "c": Rational(1, 100), "m": Rational(1, 1000)},
    )
    return cat, m, s


# --------------------------
# Direct lookup
# --------------------------

def test_direct_lookup_returns_defined_unit(small):
    cat, m, _ = small
    assert cat.lookup("m") is m
    assert "meter" in cat
    assert len(cat) == 4
    assert cat.names() == ["inch", "m", "meter", "s"]
    assert set(cat) == {"m", "meter", "s", "inch"}

def test_unknown_name_raises(small):
    cat, _, _ = small
    with pytest.raises(UnknownUnitError) as exc:
        cat.lookup("furlong")
    assert exc.value.name == "furlong"
    assert "furlong" in str(exc.value)
    assert not cat.has("furlong")
    assert "furlong" not in cat

def test_units_and_prefixes_are_read_only(small):
    cat, m, _ = small
    with pytest.raises(TypeError):
        cat.units["x"] = m  # type: ignore[index]
    with pytest.raises(TypeError):
        cat.prefixes["x"] = Rational(2)  # type: ignore[index]
    assert cat.prefix("kilo") == 1000
    with pytest.raises(UnknownUnitError):
        cat.prefix("mega")


# --------------------------
# Prefix composition
# --------------------------

def test_prefixed_lookup_scales_base(small):
    cat, m, _ = small
    km = cat.lookup("kilometer")
    assert km.compatible(m)
    assert km.scale == 1000
    assert km.name == "kilometer"

def test_short_prefixes(small):
    cat, m, s = small
    assert cat.lookup("km").scale == 1000
    assert cat.lookup("cm").scale == Rational(1, 100)
    assert cat.lookup("ms").compatible(s)
    assert cat.lookup("ms").scale == Rational(1, 1000)

def test_direct_definition_wins_over_prefix(small):
    cat, m, _ = small
    # "m" is both a prefix (milli) and a unit
    assert cat.lookup("m") is m

def test_prefixed_lookup_is_idempotent(small):
    cat, _, _ = small
    a = cat.lookup("kilometer")
    b = cat.lookup("kilometer")
    assert a is b
    assert a.dim == b.dim and a.scale == b.scale

def test_short_prefix_before_longer_unit_name(small):
    cat, m, _ = small
    assert cat.lookup("kinch").scale == Rational(1000) * Rational(254, 10000)

def test_stacked_prefixes_are_rejected(small):
    cat, _, _ = small
    with pytest.raises(UnknownUnitError):
        cat.lookup("kkm")
    with pytest.raises(UnknownUnitError):
        cat.lookup("kilokilometer")

def test_bare_prefix_is_not_a_unit(small):
    cat, _, _ = small
    with pytest.raises(UnknownUnitError):
        cat.lookup("kilo")

def test_composed_units_are_not_listed(small):
    cat, _, _ = small
    cat.lookup("kilometer")
    assert "kilometer" not in cat.units
    assert len(cat) == 4

def test_concurrent_lookups_agree(small):
    cat, _, _ = small
    results = []

    def worker():
        results.append(cat.lookup("kiloinch"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len({id(u) for u in results}) == 1


# --------------------------
# Plurals
# --------------------------

def test_plural_lookup(small):
    cat, m, _ = small
    assert cat.lookup("meters") is cat.units["meter"]
    assert cat.lookup("kilometers").scale == 1000
    # only a trailing "s" is stripped
    with pytest.raises(UnknownUnitError):
        cat.lookup("inches")

def test_plurals_can_be_disabled():
    m = Unit.primitive("Length", "m")
    cat = UnitCatalogue({"meter": m}, plurals=False)
    with pytest.raises(UnknownUnitError):
        cat.lookup("meters")

@pytest.mark.parametrize("plural,singular", [("mins", "min"), ("hrs", "hr"), ("days", "day")])
def test_plural_of_whole_name_wins_over_prefix(catalogue, plural, singular):
    # "mins" is minutes, not milli-inches
    assert catalogue.lookup(plural) is catalogue.lookup(singular)

def test_prefix_with_defined_unit_wins_over_plural(catalogue):
    ms = catalogue.lookup("ms")
    assert ms.scale == Rational(1, 1000)
    assert ms.compatible(catalogue.lookup("s"))
    assert catalogue.lookup("kilometers").scale == 1000


# --------------------------
# Expressions
# --------------------------

def test_unit_expression(small):
    cat, m, s = small
    u = cat.unit("kilometer / s")
    assert u == (m / s).scaled(1000)
    assert u.name == "kilometer/s"

def test_unit_expression_with_number_is_renamed(small):
    cat, m, _ = small
    u = cat.unit("(12 inch)")
    assert u.scale == Rational(3048, 10000)
    assert u.name == "(12 inch)"

def test_unit_rejects_bare_number(small):
    cat, _, _ = small
    with pytest.raises(UnitParseError):
        cat.unit("42")

def test_prefix_usable_as_number(small):
    cat, m, _ = small
    assert cat.evaluate("kilo") == 1000
    assert cat.unit("kilo m") == m.scaled(1000)

def test_measure(small):
    cat, _, _ = small
    q = cat.measure(2, "inch")
    assert q.convert_to(cat.lookup("cm")).value == Rational(508, 100)

def test_quantity_names(small):
    cat, m, s = small
    speed = m / s
    cat._name_quantity(speed.dim, "velocity")
    cat._name_quantity(speed.dim, "speed")
    assert cat.quantity_name(cat.unit("kilometer/s")) == "velocity"
    assert cat.quantity_name(speed.dim) == "velocity"
    assert cat.quantity_name(m) is None

def test_redefinition_replaces_and_invalidates_cache(small):
    cat, m, _ = small
    assert cat.lookup("kiloinch").scale == Rational(254, 10)
    cat._define(["inch"], m.scaled("0.025"))
    assert cat.lookup("kiloinch").scale == 25

def test_repr(small):
    cat, _, _ = small
    assert repr(cat) == "UnitCatalogue(4 units, 4 prefixes)"
