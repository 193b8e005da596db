import pytest

from mensura.core.errors import UnitParseError, UnknownUnitError
from mensura.core.measurement import Measurement
from mensura.core.rational import Rational
from mensura.core.unit import Unit
from mensura.units.expression import (
    _UnitExprParser,
    compile_expr,
    evaluate,
    to_number,
    to_unit,
    tokenize,
)


@pytest.fixture
def resolver():
    m = Unit.primitive("Length", "m")
    s = Unit.primitive("Time", "s")
    kg = Unit.primitive("Mass", "kg")
    table = {"m": m, "s": s, "kg": kg, "cm": m.scaled(Rational(1, 100)).renamed("cm")}
    prefixes = {"kilo": Rational(1000)}

    def resolve(name):
        if name in table:
            return table[name]
        if name in prefixes:
            return prefixes[name]
        raise UnknownUnitError(name)

    return resolve, table


# --------------------------
# Tokenizing
# --------------------------

def test_tokenize_kinds():
    toks = tokenize("2.54 cm**-2")
    assert [(k, t) for k, t, _ in toks] == [
        ("num", "2.54"), ("name", "cm"), ("op", "**"), ("op", "-"), ("num", "2"),
    ]

def test_tokenize_exact_exponent_literal():
    assert tokenize("6.02214076ee23")[0][:2] == ("num", "6.02214076ee23")

def test_tokenize_unicode_names():
    assert tokenize("Å")[0][:2] == ("name", "Å")

def test_tokenize_rejects_stray_characters():
    with pytest.raises(UnitParseError):
        tokenize("m $ s")


# --------------------------
# Parsing-only unit tests
# --------------------------

def test_parse_simple_name():
    plan = _UnitExprParser("m").parse()
    assert plan == ("name", "m")

def test_parse_juxtaposition_multiplies():
    plan = _UnitExprParser("299792458 m/s").parse()
    assert plan[0] == "div"
    assert plan[1] == ("mul", ("num", Rational(299792458)), ("name", "m"))

def test_parse_power_binds_tighter_than_mul():
    plan = _UnitExprParser("kg m^2").parse()
    assert plan == ("mul", ("name", "kg"), ("pow", ("name", "m"), ("num", Rational(2))))

def test_parse_caret_and_double_star_are_synonyms():
    assert _UnitExprParser("s^-2").parse() == _UnitExprParser("s**-2").parse()

def test_parse_power_is_right_associative():
    plan = _UnitExprParser("2^3^2").parse()
    assert plan == ("pow", ("num", Rational(2)), ("pow", ("num", Rational(3)), ("num", Rational(2))))

def test_parse_unary_minus():
    assert _UnitExprParser("-3 m").parse()[1] == ("neg", ("num", Rational(3)))

@pytest.mark.parametrize("text", ["", "   ", "(m", "m)", "m^", "* m", "m / ", "m + s"])
def test_parse_errors(text):
    with pytest.raises(UnitParseError):
        _UnitExprParser(text).parse()

def test_compile_is_cached():
    assert compile_expr("kg m / s^2") is compile_expr("kg m / s^2")


# --------------------------
# Evaluation
# --------------------------

def test_pure_number_expression(resolver):
    resolve, _ = resolver
    assert evaluate("2^10", resolve) == Rational(1024)
    assert evaluate("1/100", resolve) == Rational(1, 100)
    assert evaluate("-(3)", resolve) == Rational(-3)

def test_pure_unit_algebra_gives_unit(resolver):
    resolve, t = resolver
    v = evaluate("kg m / s^2", resolve)
    assert isinstance(v, Unit)
    assert v == t["kg"] * t["m"] / t["s"] ** 2

def test_number_with_unit_gives_measurement(resolver):
    resolve, t = resolver
    v = evaluate("2.54 cm", resolve)
    assert isinstance(v, Measurement)
    assert v.value == Rational(127, 50) and v.unit is t["cm"]

def test_number_divided_by_unit(resolver):
    resolve, t = resolver
    v = evaluate("1/s", resolve)
    assert isinstance(v, Measurement)
    assert to_unit(v) == t["s"].reciprocal()

def test_parenthesised_measurements_multiply(resolver):
    resolve, t = resolver
    v = evaluate("(2 m) (3 s)", resolve)
    assert v.value == 6
    assert v.unit == t["m"] * t["s"]

def test_prefix_name_evaluates_as_number(resolver):
    resolve, t = resolver
    v = evaluate("kilo m", resolve)
    assert to_unit(v) == t["m"].scaled(1000)

def test_non_integer_exponent_rejected(resolver):
    resolve, _ = resolver
    with pytest.raises(UnitParseError):
        evaluate("m^(1/2)", resolve)
    with pytest.raises(UnitParseError):
        evaluate("m^s", resolve)

def test_unknown_name_propagates(resolver):
    resolve, _ = resolver
    with pytest.raises(UnknownUnitError):
        evaluate("3 furlong", resolve)

def test_unary_minus_on_unit(resolver):
    resolve, t = resolver
    v = evaluate("-m", resolve)
    assert v == Measurement(-1, t["m"])


# --------------------------
# Normalizing results
# --------------------------

def test_to_unit_folds_value_into_scale(resolver):
    _, t = resolver
    u = to_unit(Measurement(5, t["m"]))
    assert u.scale == 5 and u.compatible(t["m"])

def test_to_unit_bare_number(resolver):
    with pytest.raises(UnitParseError):
        to_unit(Rational(12))
    dozen = to_unit(Rational(12), allow_numbers=True)
    assert dozen.is_dimensionless and dozen.scale == 12

def test_to_number(resolver):
    _, t = resolver
    assert to_number(Rational(3)) == 3
    per = Unit.dimensionless.scaled(Rational(1, 100))
    assert to_number(Measurement(5, per)) == Rational(1, 20)
    with pytest.raises(UnitParseError):
        to_number(t["m"])
