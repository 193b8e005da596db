import re
from functools import lru_cache
from typing import Callable, List, Tuple, Union

from mensura.core.dimensions import DIMENSIONLESS
from mensura.core.errors import UnitParseError
from mensura.core.measurement import Measurement
from mensura.core.rational import ONE, Rational
from mensura.core.unit import Unit

Value = Union[Rational, Unit, Measurement]
Resolver = Callable[[str], Union[Rational, Unit]]

# --- Plan node types ------------------------------------------------
# ("num", <Rational>)
# ("name", <str>)
# ("neg", <plan>)
# ("pow", <plan>, <plan>)
# ("mul", <plan>, <plan>)
# ("div", <plan>, <plan>)
Plan = Tuple

_TOKEN_RE = re.compile(
    r"""
    \s*
    (?:
        (?P<num>(?:\d[\d_]*(?:\.(?:\d[\d_]*)?)?|\.\d[\d_]*)(?:(?:ee|[eE])[-+]?\d+)?)
      | (?P<name>[^\W\d]\w*)
      | (?P<op>\*\*|[*/^()+\-])
    )
    """,
    re.X,
)

Token = Tuple[str, str, int]  # (kind, text, position)


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    i, n = 0, len(text)
    while i < n:
        if text[i:].strip() == "":
            break
        m = _TOKEN_RE.match(text, i)
        if not m:
            j = i
            while j < n and text[j].isspace():
                j += 1
            raise UnitParseError(f"Unexpected character at {j}: {text[j:j+10]!r}")
        kind = m.lastgroup
        tokens.append((kind, m.group(kind), m.start(kind)))
        i = m.end()
    return tokens


# ---------------- Parser that builds a PLAN (no catalogue lookups!) ----------------
class _UnitExprParser:
    """
    Grammar:
      expr   := term (('*' | '/' | <juxtaposition>) term)*
      term   := '-' term | power
      power  := atom [('^' | '**') term]          (right-associative)
      atom   := NUMBER | NAME | '(' expr ')'

    Juxtaposition ("299792458 m/s") multiplies with the same precedence as
    '*'. Exponents are checked to be integers at evaluation time.
    """

    def __init__(self, text: str):
        self.s = text
        self.toks = tokenize(text)
        self.i = 0

    def parse(self) -> Plan:
        if not self.toks:
            raise UnitParseError("Empty unit expression")
        plan = self._parse_expr()
        if self.i != len(self.toks):
            _, text, pos = self.toks[self.i]
            raise UnitParseError(f"Unexpected trailing input at {pos}: {self.s[pos:pos+10]!r}")
        return plan

    # expr := term (('*' | '/' | juxtaposition) term)*
    def _parse_expr(self) -> Plan:
        left = self._parse_term()
        while True:
            if self._peek_op("*"):
                self.i += 1
                left = ("mul", left, self._parse_term())
            elif self._peek_op("/"):
                self.i += 1
                left = ("div", left, self._parse_term())
            elif self._starts_atom():
                left = ("mul", left, self._parse_term())
            else:
                break
        return left

    # term := '-' term | power
    def _parse_term(self) -> Plan:
        if self._peek_op("-"):
            self.i += 1
            return ("neg", self._parse_term())
        return self._parse_power()

    # power := atom [('^' | '**') term]
    def _parse_power(self) -> Plan:
        base = self._parse_atom()
        if self._peek_op("^") or self._peek_op("**"):
            self.i += 1
            return ("pow", base, self._parse_term())
        return base

    # atom := NUMBER | NAME | '(' expr ')'
    def _parse_atom(self) -> Plan:
        if self.i >= len(self.toks):
            raise UnitParseError(f"Unexpected end of expression in {self.s!r}")
        kind, text, pos = self.toks[self.i]
        if kind == "num":
            self.i += 1
            return ("num", Rational.from_decimal(text))
        if kind == "name":
            self.i += 1
            return ("name", text)
        if text == "(":
            self.i += 1
            val = self._parse_expr()
            if not self._peek_op(")"):
                raise UnitParseError(f"Expected ')' in {self.s!r}")
            self.i += 1
            return val
        raise UnitParseError(f"Expected number, unit name or '(' at {pos}, got {text!r}")

    # ---- token helpers ----
    def _peek_op(self, op: str) -> bool:
        if self.i >= len(self.toks):
            return False
        kind, text, _ = self.toks[self.i]
        return kind == "op" and text == op

    def _starts_atom(self) -> bool:
        if self.i >= len(self.toks):
            return False
        kind, text, _ = self.toks[self.i]
        return kind in ("num", "name") or text == "("


# ---------------- Value algebra ----------------
def _lift(v: Union[Unit, Measurement]) -> Measurement:
    return v if isinstance(v, Measurement) else Measurement(ONE, v)


def _mul(a: Value, b: Value) -> Value:
    if isinstance(a, Rational) and isinstance(b, Rational):
        return a * b
    if isinstance(a, Unit) and isinstance(b, Unit):
        return a.multiply(b)
    if isinstance(a, Rational):
        return _lift(b).scale(a)
    if isinstance(b, Rational):
        return _lift(a).scale(b)
    return _lift(a).multiply(_lift(b))


def _div(a: Value, b: Value) -> Value:
    if isinstance(a, Rational) and isinstance(b, Rational):
        return a / b
    if isinstance(a, Unit) and isinstance(b, Unit):
        return a.divide(b)
    if isinstance(b, Rational):
        m = _lift(a)
        return Measurement(m.value / b, m.unit)
    if isinstance(a, Rational):
        return Measurement(a, Unit.dimensionless).divide(_lift(b))
    return _lift(a).divide(_lift(b))


def _pow(base: Value, exp: Value) -> Value:
    if not isinstance(exp, Rational) or not exp.is_integer():
        raise UnitParseError(f"Exponent must be an integer number, got {exp}")
    n = exp.numerator
    if isinstance(base, Rational):
        return base.pow(n)
    return base.power(n)


def _neg(v: Value) -> Value:
    if isinstance(v, Rational):
        return -v
    return _lift(v).negate()


# ---------------- Evaluation of a plan against a given resolver ----------------
def _eval_plan(plan: Plan, resolve: Resolver) -> Value:
    kind = plan[0]
    if kind == "num":
        return plan[1]
    elif kind == "name":
        return resolve(plan[1])  # late binding to the provided catalogue
    elif kind == "neg":
        return _neg(_eval_plan(plan[1], resolve))
    elif kind == "pow":
        return _pow(_eval_plan(plan[1], resolve), _eval_plan(plan[2], resolve))
    elif kind == "mul":
        return _mul(_eval_plan(plan[1], resolve), _eval_plan(plan[2], resolve))
    elif kind == "div":
        return _div(_eval_plan(plan[1], resolve), _eval_plan(plan[2], resolve))
    else:
        raise RuntimeError(f"Invalid plan node: {plan!r}")


# ---------------- Public API with caching-safe compilation ----------------
# Cache the *compiled plan* only. Safe across catalogues because there's no bound objects inside.
@lru_cache(maxsize=4096)
def compile_expr(expr: str) -> Plan:
    return _UnitExprParser(expr).parse()


def evaluate(expr: str, resolve: Resolver) -> Value:
    """
    Evaluate a unit expression such as ``'12 floz * 3.2 percent'`` or
    ``'kg m / s^2'``.

    Names are bound at call time through `resolve`, which returns a `Unit`
    (or a bare `Rational` for a prefix used as a number) and raises
    `UnknownUnitError` for unknown names.

    Returns a `Rational` for purely numeric expressions, a `Unit` for pure
    unit algebra, and a `Measurement` once a number is combined with a unit.
    """
    return _eval_plan(compile_expr(expr), resolve)


def to_unit(value: Value, allow_numbers: bool = False) -> Unit:
    """Normalize an evaluation result to a `Unit`.

    A measurement folds its value into the scale ("5 m" becomes a unit of
    scale 5). A bare number is rejected unless `allow_numbers` is set, in
    which case it becomes a dimensionless unit of that scale.
    """
    if isinstance(value, Unit):
        return value
    if isinstance(value, Measurement):
        return value.unit.scaled(value.value)
    if allow_numbers:
        return Unit(DIMENSIONLESS, value)
    raise UnitParseError(f"A bare number ({value}) is not a unit")


def to_number(value: Value) -> Rational:
    """Normalize a dimensionless evaluation result to a `Rational`."""
    if isinstance(value, Rational):
        return value
    m = _lift(value)
    if not m.unit.is_dimensionless:
        raise UnitParseError(f"Expected a pure number, got a value in '{m.unit}'")
    return m.base_value()


__all__ = ["tokenize", "compile_expr", "evaluate", "to_unit", "to_number", "Value"]
