"""
mensura.core.rational
=====================

Exact, arbitrary-precision fractions.

Every scale factor and every measured value in mensura is a `Rational`, so long
chains of unit algebra never accumulate floating point error. `Rational` is a
`fractions.Fraction` whose arithmetic stays closed over `Rational`, with the
literal parsing and formatting the unit database needs on top.

Equality, ordering and hashing are Fraction's, so they follow the numeric
tower: ``Rational(1, 2) == 0.5`` and ``hash(Rational(1, 2)) == hash(0.5)``,
while ``Rational(1, 10) != 0.1`` because the float is not exactly one tenth.

Arithmetic is different: a float operand is read through its shortest
round-trip decimal form (``repr``), so ``Rational(1) * 2.54`` is exactly
127/50 rather than the nearest binary double. `Rational.coerce` applies the
same rule.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from fractions import Fraction
from typing import Any, Union

from mensura.core.errors import UnitParseError

RationalLike = Union["Rational", int, Fraction, Decimal, float, str]

# optional sign, digits with "_" separators, optional fraction, optional
# exponent ("e" or Frink's exact "ee")
_DECIMAL_RE = re.compile(
    r"""
    \s*
    (?P<sign>[-+])?
    (?=\d|\.\d)
    (?P<int>\d[\d_]*)?
    (?:\.(?P<frac>\d[\d_]*)?)?
    (?:(?:ee|[eE])(?P<exp>[-+]?\d+))?
    \s*
    """,
    re.X,
)

_FRACTION_RE = re.compile(r"\s*(?P<num>[-+]?\d[\d_]*)\s*/\s*(?P<den>\d[\d_]*)\s*")


class Rational(Fraction):
    """Immutable exact fraction ``numerator / denominator``, always reduced."""

    __slots__ = ()

    def __new__(cls, numerator: int = 0, denominator: int = 1) -> "Rational":
        if not isinstance(numerator, int) or not isinstance(denominator, int):
            raise TypeError(
                "Rational(numerator, denominator) takes integers; "
                "use Rational.coerce() for other values"
            )
        return super().__new__(cls, numerator, denominator)

    def __reduce__(self) -> tuple:
        return (Rational, (self.numerator, self.denominator))

    # --- construction ---------------------------------------------------
    @classmethod
    def from_fraction(cls, numerator: int, denominator: int) -> "Rational":
        return cls(numerator, denominator)

    @classmethod
    def from_decimal(cls, text: "str | Decimal") -> "Rational":
        """Parse a decimal literal such as ``"5.08"``, ``"-1.5e-3"``,
        ``"6.02214076ee23"``, ``"1_000"`` or a simple fraction ``"3/4"``.
        A `decimal.Decimal` is converted exactly, as `Fraction.from_decimal`
        does.

        Raises `UnitParseError` (a `ValueError`) on malformed text, including
        a fraction with a zero denominator.
        """
        if isinstance(text, Decimal):
            if not text.is_finite():
                raise ValueError(f"Cannot represent {text!r} as a Rational")
            return cls(*text.as_integer_ratio())

        m = _FRACTION_RE.fullmatch(text)
        if m:
            den = int(m.group("den"))
            if den == 0:
                raise UnitParseError(f"Zero denominator in numeric literal: {text!r}")
            return cls(int(m.group("num")), den)

        m = _DECIMAL_RE.fullmatch(text)
        if not m:
            raise UnitParseError(f"Invalid numeric literal: {text!r}")

        int_part = (m.group("int") or "").replace("_", "")
        frac_part = (m.group("frac") or "").replace("_", "")
        exp = int(m.group("exp") or 0) - len(frac_part)
        mantissa = int((int_part + frac_part) or "0")
        if m.group("sign") == "-":
            mantissa = -mantissa

        if exp >= 0:
            return cls(mantissa * 10**exp)
        return cls(mantissa, 10**-exp)

    @classmethod
    def coerce(cls, value: RationalLike) -> "Rational":
        """Convert any supported numeric value to a `Rational`.

        Floats go through ``repr``; non-finite values raise `ValueError`.
        """
        if isinstance(value, Rational):
            return value
        if isinstance(value, int):
            return cls(int(value))
        if isinstance(value, Fraction):
            return cls(value.numerator, value.denominator)
        if isinstance(value, Decimal):
            return cls.from_decimal(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"Cannot represent {value!r} as a Rational")
            return cls.from_decimal(repr(value))
        if isinstance(value, str):
            return cls.from_decimal(value)
        raise TypeError(f"Cannot convert {type(value).__name__} to Rational")

    # --- accessors ------------------------------------------------------
    @property
    def sign(self) -> int:
        return (self.numerator > 0) - (self.numerator < 0)

    def is_integer(self) -> bool:
        return self.denominator == 1

    def to_float(self) -> float:
        """Lossy conversion, for display only."""
        return float(self)

    def to_decimal_string(self, places: int = 20) -> str:
        """Decimal rendering, exact when the expansion terminates within
        `places` digits and rounded half-up otherwise."""
        num, den = self.numerator, self.denominator
        q, r = divmod(abs(num) * 10**places, den)
        if 2 * r >= den:
            q += 1
        if places == 0:
            text = str(q)
        else:
            digits = str(q).rjust(places + 1, "0")
            whole, frac = digits[:-places], digits[-places:].rstrip("0")
            text = f"{whole}.{frac}" if frac else whole
        if num < 0 and text.strip("0.") != "":
            text = "-" + text
        return text

    # --- named arithmetic -----------------------------------------------
    def add(self, other: RationalLike) -> "Rational":
        return _closed(Fraction.__add__(self, Rational.coerce(other)))

    def sub(self, other: RationalLike) -> "Rational":
        return _closed(Fraction.__sub__(self, Rational.coerce(other)))

    def mul(self, other: RationalLike) -> "Rational":
        return _closed(Fraction.__mul__(self, Rational.coerce(other)))

    def div(self, other: RationalLike) -> "Rational":
        o = Rational.coerce(other)
        if not o:
            raise ZeroDivisionError("Rational division by zero")
        return _closed(Fraction.__truediv__(self, o))

    def pow(self, n: int) -> "Rational":
        """Integer power. ``x.pow(0) == 1`` for every x, zero included;
        a negative power inverts and fails for zero."""
        if isinstance(n, Rational):
            if not n.is_integer():
                raise ValueError(f"Exponent must be an integer, got {n}")
            n = n.numerator
        if not isinstance(n, int):
            raise TypeError(f"Exponent must be int, got {type(n).__name__}")
        if n == 0:
            return ONE
        if n < 0 and not self:
            raise ZeroDivisionError("Cannot raise zero to a negative power")
        return _closed(Fraction.__pow__(self, n))

    def compare(self, other: RationalLike) -> int:
        diff = self.sub(other)
        return diff.sign

    # --- operator sugar -------------------------------------------------
    @staticmethod
    def _operand(other: Any) -> "Rational | None":
        if isinstance(other, (Rational, int, Fraction, Decimal, float)):
            return Rational.coerce(other)
        return None

    def __add__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else self.add(o)

    def __radd__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else o.add(self)

    def __sub__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else self.sub(o)

    def __rsub__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else o.sub(self)

    def __mul__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else self.mul(o)

    def __rmul__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else o.mul(self)

    def __truediv__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else self.div(o)

    def __rtruediv__(self, other: Any) -> "Rational":
        o = self._operand(other)
        return NotImplemented if o is None else o.div(self)

    def __pow__(self, n: Any, modulo: Any | None = None) -> "Rational":
        if modulo is not None:
            raise TypeError("Modulo exponentiation is not supported for Rational.")
        if isinstance(n, Rational) or (isinstance(n, int) and not isinstance(n, bool)):
            return self.pow(n)
        return NotImplemented

    def __neg__(self) -> "Rational":
        return Rational(-self.numerator, self.denominator)

    def __pos__(self) -> "Rational":
        return self

    def __abs__(self) -> "Rational":
        return self if self.numerator >= 0 else -self

    def __repr__(self) -> str:
        return f"Rational({self.numerator}, {self.denominator})"


def _closed(value: Fraction) -> Rational:
    # Fraction's operators return plain Fractions
    return Rational(value.numerator, value.denominator)


ZERO = Rational(0)
ONE = Rational(1)

__all__ = ["Rational", "RationalLike", "ZERO", "ONE"]
