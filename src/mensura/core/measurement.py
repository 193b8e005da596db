"""
mensura.core.measurement
========================

Defines `Measurement`, an exact value paired with a `Unit`.

A measurement of ``value`` in ``unit`` stands for ``value * unit.scale``
primitive units. Conversion re-expresses that quantity in another unit with
the same dimension vector:

    converted.value = value * unit.scale / target.scale

Measurements are immutable; arithmetic and conversion always return new ones.
Equality is exact and does not convert: two measurements are equal when their
values and units (dimension and scale) match.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any

from mensura.core.errors import IncompatibleUnitsError
from mensura.core.rational import Rational, RationalLike
from mensura.core.unit import Unit

_NUMBER_TYPES = (Rational, int, float, Fraction, Decimal)


@dataclass(frozen=True, slots=True, eq=False)
class Measurement:
    """
    A quantity: `value` instances of `unit`.

    Attributes
    ----------
    value : Rational
        Exact magnitude in `unit`. Any Rational-convertible number is accepted.
    unit : Unit
        The unit the value is expressed in.
    """

    value: Rational
    unit: Unit

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", Rational.coerce(self.value))
        if not isinstance(self.unit, Unit):
            raise TypeError(f"Measurement unit must be a Unit, got {type(self.unit).__name__}")

    @property
    def dim(self):
        return self.unit.dim

    def base_value(self) -> Rational:
        """The value expressed in primitive units."""
        return self.value * self.unit.scale

    def _check_compatible(self, target: Unit) -> None:
        if not self.unit.compatible(target):
            raise IncompatibleUnitsError(self.unit, target)

    # --- conversion ------------------------------------------------------
    def convert_to(self, target: Unit) -> "Measurement":
        self._check_compatible(target)
        if target is self.unit:
            return self
        return Measurement(self.base_value() / target.scale, target)

    # --- arithmetic ------------------------------------------------------
    def multiply(self, other: "Measurement") -> "Measurement":
        return Measurement(self.value * other.value, self.unit.multiply(other.unit))

    def divide(self, other: "Measurement") -> "Measurement":
        if not other.value:
            raise ZeroDivisionError("Measurement division by a zero value")
        return Measurement(self.value / other.value, self.unit.divide(other.unit))

    def scale(self, factor: RationalLike) -> "Measurement":
        """Scalar multiplication; the unit is unchanged."""
        return Measurement(Rational.coerce(factor) * self.value, self.unit)

    def power(self, n: int) -> "Measurement":
        return Measurement(self.value.pow(n), self.unit.power(n))

    def add(self, other: "Measurement") -> "Measurement":
        """Sum in this measurement's unit."""
        return Measurement(self.value + other.convert_to(self.unit).value, self.unit)

    def subtract(self, other: "Measurement") -> "Measurement":
        return Measurement(self.value - other.convert_to(self.unit).value, self.unit)

    def negate(self) -> "Measurement":
        return Measurement(-self.value, self.unit)

    # --- operator sugar --------------------------------------------------
    def __mul__(self, other: Any) -> "Measurement":
        if isinstance(other, Measurement):
            return self.multiply(other)
        if isinstance(other, Unit):
            return Measurement(self.value, self.unit.multiply(other))
        if isinstance(other, _NUMBER_TYPES):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> "Measurement":
        if isinstance(other, Unit):
            return Measurement(self.value, other.multiply(self.unit))
        if isinstance(other, _NUMBER_TYPES):
            return self.scale(other)
        return NotImplemented

    def __truediv__(self, other: Any) -> "Measurement":
        if isinstance(other, Measurement):
            return self.divide(other)
        if isinstance(other, Unit):
            return Measurement(self.value, self.unit.divide(other))
        if isinstance(other, _NUMBER_TYPES):
            return Measurement(self.value / Rational.coerce(other), self.unit)
        return NotImplemented

    def __rtruediv__(self, other: Any) -> "Measurement":
        if not isinstance(other, (Unit,) + _NUMBER_TYPES):
            return NotImplemented
        if not self.value:
            raise ZeroDivisionError("Measurement division by a zero value")
        if isinstance(other, Unit):
            return Measurement(self.value.pow(-1), other.divide(self.unit))
        return Measurement(Rational.coerce(other) / self.value, self.unit.reciprocal())

    def __pow__(self, n: int) -> "Measurement":
        if not isinstance(n, int):
            return NotImplemented
        return self.power(n)

    def __add__(self, other: Any) -> "Measurement":
        if not isinstance(other, Measurement):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Any) -> "Measurement":
        if not isinstance(other, Measurement):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> "Measurement":
        return self.negate()

    # --- comparison ------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Measurement):
            return NotImplemented
        return self.value == other.value and self.unit == other.unit

    def __hash__(self) -> int:
        return hash((self.value, self.unit))

    def _compare(self, other: object) -> int:
        if not isinstance(other, Measurement):
            raise TypeError(f"Cannot compare Measurement with type {type(other)}")
        return self.value.compare(other.convert_to(self.unit).value)

    def __lt__(self, other: object) -> bool:
        return self._compare(other) < 0

    def __le__(self, other: object) -> bool:
        return self._compare(other) <= 0

    def __gt__(self, other: object) -> bool:
        return self._compare(other) > 0

    def __ge__(self, other: object) -> bool:
        return self._compare(other) >= 0

    def __str__(self) -> str:
        text = self.value.to_decimal_string(15)
        unit = str(self.unit)
        return text if unit == "1" else f"{text} {unit}"

    def __repr__(self) -> str:
        return f"Measurement({self.value}, {self.unit!r})"


__all__ = ["Measurement"]
