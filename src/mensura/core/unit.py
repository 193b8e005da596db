from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from fractions import Fraction
from typing import TYPE_CHECKING, Any, ClassVar

from mensura.core.dimensions import DIMENSIONLESS, Dimension, Primitive
from mensura.core.rational import ONE, Rational, RationalLike
from mensura.core.utils import div_name, mul_name, power_name

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from mensura.core.measurement import Measurement

_NUMBER_TYPES = (Rational, int, float, Fraction, Decimal)


def _factor_text(factor: Rational) -> str:
    text = factor.to_decimal_string(12)
    return text if Rational.from_decimal(text) == factor else str(factor)


@dataclass(frozen=True, slots=True, eq=False)
class Unit:
    """
    A physical unit.

    One of this unit equals `scale` of the primitive-unit combination described
    by `dim`. A primitive unit has ``dim == {itself: 1}`` and ``scale == 1``.

    Attributes
    ----------
    dim : Dimension
        Sparse exponent vector over primitive dimensions.
    scale : Rational
        Exact factor expressing this unit in primitive units.
        Examples: m=1, cm=1/100, inch=127/5000.
    name : str
        Optional display name or symbol. Not part of equality.
    """

    dim: Dimension
    scale: Rational
    name: str = ""

    dimensionless: ClassVar["Unit"]

    def __post_init__(self) -> None:
        object.__setattr__(self, "dim", Dimension(self.dim))
        object.__setattr__(self, "scale", Rational.coerce(self.scale))
        if not self.scale:
            raise ValueError("Unit scale must be nonzero")

    @classmethod
    def primitive(cls, dimension_name: str, symbol: str | None = None) -> "Unit":
        """Mint a fresh primitive dimension and its base unit.

        ``Unit.primitive("Length", "m")`` names the dimension and the unit
        separately; ``Unit.primitive("m")`` uses the symbol for both. Every
        call creates a distinct dimension, even for a repeated name.
        """
        if symbol is None:
            symbol = dimension_name
        return cls(Dimension.of(Primitive(dimension_name)), ONE, symbol)

    # --- algebra ---------------------------------------------------------
    def scaled(self, factor: RationalLike) -> "Unit":
        f = Rational.coerce(factor)
        name = f"{_factor_text(f)}·{self.name}" if self.name else ""
        return Unit(self.dim, f * self.scale, name)

    def multiply(self, other: "Unit") -> "Unit":
        return Unit(self.dim * other.dim, self.scale * other.scale, mul_name(self.name, other.name))

    def divide(self, other: "Unit") -> "Unit":
        return Unit(self.dim / other.dim, self.scale / other.scale, div_name(self.name, other.name))

    def power(self, n: int) -> "Unit":
        if not isinstance(n, int):
            raise TypeError(f"Exponent must be int, got {type(n).__name__}")
        return Unit(self.dim**n, self.scale.pow(n), power_name(self.name, n))

    def reciprocal(self) -> "Unit":
        name = div_name("1", self.name) if self.name else ""
        return Unit(DIMENSIONLESS / self.dim, self.scale.pow(-1), name)

    def compatible(self, other: "Unit") -> bool:
        return self.dim == other.dim

    def measure(self, value: RationalLike) -> "Measurement":
        from mensura.core.measurement import Measurement

        return Measurement(value, self)

    def renamed(self, name: str) -> "Unit":
        return replace(self, name=name)

    @property
    def is_dimensionless(self) -> bool:
        return self.dim.is_dimensionless

    # --- operator sugar --------------------------------------------------
    def __mul__(self, other: Any) -> "Unit":
        if isinstance(other, Unit):
            return self.multiply(other)
        if isinstance(other, _NUMBER_TYPES):
            return self.scaled(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> "Unit":
        if isinstance(other, _NUMBER_TYPES):
            return self.scaled(other)
        return NotImplemented

    def __truediv__(self, other: Any) -> "Unit":
        if isinstance(other, Unit):
            return self.divide(other)
        if isinstance(other, _NUMBER_TYPES):
            return self.scaled(ONE / Rational.coerce(other))
        return NotImplemented

    def __rtruediv__(self, other: Any) -> "Unit":
        if isinstance(other, _NUMBER_TYPES):
            inv = self.reciprocal()
            return inv if other == 1 else inv.scaled(other)
        return NotImplemented

    def __pow__(self, n: int) -> "Unit":
        if not isinstance(n, int):
            return NotImplemented
        return self.power(n)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Unit):
            return NotImplemented
        return self.dim == other.dim and self.scale == other.scale

    def __hash__(self) -> int:
        return hash((self.dim, self.scale))

    def __str__(self) -> str:
        if self.name:
            return self.name
        if self.scale == 1:
            return str(self.dim)
        return f"{_factor_text(self.scale)}·{self.dim}"

    def __repr__(self) -> str:
        return f"Unit({self.name!r}, scale={self.scale}, dim={self.dim!r})"


Unit.dimensionless = Unit(DIMENSIONLESS, ONE, "1")


# --- Function forms ----------------------------------------------------------

def scale(factor: RationalLike, unit: Unit) -> Unit:
    return unit.scaled(factor)

def multiply(u1: Unit, u2: Unit) -> Unit:
    return u1.multiply(u2)

def divide(u1: Unit, u2: Unit) -> Unit:
    return u1.divide(u2)

def power(unit: Unit, n: int) -> Unit:
    return unit.power(n)

def compatible(u1: Unit, u2: Unit) -> bool:
    return u1.compatible(u2)


__all__ = ["Unit", "scale", "multiply", "divide", "power", "compatible"]
