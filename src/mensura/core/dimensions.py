# mensura.core.dimensions

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Tuple, TypeAlias, Union

from mensura.core.utils import sup

_CREATION_ORDER = itertools.count()


@dataclass(frozen=True, eq=False, slots=True)
class Primitive:
    """
    An independent physical quantity (length, mass, time, ...).

    Equality is identity-based: two primitives created with the same name are
    different dimensions. `index` records creation order and is the sort key of
    the canonical `Dimension` form.
    """

    name: str
    index: int = field(default_factory=lambda: next(_CREATION_ORDER), compare=False)

    def __repr__(self) -> str:
        return f"Primitive({self.name!r})"

    def __str__(self) -> str:
        return self.name


# --- Public typing -----------------------------------------------------------
Entry: TypeAlias = Tuple[Primitive, int]
DimLike = Union["Dimension", Mapping[Primitive, int], Iterable[Entry]]

# --- Core object -------------------------------------------------------------

class Dimension(tuple):
    """
    Immutable sparse vector of integer exponents over `Primitive` dimensions.

    Stored as a tuple of ``(primitive, exponent)`` pairs ordered by primitive
    creation order with zero exponents dropped, so two vectors compare equal
    (as sequences) exactly when they describe the same dimension. The empty
    vector is dimensionless.
    """

    __slots__ = ()

    def __new__(cls, data: DimLike = ()) -> "Dimension":
        if isinstance(data, Dimension):
            return data
        items = data.items() if isinstance(data, Mapping) else data

        exps: dict[Primitive, int] = {}
        for prim, exp in items:
            if not isinstance(prim, Primitive):
                raise TypeError(f"Dimension keys must be Primitive, got {type(prim).__name__}")
            if not isinstance(exp, int):
                raise TypeError(f"Dimension exponents must be int, got {type(exp).__name__}")
            exps[prim] = exps.get(prim, 0) + exp

        entries = sorted(
            ((p, e) for p, e in exps.items() if e != 0),
            key=lambda entry: entry[0].index,
        )
        return tuple.__new__(cls, entries)

    @classmethod
    def of(cls, primitive: Primitive) -> "Dimension":
        return cls(((primitive, 1),))

    # --- Algebra (operator overloads) ---
    def __mul__(self, other: DimLike) -> "Dimension":  # type: ignore[override]
        return Dimension(itertools.chain(self, Dimension(other)))

    def __truediv__(self, other: DimLike) -> "Dimension":
        return Dimension(itertools.chain(self, ((p, -e) for p, e in Dimension(other))))

    def __pow__(self, n: int, modulo: Any | None = None) -> "Dimension":
        if modulo is not None:
            raise TypeError("Modulo exponentiation is not supported for Dimension.")
        if not isinstance(n, int):
            raise TypeError(f"Exponent must be int, got {type(n).__name__}")
        return Dimension((p, e * n) for p, e in self)

    def __rmul__(self, other: Any) -> "Dimension":
        """Prevent (int * Dimension) from falling back to tuple repetition."""
        return NotImplemented

    def __add__(self, other: Any) -> "Dimension":
        """Block tuple concatenation."""
        return NotImplemented

    def __radd__(self, other: Any) -> "Dimension":
        return NotImplemented

    # --- Helpers ---
    @property
    def is_dimensionless(self) -> bool:
        return len(self) == 0

    def exponent(self, primitive: Primitive) -> int:
        for p, e in self:
            if p is primitive:
                return e
        return 0

    def as_dict(self) -> dict[Primitive, int]:
        return dict(self)

    def __repr__(self) -> str:
        return "".join(f"[{p.name}^{e}]" for p, e in self)

    def __str__(self) -> str:
        if not self:
            return "1"
        return "·".join(f"{p.name}{sup(e)}" for p, e in self)


DIMENSIONLESS = Dimension()

__all__ = [
    "Primitive",
    "Dimension",
    "DIMENSIONLESS",
]
