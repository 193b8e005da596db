"""
mensura.units.catalogue
=======================

An explicit, read-only name → `Unit` table with on-demand prefix composition.

- Catalogues are built once by the database parser and never mutated through
  the public API; pass the catalogue wherever lookups are needed.
- `lookup` tries the direct table, then the composed-name cache, then a prefix
  followed by a defined unit (longest prefix first, no stacked prefixes), then
  plural stripping of the whole name ("mins" → "min"), and only then a prefix
  followed by a plural ("kilometers" → "kilo" + "meter").
- Composed units are memoised in a cache kept apart from the canonical table.
  The cache is the only state that changes after construction and is guarded
  by a lock, so a catalogue can be shared between threads.
"""
from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from mensura.core.dimensions import Dimension
from mensura.core.errors import UnknownUnitError
from mensura.core.measurement import Measurement
from mensura.core.rational import Rational, RationalLike
from mensura.core.unit import Unit
from mensura.units.expression import Value, evaluate, to_unit

if TYPE_CHECKING:  # pragma: no cover - typing aid only
    from mensura.units.database import ParserConfig

logger = logging.getLogger(__name__)


class UnitCatalogue:
    """Immutable unit catalogue with lazy, cached prefix synthesis."""

    def __init__(
        self,
        units: Optional[Mapping[str, Unit]] = None,
        prefixes: Optional[Mapping[str, RationalLike]] = None,
        *,
        plurals: bool = True,
    ) -> None:
        self._lock = threading.RLock()
        self._units: Dict[str, Unit] = dict(units or {})
        self._prefixes: Dict[str, Rational] = {}
        self._quantities: Dict[Dimension, str] = {}
        self._composed: Dict[str, Unit] = {}
        self._plurals = plurals
        self._prefixes_desc: Tuple[str, ...] = ()
        for name, factor in (prefixes or {}).items():
            self._define_prefix((name,), factor)

    @classmethod
    def try_parse(
        cls, text: str, config: "ParserConfig | None" = None
    ) -> Tuple[bool, Optional["UnitCatalogue"]]:
        """Build a catalogue from unit-database text.

        Returns ``(True, catalogue)`` on success and ``(False, None)`` when the
        text yields no units at all. Never raises for malformed input.
        """
        # Import here to avoid a circular import with the parser.
        from mensura.units.database import try_parse

        return try_parse(text, config)

    # -------------------------- public API ---------------------------------
    @property
    def units(self) -> Mapping[str, Unit]:
        """Explicitly defined units (composed names are not included)."""
        return MappingProxyType(self._units)

    @property
    def prefixes(self) -> Mapping[str, Rational]:
        return MappingProxyType(self._prefixes)

    def lookup(self, name: str) -> Unit:
        """Lookup a unit by name. If missing, try to compose it from a prefix.

        Raises `UnknownUnitError` if unknown.
        """
        with self._lock:
            u = self._units.get(name)
            if u is not None:
                return u
            u = self._composed.get(name)
            if u is not None:
                return u

            u = self._try_prefixed(name)
            if u is None and self._plurals:
                u = self._try_singular(name)
                if u is None:
                    u = self._try_prefixed(name, plural=True)
            if u is None:
                raise UnknownUnitError(name)

            self._composed[name] = u
            logger.debug("Composed unit %r (scale %s)", name, u.scale)
            return u

    def prefix(self, name: str) -> Rational:
        try:
            return self._prefixes[name]
        except KeyError:
            raise UnknownUnitError(name) from None

    def has(self, name: str) -> bool:
        try:
            self.lookup(name)
            return True
        except UnknownUnitError:
            return False

    def names(self) -> list[str]:
        return sorted(self._units)

    def evaluate(self, expr: str) -> Value:
        """Evaluate a unit expression against this catalogue."""
        return evaluate(expr, self._resolve)

    def unit(self, expr: str) -> Unit:
        """Evaluate an expression such as ``'(12 floz) (3.2 percent)'`` to a Unit.

        A plain number is rejected with `UnitParseError`.
        """
        value = self.evaluate(expr)
        if isinstance(value, Measurement):
            return to_unit(value).renamed(expr.strip())
        return to_unit(value)

    def measure(self, value: RationalLike, expr: str) -> Measurement:
        return self.unit(expr).measure(value)

    def quantity_name(self, unit: "Unit | Dimension") -> Optional[str]:
        """Name recorded for a unit's dimension (e.g. "velocity"), if any."""
        dim = unit.dim if isinstance(unit, Unit) else Dimension(unit)
        return self._quantities.get(dim)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[str]:
        return iter(self._units)

    def __repr__(self) -> str:
        return f"UnitCatalogue({len(self._units)} units, {len(self._prefixes)} prefixes)"

    # ------------------------- construction --------------------------------
    # Used by the database builder while the catalogue is being assembled.
    def _define(self, names: Iterable[str], unit: Unit) -> None:
        with self._lock:
            for name in names:
                if name in self._units:
                    logger.debug("Redefining unit %r", name)
                self._units[name] = unit
            self._composed.clear()

    def _define_prefix(self, names: Iterable[str], factor: RationalLike) -> None:
        value = Rational.coerce(factor)
        with self._lock:
            for name in names:
                if name in self._prefixes:
                    logger.debug("Redefining prefix %r", name)
                self._prefixes[name] = value
            # Ordered list of prefixes by descending length for robust matching
            self._prefixes_desc = tuple(sorted(self._prefixes, key=len, reverse=True))
            self._composed.clear()

    def _name_quantity(self, dim: Dimension, name: str) -> None:
        with self._lock:
            self._quantities.setdefault(dim, name)

    # ------------------------- internals -----------------------------------
    def _resolve(self, name: str) -> "Unit | Rational":
        try:
            return self.lookup(name)
        except UnknownUnitError:
            factor = self._prefixes.get(name)
            if factor is None:
                raise
            return factor

    def _try_singular(self, name: str) -> Optional[Unit]:
        if len(name) > 1 and name.endswith("s"):
            return self._units.get(name[:-1])
        return None

    def _try_prefixed(self, name: str, plural: bool = False) -> Optional[Unit]:
        for p in self._prefixes_desc:
            if len(name) > len(p) and name.startswith(p):
                # Prevent stacked prefixes: the remainder must be a defined unit
                rest = name[len(p):]
                base = self._try_singular(rest) if plural else self._units.get(rest)
                if base is not None:
                    return base.scaled(self._prefixes[p]).renamed(name)
        return None


__all__ = ["UnitCatalogue"]
