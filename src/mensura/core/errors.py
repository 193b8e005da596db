"""
mensura.core.errors
===================

Exception types raised by the unit engine.

Division by zero is reported with Python's own `ZeroDivisionError`, both for
`Rational` arithmetic and for dividing a `Measurement` by a zero value.
"""

from __future__ import annotations


class MensuraError(Exception):
    """Base class for every error raised by mensura."""


class IncompatibleUnitsError(MensuraError, TypeError):
    """Raised when two units with different dimension vectors are combined
    in an operation that needs them to match (conversion, addition)."""

    def __init__(self, source: object, target: object) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Cannot convert '{source}' to '{target}': dimensions differ")


class UnknownUnitError(MensuraError, ValueError):
    """Raised when a catalogue lookup finds no direct, prefixed or plural match."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown unit symbol: {name}")


class UnitParseError(MensuraError, ValueError):
    """Raised for malformed unit expressions or numeric literals."""


__all__ = [
    "MensuraError",
    "IncompatibleUnitsError",
    "UnknownUnitError",
    "UnitParseError",
]
