"""
Mensura: exact units of measure.

Mensura represents physical quantities with exact rational arithmetic, checks
dimensional compatibility, converts between units without rounding error, and
builds a unit catalogue by parsing a Frink-style unit-definition database.

There is no global unit table: parse a database with
``UnitCatalogue.try_parse(text)`` and pass the resulting catalogue around.
"""

from importlib import metadata as _metadata
from typing import Any

from mensura.core.dimensions import DIMENSIONLESS, Dimension, Primitive
from mensura.core.errors import (
    IncompatibleUnitsError,
    MensuraError,
    UnitParseError,
    UnknownUnitError,
)
from mensura.core.measurement import Measurement
from mensura.core.rational import Rational
from mensura.core.unit import Unit, compatible, divide, multiply, power, scale

__license__ = "MIT"

# Try to read the installed package version first; fall back to a default for local dev.
try:
    __version__ = _metadata.version("mensura")
except _metadata.PackageNotFoundError:
    import tomllib
    with open("pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public names exposed by the package. Keep this minimal and stable.
__all__ = [
    "__version__",
    "__license__",
    "Rational",
    "Primitive",
    "Dimension",
    "DIMENSIONLESS",
    "Unit",
    "Measurement",
    "scale",
    "multiply",
    "divide",
    "power",
    "compatible",
    "UnitCatalogue",
    "ParserConfig",
    "MensuraError",
    "IncompatibleUnitsError",
    "UnknownUnitError",
    "UnitParseError",
]

# Lazy access helpers -------------------------------------------------------

def __getattr__(name: str) -> Any:
    """
    Lazy attribute access for the catalogue layer, which is imported on first
    use so that ``import mensura`` stays cheap.
    """
    if name in ("UnitCatalogue", "ParserConfig"):
        import mensura.units as _units  # local import
        return getattr(_units, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

def __dir__() -> list[str]:
    # Improve discoverability in REPL / autocomplete.
    return sorted(list(globals().keys()) + ["UnitCatalogue", "ParserConfig"])
