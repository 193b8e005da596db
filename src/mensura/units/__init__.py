from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing aid only
    from mensura.units.catalogue import UnitCatalogue
    from mensura.units.database import ParserConfig, try_parse

# Lazy access helpers -------------------------------------------------------

_LAZY = {
    "UnitCatalogue": "mensura.units.catalogue",
    "ParserConfig": "mensura.units.database",
    "try_parse": "mensura.units.database",
}

def __getattr__(name: str) -> Any:
    """
    Lazy attribute access. The catalogue and parser modules are imported on
    first use to avoid import-time cycles with the core package.
    """
    module = _LAZY.get(name)
    if module is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    import importlib
    return getattr(importlib.import_module(module), name)

def __dir__() -> list[str]:
    # Improve discoverability in REPL / autocomplete.
    return sorted(list(globals().keys()) + list(_LAZY))
