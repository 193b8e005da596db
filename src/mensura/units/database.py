"""
mensura.units.database
======================

Parser for free-form unit-definition text in the style of the Frink units
database::

    // comments run to the end of the line, /* block comments */ may span lines
    length =!= m                    primitive dimension and its base unit
    kilo ::- 1000                   prefix, also usable alone ("3 kilo")
    k :- kilo                       prefix only
    inch in := 2.54 cm              derived unit with a synonym
    c := 299792458 m/s              juxtaposition multiplies
    velocity ||| m/s                display name for a dimension

The text is read in a single forward pass; every record can use anything
defined above it. Lines that are not understood (directives, functions,
addition, unknown names, fractional exponents, ...) are skipped and logged at
DEBUG level. Parsing only fails as a whole when no unit could be defined.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from typing import Iterator, List, Optional, Tuple

from mensura.core.dimensions import DIMENSIONLESS
from mensura.core.errors import MensuraError
from mensura.core.unit import Unit
from mensura.units.catalogue import UnitCatalogue
from mensura.units.expression import to_number, to_unit

logger = logging.getLogger(__name__)

_IDENT = r"[^\W\d]\w*"
_NAMES = rf"{_IDENT}(?:\s+{_IDENT})*"


@dataclass(frozen=True)
class ParserConfig:
    """Syntax markers and behaviour switches; defaults follow Frink."""

    comment: str = "//"
    block_comment_open: str = "/*"
    block_comment_close: str = "*/"
    continuation: str = "\\"
    primitive_marker: str = "=!="
    derived_marker: str = ":="
    standalone_prefix_marker: str = "::-"
    prefix_marker: str = ":-"
    quantity_marker: str = "|||"
    # "dozen := 12" defines a dimensionless unit instead of being rejected
    numeric_definitions: bool = True
    # "meters" resolves to "meter"
    plurals: bool = True

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str) and not value:
                raise ValueError(f"ParserConfig.{f.name} must not be empty")


def _record_patterns(config: ParserConfig) -> List[Tuple[str, re.Pattern[str]]]:
    def marked(marker: str) -> re.Pattern[str]:
        return re.compile(rf"(?P<names>{_NAMES})\s*{re.escape(marker)}\s*(?P<expr>.+)")

    # order matters: "::-" must be tried before ":-"
    return [
        ("primitive", re.compile(
            rf"(?P<dim>{_IDENT})\s*{re.escape(config.primitive_marker)}\s*(?P<names>{_NAMES})"
        )),
        ("standalone_prefix", marked(config.standalone_prefix_marker)),
        ("prefix", marked(config.prefix_marker)),
        ("derived", marked(config.derived_marker)),
        ("quantity", marked(config.quantity_marker)),
    ]


# --- Line classification ------------------------------------------------------

def _strip_comments(line: str, in_block: bool, config: ParserConfig) -> Tuple[str, bool]:
    out: List[str] = []
    i = 0
    while i < len(line):
        if in_block:
            j = line.find(config.block_comment_close, i)
            if j < 0:
                return "".join(out), True
            out.append(" ")
            i = j + len(config.block_comment_close)
            in_block = False
            continue
        lc = line.find(config.comment, i)
        bc = line.find(config.block_comment_open, i)
        if bc >= 0 and (lc < 0 or bc < lc):
            out.append(line[i:bc])
            i = bc + len(config.block_comment_open)
            in_block = True
        elif lc >= 0:
            out.append(line[i:lc])
            break
        else:
            out.append(line[i:])
            break
    return "".join(out), in_block


def logical_lines(text: str, config: Optional[ParserConfig] = None) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, record)`` for every non-blank logical line, with
    comments removed and continuation lines joined. The line number is the
    one the record starts on."""
    config = config or ParserConfig()
    in_block = False
    pending: List[str] = []
    start = 0

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line, in_block = _strip_comments(raw, in_block, config)
        line = line.strip()
        if not pending:
            start = lineno
        if line.endswith(config.continuation):
            pending.append(line[: -len(config.continuation)])
            continue
        pending.append(line)
        record = " ".join(part.strip() for part in pending).strip()
        pending = []
        if record:
            yield start, record

    record = " ".join(part.strip() for part in pending).strip()
    if record:
        yield start, record


# --- Builder ------------------------------------------------------------------

class _CatalogueBuilder:
    """Accumulates records into a catalogue; unmatched or failing records are
    counted and skipped."""

    def __init__(self, config: ParserConfig) -> None:
        self.config = config
        self.catalogue = UnitCatalogue(plurals=config.plurals)
        self.accepted = 0
        self.skipped = 0
        self._patterns = _record_patterns(config)

    def feed(self, lineno: int, record: str) -> bool:
        for kind, pattern in self._patterns:
            m = pattern.fullmatch(record)
            if m:
                break
        else:
            return self._skip(lineno, record, "unrecognized record")

        handler = getattr(self, f"_on_{kind}")
        try:
            handler(m)
        except (MensuraError, ValueError, ZeroDivisionError, RecursionError) as e:
            return self._skip(lineno, record, str(e))
        self.accepted += 1
        return True

    def _skip(self, lineno: int, record: str, reason: str) -> bool:
        self.skipped += 1
        logger.debug("Skipping line %d (%s): %s", lineno, reason, record)
        return False

    # --- record handlers ---
    def _on_primitive(self, m: re.Match[str]) -> None:
        names = m.group("names").split()
        unit = Unit.primitive(m.group("dim"), names[0])
        self.catalogue._define(names, unit)

    def _on_derived(self, m: re.Match[str]) -> None:
        names = m.group("names").split()
        value = self.catalogue.evaluate(m.group("expr"))
        unit = to_unit(value, allow_numbers=self.config.numeric_definitions)
        self.catalogue._define(names, unit.renamed(names[0]))

    def _on_standalone_prefix(self, m: re.Match[str]) -> None:
        names = m.group("names").split()
        factor = to_number(self.catalogue.evaluate(m.group("expr")))
        self.catalogue._define_prefix(names, factor)
        self.catalogue._define(names, Unit(DIMENSIONLESS, factor, names[0]))

    def _on_prefix(self, m: re.Match[str]) -> None:
        names = m.group("names").split()
        factor = to_number(self.catalogue.evaluate(m.group("expr")))
        self.catalogue._define_prefix(names, factor)

    def _on_quantity(self, m: re.Match[str]) -> None:
        name = m.group("names").split()[0]
        unit = to_unit(self.catalogue.evaluate(m.group("expr")))
        self.catalogue._name_quantity(unit.dim, name)


def try_parse(
    text: str, config: Optional[ParserConfig] = None
) -> Tuple[bool, Optional[UnitCatalogue]]:
    """Parse a whole unit database.

    Returns ``(True, catalogue)`` when at least one unit was defined and
    ``(False, None)`` otherwise (empty text, a non-string, or nothing usable).
    """
    if not isinstance(text, str) or not text.strip():
        logger.info("No unit database text to parse")
        return False, None

    config = config or ParserConfig()
    builder = _CatalogueBuilder(config)
    for lineno, record in logical_lines(text, config):
        builder.feed(lineno, record)

    catalogue = builder.catalogue
    if len(catalogue) == 0:
        logger.info("Unit database defined no units (%d lines skipped)", builder.skipped)
        return False, None

    logger.info(
        "Parsed unit database: %d units, %d prefixes, %d records accepted, %d skipped",
        len(catalogue),
        len(catalogue.prefixes),
        builder.accepted,
        builder.skipped,
    )
    return True, catalogue


__all__ = ["ParserConfig", "logical_lines", "try_parse"]
