"""
mensura.core.utils
==================

Formatting helpers for dimension vectors and composed unit names.

Composed names are display metadata only; they never take part in unit
equality. Names are joined with a middle dot and slash (``kg·m/s^2``) and a
component is parenthesised when it is itself composite.
"""

from __future__ import annotations

import re


_SUPERSCRIPTS = str.maketrans("0123456789-", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻")

# a single atom, optionally raised to an integer power: "m", "cm^2", "s^-1"
_ATOM_RE: re.Pattern[str] = re.compile(r"[^\s·/^()]+(?:\^-?\d+)?")
_POWER_RE: re.Pattern[str] = re.compile(r"^(?P<base>.+?)\^(?P<exp>-?\d+)$")


def sup(n: int) -> str:
    """Unicode superscript exponent; empty for 1."""
    return "" if n == 1 else str(n).translate(_SUPERSCRIPTS)


def _wrap(name: str) -> str:
    if _ATOM_RE.fullmatch(name):
        return name
    return f"({name})"


def _wrap_factor(name: str) -> str:
    # products associate, so "a·b" needs no parentheses on either side of "·"
    if "/" in name:
        return f"({name})"
    return name


def mul_name(a: str, b: str) -> str:
    if not a or not b:
        return ""
    if a == b:
        return power_name(a, 2)
    return f"{_wrap_factor(a)}·{_wrap_factor(b)}"


def div_name(a: str, b: str) -> str:
    if not a or not b:
        return ""
    return f"{_wrap_factor(a)}/{_wrap(b)}"


def power_name(name: str, n: int) -> str:
    """
    Canonical power names:
    - 'x^1'  -> 'x'
    - 'x^0'  -> '1'
    - 'x^2' ^ 3 -> 'x^6'
    """
    if not name:
        return ""
    if n == 0:
        return "1"
    if n == 1:
        return name
    m = _POWER_RE.match(name)
    if m and _ATOM_RE.fullmatch(name):
        base, exp = m.group("base"), int(m.group("exp")) * n
        return base if exp == 1 else f"{base}^{exp}"
    return f"{_wrap(name)}^{n}"


__all__ = ["sup", "mul_name", "div_name", "power_name"]
