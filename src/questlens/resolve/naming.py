"""Symbol naming rules.

Symbols are declared as ``_name_``. Message text refers to them through
derived spellings that change how the value is rendered: one to three
leading underscores or one or two leading ``=`` signs, always followed by
exactly one trailing underscore (``__name_``, ``=name_``, ``==name_``).
All functions here are pure.
"""

from __future__ import annotations

import re

_DERIVED_SYMBOL = re.compile(r"(?:_{1,3}|={1,2})[a-zA-Z0-9_.-]+_")
_LEADING_UNDERSCORES = re.compile(r"^_+")
_LEADING_EQUALS = re.compile(r"^=+")
_TRAILING_UNDERSCORE = re.compile(r"_$")
_PLACEHOLDER = re.compile(r"^\$\{_(.*)_\}$")


def is_symbol(word: str) -> bool:
    """Check if a word has the lexical shape of a (derived) symbol."""
    return _DERIVED_SYMBOL.search(word) is not None


def find_all_symbols_in_line(text: str) -> list[str]:
    """Find all symbol occurrences with any accepted prefix."""
    return _DERIVED_SYMBOL.findall(text)


def get_base_symbol(derived: str) -> str:
    """Normalize a derived occurrence to its canonical ``_name_`` form.

    ``__symbol_`` -> ``_symbol_``, ``=symbol_`` -> ``_symbol_``,
    ``symbol`` -> ``symbol``.
    """
    return _LEADING_EQUALS.sub("_", _LEADING_UNDERSCORES.sub("_", derived, count=1), count=1)


def get_symbol_name(symbol: str) -> str:
    """Strip all prefixes and one trailing underscore.

    ``=symbol_`` -> ``symbol``, ``symbol`` -> ``symbol``.
    """
    name = _LEADING_UNDERSCORES.sub("", symbol, count=1)
    name = _LEADING_EQUALS.sub("", name, count=1)
    return _TRAILING_UNDERSCORE.sub("", name, count=1)


def make_symbol_regex(symbol: str) -> re.Pattern[str]:
    """Build a pattern matching every derivation of a symbol.

    A bare name (no decoration) is matched literally.
    """
    name = get_symbol_name(symbol)
    if name != symbol:
        return re.compile(r"(_{1,4}|={1,2})" + re.escape(name) + "_")
    return re.compile(re.escape(name))


def symbol_follows_naming_conventions(symbol: str) -> bool:
    """Check if a symbol is written as ``_symbol_``."""
    return symbol.startswith("_") and symbol.endswith("_")


def force_symbol_naming_conventions(symbol: str) -> str:
    """Add the missing leading and/or trailing underscore."""
    if not symbol.startswith("_"):
        symbol = "_" + symbol
    if not symbol.endswith("_"):
        symbol += "_"
    return symbol


def symbol_placeholder_to_type(placeholder: str) -> str:
    """Convert a snippet placeholder to its symbol type: ``${_clock_}`` -> ``Clock``."""
    match = _PLACEHOLDER.match(placeholder)
    name = match.group(1) if match else placeholder
    return name[:1].upper() + name[1:]
