"""Symbol definitions and references inside a single quest."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from questlens.resolve.models import Document, LineMatch, Range
from questlens.resolve.naming import get_base_symbol, get_symbol_name
from questlens.resolve.scanner import match_all_lines

SYMBOL_TYPES = ("Item", "Person", "Place", "Clock", "Foe")

_TYPES_ALTERNATION = "|".join(SYMBOL_TYPES)
_DEFINITION = re.compile(r"^\s*(?:" + _TYPES_ALTERNATION + r")\s+([a-zA-Z0-9._]+)")


@dataclass(frozen=True, slots=True)
class SymbolDefinition:
    """Where a symbol is declared and with which type keyword."""

    range: Range
    type: str


def parse_symbol(text: str) -> str | None:
    """Name of the symbol declared on this line, if any."""
    match = _DEFINITION.match(text)
    return match.group(1) if match else None


def _definition_regex(base: str) -> re.Pattern[str]:
    return re.compile(r"^(\s*)(" + _TYPES_ALTERNATION + r")\s+" + re.escape(base) + r"(?![a-zA-Z0-9._])")


def find_symbol_definition(document: Document, symbol: str) -> SymbolDefinition | None:
    """Find the declaration of a symbol; derived spellings are accepted."""
    regex = _definition_regex(get_base_symbol(symbol))
    for index in range(document.line_count):
        line = document.line_at(index)
        match = regex.match(line.text)
        if match:
            return SymbolDefinition(
                range=Range.of(index, match.end(1), index, match.end()),
                type=match.group(2),
            )
    return None


def find_all_symbol_definitions(document: Document) -> Iterator[LineMatch]:
    """Yield every symbol declaration line."""
    yield from match_all_lines(document, _DEFINITION)


def find_symbol_references(
    document: Document, symbol: str, include_declaration: bool = True
) -> Iterator[Range]:
    """Yield the name part of every derived occurrence of a symbol.

    ``symbol`` may be the bare name or any decorated spelling.
    """
    name = get_symbol_name(symbol)
    if not name:
        return
    occurrence = re.compile(r"(?<=[_=])" + re.escape(name) + r"(?=_)")
    declaration = _definition_regex("_" + name + "_")
    for index in range(document.line_count):
        text = document.line_at(index).text
        if not include_declaration and declaration.match(text):
            continue
        for match in occurrence.finditer(text):
            yield Range.of(index, match.start(), index, match.end())
