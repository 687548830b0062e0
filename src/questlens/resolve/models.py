"""Value types shared by every resolver.

Documents are immutable, line-indexed snapshots. Resolvers only read them;
all query results are transient and recomputed on demand.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based line and character offset."""

    line: int
    character: int


@dataclass(frozen=True, slots=True)
class Range:
    """Span between two positions on the same or different lines."""

    start: Position
    end: Position

    @classmethod
    def of(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
        return cls(Position(start_line, start_char), Position(end_line, end_char))


@dataclass(frozen=True, slots=True)
class Location:
    """A range inside an identified document."""

    uri: str
    range: Range


@dataclass(frozen=True, slots=True)
class TextLine:
    """One immutable line of a document."""

    line_number: int
    text: str

    @property
    def range(self) -> Range:
        return Range.of(self.line_number, 0, self.line_number, len(self.text))

    @property
    def first_non_whitespace_index(self) -> int:
        return len(self.text) - len(self.text.lstrip())


@dataclass(frozen=True, slots=True)
class LineMatch:
    """A scanned line with the capture of interest."""

    line: TextLine
    symbol: str


class Document(Protocol):
    """Read-only view of a quest document supplied by the host."""

    @property
    def uri(self) -> str: ...

    @property
    def line_count(self) -> int: ...

    def line_at(self, index: int) -> TextLine: ...


def split_lines(text: str) -> list[str]:
    """Split on LF and CRLF only; a trailing newline adds no line.

    Form feeds and Unicode separators are ordinary characters in quest text.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class TextDocument:
    """In-memory document snapshot."""

    __slots__ = ("_uri", "_lines")

    def __init__(self, uri: str, lines: list[str] | tuple[str, ...]) -> None:
        self._uri = uri
        self._lines = tuple(lines)

    @classmethod
    def from_text(cls, text: str, uri: str = "untitled:quest") -> TextDocument:
        return cls(uri, split_lines(text))

    @classmethod
    def from_lines(cls, lines: list[str], uri: str = "untitled:quest") -> TextDocument:
        return cls(uri, lines)

    @classmethod
    def from_path(cls, path: Path, encoding: str = "utf-8") -> TextDocument:
        """Read a document from disk. Raises OSError on I/O failure."""
        text = path.read_text(encoding=encoding, errors="replace")
        return cls(path.resolve().as_uri(), split_lines(text))

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_at(self, index: int) -> TextLine:
        return TextLine(index, self._lines[index])

    def get_text(self) -> str:
        return "\n".join(self._lines)

    def __repr__(self) -> str:
        return f"TextDocument(uri={self._uri!r}, lines={len(self._lines)})"


class CancellationToken:
    """Advisory stop signal for long cross-document queries."""

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()
