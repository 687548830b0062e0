"""Line scanner: regex-parameterized iteration over document lines.

Every scan walks the document top to bottom and yields lazily, so callers
that only need the first hit stop reading as soon as they have it. Scans are
restartable: each call starts a fresh generator over the same snapshot.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

import structlog

from questlens.resolve.models import Document, LineMatch, Range, TextLine

logger = structlog.get_logger()

PatternLike = str | re.Pattern[str]

_EMPTY_OR_COMMENT = re.compile(r"^\s*(-.*)?\s*$")
_FIRST_WORD = re.compile(r"^\s*([a-zA-Z_.']+)")
_COMMENT_PREFIX = re.compile(r"^\s*-+")
_COMMENT_STRIP = re.compile(r"^\s*-+\s*")
_QRC_MARKER = re.compile(r"^\s*QRC:\s*$")
_QBN_MARKER = re.compile(r"^\s*QBN:\s*$")


def _compile(pattern: PatternLike) -> re.Pattern[str]:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


def is_empty_or_comment(text: str) -> bool:
    """Check if a line is blank or a dash comment."""
    return _EMPTY_OR_COMMENT.match(text) is not None


def find_lines(document: Document, pattern: PatternLike) -> Iterator[TextLine]:
    """Yield every line where the pattern is found, in ascending order."""
    regex = _compile(pattern)
    for index in range(document.line_count):
        line = document.line_at(index)
        if regex.search(line.text):
            yield line


def find_line(document: Document, pattern: PatternLike) -> TextLine | None:
    """Return the first line where the pattern is found."""
    return next(find_lines(document, pattern), None)


def first_line(document: Document, predicate: Callable[[TextLine], bool]) -> TextLine | None:
    """Return the first non-blank, non-comment line satisfying the predicate."""
    for index in range(document.line_count):
        line = document.line_at(index)
        if not is_empty_or_comment(line.text) and predicate(line):
            return line
    return None


def match_all_lines(document: Document, pattern: PatternLike, group: int = 1) -> Iterator[LineMatch]:
    """Yield each matching line together with the requested capture group.

    A pattern without the requested group cannot produce symbols; this is a
    caller bug, so it is logged and the scan yields nothing.
    """
    regex = _compile(pattern)
    if regex.groups < group:
        logger.error(
            "scan_pattern_missing_group",
            pattern=regex.pattern,
            group=group,
            groups=regex.groups,
        )
        return
    for index in range(document.line_count):
        line = document.line_at(index)
        match = regex.search(line.text)
        if match:
            yield LineMatch(line, match.group(group) or "")


def get_first_word(text: str) -> str | None:
    """Get the first word in a line."""
    match = _FIRST_WORD.match(text)
    return match.group(1) if match else None


def get_word_index(text: str, word: str) -> int:
    """Index of ``word`` among the space-separated words of ``text``, or -1."""
    words = text.strip().split(" ")
    return words.index(word) if word in words else -1


def find_word_position(text: str, word_index: int) -> int:
    """Character offset of the nth whitespace-separated word.

    For example word 2 in ``give item _note_ to _vampleader_`` starts at 10.
    """
    inside_word = False
    for i, char in enumerate(text):
        if not char.isspace():
            if not inside_word:
                if word_index == 0:
                    return i
                word_index -= 1
                inside_word = True
        else:
            inside_word = False
    return 0


def word_range(line: TextLine, word: str) -> Range:
    """Range of the first occurrence of ``word``; empty range at column 0 if absent."""
    index = line.text.find(word)
    if index == -1:
        return Range.of(line.line_number, 0, line.line_number, 0)
    return Range.of(line.line_number, index, line.line_number, index + len(word))


def trim_range(line: TextLine) -> Range:
    """Range of the line without surrounding whitespace."""
    return Range.of(
        line.line_number,
        line.first_non_whitespace_index,
        line.line_number,
        len(line.text.rstrip()),
    )


def make_summary(document: Document, definition_line: int) -> str:
    """Join the dash-comment block directly above a definition."""
    parts: list[str] = []
    line = definition_line - 1
    while line >= 0:
        text = document.line_at(line).text
        if not _COMMENT_PREFIX.match(text):
            break
        parts.insert(0, _COMMENT_STRIP.sub("", text))
        line -= 1
    return " ".join(parts).strip()


@dataclass(frozen=True, slots=True)
class QuestBlocks:
    """Line spans of the QRC (text) and QBN (logic) sections."""

    qrc: Range
    qbn: Range


def get_quest_blocks_ranges(document: Document) -> QuestBlocks:
    """Locate the QRC and QBN sections."""
    qrc = find_line(document, _QRC_MARKER)
    qbn = find_line(document, _QBN_MARKER)
    return QuestBlocks(
        qrc=Range.of(qrc.line_number if qrc else 0, 0, qbn.line_number - 1 if qbn else 0, 0),
        qbn=Range.of(qbn.line_number if qbn else 0, 0, document.line_count, 0),
    )
