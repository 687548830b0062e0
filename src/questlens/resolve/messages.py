"""Message resolution.

Messages are declared in the QRC section in two ways:

- default messages, ``Name: [id]``, whose id is fixed by the engine and
  whose name is a static alias usable in place of the id;
- additional messages, ``Message: id``, with a free custom id.

The declaration line is followed by a free-text body that ends at two
consecutive blank lines or at a blank line followed by the next declaration.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from questlens.config.constants import FIRST_FREE_MESSAGE_ID
from questlens.resolve.models import Document, LineMatch, Position, Range, TextLine
from questlens.resolve.scanner import find_line, find_lines, get_first_word, get_word_index, match_all_lines
from questlens.resolve.tables import ParameterTypes, ResolutionTables, action_has_parameter_at_position

_ADDITIONAL_MESSAGE = re.compile(r"^\s*Message:\s+([0-9]+)")
_STATIC_MESSAGE = re.compile(r"^\s*(.*):\s+\[\s*([0-9]+)\s*\]\s*$")
_DEFAULT_MESSAGE_NAME = re.compile(r"^\s*([a-zA-Z]+):\s*\[\s*[0-9]+\s*\]")
_NUMBER = re.compile(r"\s*[0-9]+\s*")
_BLOCK_DECLARATION = re.compile(r"^\s*(-.*|.*\[\s*[0-9]+\s*\]|Message:\s*[0-9]+|QBN:)\s*$")


@dataclass(frozen=True, slots=True)
class MessageMatch:
    """A message declaration line; ``is_default`` for ``Name: [id]`` declarations."""

    line: TextLine
    is_default: bool


@dataclass(frozen=True, slots=True)
class StaticMessage:
    """Id and name of a default message declaration."""

    id: int
    name: str


def is_message_id(id_or_name: str) -> bool:
    return _NUMBER.fullmatch(id_or_name) is not None


def parse_message_id(text: str) -> int | None:
    """Id of the additional message declared on this line."""
    match = _ADDITIONAL_MESSAGE.match(text)
    return int(match.group(1)) if match else None


def get_static_message(text: str) -> StaticMessage | None:
    """Id and name of the default message declared on this line."""
    match = _STATIC_MESSAGE.match(text)
    if match:
        return StaticMessage(id=int(match.group(2)), name=match.group(1))
    return None


def _default_by_id(message_id: str) -> re.Pattern[str]:
    return re.compile(r"^\s*\S+:\s*\[\s*(" + re.escape(message_id) + r")\s*\]")


def _additional_by_id(message_id: str) -> re.Pattern[str]:
    return re.compile(r"^\s*Message:\s+" + re.escape(message_id) + r"(?![0-9])")


def _default_by_name(name: str) -> re.Pattern[str]:
    return re.compile(r"^\s*" + re.escape(name) + r"\s*:\s*\[\s*\d+\s*\]")


def find_message_by_index(document: Document, message_id: int | str) -> MessageMatch | None:
    """Find a message from its numeric id; default messages take precedence."""
    message_id = str(message_id).strip()

    line = find_line(document, _default_by_id(message_id))
    if line:
        return MessageMatch(line, is_default=True)

    line = find_line(document, _additional_by_id(message_id))
    if line:
        return MessageMatch(line, is_default=False)

    return None


def find_message_by_name(document: Document, name: str) -> TextLine | None:
    """Find a default message from its name. Only default messages have a name."""
    return find_line(document, _default_by_name(name))


def find_message_definition(document: Document, id_or_name: str) -> Position | None:
    """Position of a message declaration.

    Default messages found by id point at the id token; additional messages
    and messages found by name point at the start of the line.
    """
    if is_message_id(id_or_name):
        message = find_message_by_index(document, id_or_name)
        if message is None:
            return None
        if message.is_default:
            match = _default_by_id(id_or_name.strip()).match(message.line.text)
            if match:
                return Position(message.line.line_number, match.start(1))
        return Position(message.line.line_number, 0)

    line = find_message_by_name(document, id_or_name)
    return Position(line.line_number, 0) if line else None


def find_message_references(
    document: Document,
    id_or_name: str,
    tables: ResolutionTables | None = None,
    include_declaration: bool = True,
) -> Iterator[Range]:
    """Find all references to a message by id or by static alias.

    A line counts as a reference when it is the declaration itself (only
    if ``include_declaration``), or when its first word introduces a symbol
    definition or action whose signature takes a message at that position.
    Searching a name also searches its numeric id; searching an id also
    searches each of its aliases. Those extra passes never report the
    declaration, and results are not deduplicated across passes.
    """
    tables = tables or ResolutionTables()
    query_is_id = is_message_id(id_or_name)
    query = id_or_name.strip() if query_is_id else id_or_name
    escaped = re.escape(query)
    declaration = (
        re.compile(r"^\s*([a-zA-Z]+:\s+\[\s*" + escaped + r"\s*\]|Message:\s+" + escaped + r"(?![0-9]))")
        if query_is_id
        else _default_by_name(query)
    )

    def scan(word: str, is_id: bool, allow_declaration: bool) -> Iterator[Range]:
        word_regex = re.compile(r"\b" + re.escape(word) + r"\b")
        kind = ParameterTypes.MESSAGE_ID if is_id else ParameterTypes.MESSAGE_NAME
        for line in find_lines(document, word_regex):
            match = word_regex.search(line.text)
            if match is None:
                continue
            span = Range.of(line.line_number, match.start(), line.line_number, match.end())

            if declaration.search(line.text):
                if allow_declaration and include_declaration:
                    yield span
                continue

            first_word = get_first_word(line.text)
            if not first_word:
                continue

            definition = tables.definitions.find_definition(first_word, line.text)
            if definition is not None:
                if any(m.signature in (ParameterTypes.MESSAGE, kind) for m in definition.matches):
                    yield span
                continue

            action = tables.actions.find_action(line.text, first_word)
            if action is not None:
                index = get_word_index(line.text, word)
                if action_has_parameter_at_position(action, index, ParameterTypes.MESSAGE, kind):
                    yield span

    yield from scan(query, query_is_id, True)

    if not query_is_id:
        alias_id = tables.messages.get_id(query)
        if alias_id is not None:
            yield from scan(str(alias_id), True, False)
    else:
        for alias in tables.messages.get_aliases(int(query)):
            yield from scan(alias, False, False)


def find_all_messages(document: Document) -> Iterator[LineMatch]:
    """Yield all default messages (by name), then all additional messages (by id)."""
    yield from match_all_lines(document, _DEFAULT_MESSAGE_NAME)
    yield from match_all_lines(document, _ADDITIONAL_MESSAGE)


def next_available_message_id(document: Document, start_id: int | str) -> str:
    """First id at or after ``start_id`` not used by any message."""
    message_id = int(start_id)
    while find_message_by_index(document, message_id):
        message_id += 1
    return str(message_id)


def get_message_id_for_position(
    document: Document, line_number: int, baseline: int = FIRST_FREE_MESSAGE_ID
) -> str:
    """Free id for a message inserted at ``line_number``.

    Follows the closest additional message above the line; without one,
    probes from ``baseline``.
    """
    for index in range(min(line_number, document.line_count - 1), -1, -1):
        message_id = parse_message_id(document.line_at(index).text)
        if message_id is not None:
            return next_available_message_id(document, message_id + 1)
    return next_available_message_id(document, baseline)


class BlockState(Enum):
    SCANNING = "scanning"
    AT_END = "at_end"


class MessageBlock:
    """Cursor detecting the extent of a message body line by line.

    The cursor starts on the declaration line. Each ``is_inside`` call moves
    it one line forward and reports whether that line still belongs to the
    block; once the end is detected the block stays at its end.
    """

    def __init__(self, document: Document, line_number: int) -> None:
        self._document = document
        self._line_number = line_number
        self._state = BlockState.SCANNING

    @property
    def current_line(self) -> int:
        return self._line_number

    @property
    def state(self) -> BlockState:
        return self._state

    def is_inside(self, target_line: int | None = None) -> bool:
        """Advance and check that the current line is inside the block.

        With ``target_line``, keep advancing until the cursor reaches it or
        the block ends, and report whether the block survived that far.
        """
        while self._state is BlockState.SCANNING:
            self._line_number += 1
            if self._line_number >= self._document.line_count:
                self._state = BlockState.AT_END
                break

            text = self._document.line_at(self._line_number).text
            if not text.strip() and self._next_line_is_block_ending():
                self._state = BlockState.AT_END
                break

            if target_line is None or target_line <= self._line_number:
                return True
        return False

    def _next_line_is_block_ending(self) -> bool:
        next_line = self._line_number + 1
        if next_line >= self._document.line_count:
            return False
        text = self._document.line_at(next_line).text
        return not text.strip() or _BLOCK_DECLARATION.match(text) is not None


def get_message_range(document: Document, definition_line: int) -> Range:
    """Line span of a message: declaration through the last body line."""
    block = MessageBlock(document, definition_line)
    last_line = definition_line
    while block.is_inside():
        last_line = block.current_line
    return Range.of(definition_line, 0, last_line, len(document.line_at(last_line).text))
