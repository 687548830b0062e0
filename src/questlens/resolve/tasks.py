"""Task resolution.

A task is declared in one of four ways, checked in this order:

- ``_foo_ task:``                  Standard
- ``until _foo_ performed:``       PersistUntil
- ``variable _foo_``               Variable
- ``<GlobalVarName> _foo_``        GlobalVarLink

The last form only exists when the caller supplies the names of known global
variables through a ``GlobalVariableContext``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from questlens.config.constants import DEFAULT_SCAN_WORKERS
from questlens.resolve.aggregator import find_references
from questlens.resolve.models import Document, LineMatch, Location, Range, TextLine
from questlens.resolve.scanner import find_line, find_lines, match_all_lines
from questlens.resolve.tables import ActionKind, ActionTable, load_global_vars

if TYPE_CHECKING:
    from questlens.resolve.models import CancellationToken
    from questlens.resolve.workspace import Workspace

_NAME = r"[a-zA-Z0-9._-]+"

_STANDARD = re.compile(r"^\s*(" + _NAME + r")\s*task:")
_PERSIST_UNTIL = re.compile(r"^\s*until\s+(" + _NAME + r")\s+performed")
_VARIABLE = re.compile(r"^\s*variable\s+(" + _NAME + r")")
_ANY_TASK = re.compile(r"^\s*(?:until\s+)?(" + _NAME + r")\s*(?:task:|performed)")
_TASK_BLOCK_END = re.compile(r"^\s*(\s*(-.*)?|variable.*|.*task:|until.*performed.*)\s*$")


class TaskKind(Enum):
    """How a task was declared."""

    STANDARD = "standard"
    PERSIST_UNTIL = "persist_until"
    VARIABLE = "variable"
    GLOBAL_VAR_LINK = "global_var_link"


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    """A parsed task declaration."""

    symbol: str
    kind: TaskKind
    global_var_name: str | None = None


class GlobalVariableContext:
    """Known global variable names and their numeric ids.

    The alternation over names is built once here; each name is escaped so
    names containing regex metacharacters match literally.
    """

    __slots__ = ("_variables", "_pattern")

    def __init__(self, variables: Mapping[str, int] | None = None) -> None:
        self._variables = dict(variables or {})
        if self._variables:
            # Longest first so a name never shadows a longer one it prefixes
            names = sorted(self._variables, key=len, reverse=True)
            alternation = "|".join(re.escape(name) for name in names)
            self._pattern: re.Pattern[str] | None = re.compile(
                r"^\s*(" + alternation + r")\s+(" + _NAME + r")"
            )
        else:
            self._pattern = None

    @classmethod
    def from_table(cls, path: Path) -> GlobalVariableContext:
        return cls(load_global_vars(path))

    @property
    def pattern(self) -> re.Pattern[str] | None:
        """Pattern capturing (name, symbol), or None when no names are known."""
        return self._pattern

    @property
    def names(self) -> list[str]:
        return list(self._variables)

    def get(self, name: str) -> int | None:
        return self._variables.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __len__(self) -> int:
        return len(self._variables)


EMPTY_CONTEXT = GlobalVariableContext()


def parse_task_definition(text: str, context: GlobalVariableContext | None = None) -> TaskDefinition | None:
    """Classify a task-defining line."""
    match = _STANDARD.match(text)
    if match:
        return TaskDefinition(match.group(1), TaskKind.STANDARD)

    match = _PERSIST_UNTIL.match(text)
    if match:
        return TaskDefinition(match.group(1), TaskKind.PERSIST_UNTIL)

    match = _VARIABLE.match(text)
    if match:
        return TaskDefinition(match.group(1), TaskKind.VARIABLE)

    if context is not None and context.pattern is not None:
        match = context.pattern.match(text)
        if match:
            return TaskDefinition(match.group(2), TaskKind.GLOBAL_VAR_LINK, global_var_name=match.group(1))

    return None


def get_task_name(text: str, context: GlobalVariableContext | None = None) -> str | None:
    """Symbol of the task declared on this line, if any."""
    definition = parse_task_definition(text, context)
    return definition.symbol if definition else None


def get_global_variable(text: str, context: GlobalVariableContext) -> tuple[str, str] | None:
    """(global variable name, linked symbol) declared on this line."""
    if context.pattern is None:
        return None
    match = context.pattern.match(text)
    return (match.group(1), match.group(2)) if match else None


def _make_task_regex(symbol: str, context: GlobalVariableContext | None) -> re.Pattern[str]:
    escaped = re.escape(symbol)
    tail = r"(?![a-zA-Z0-9._-])"
    alternatives = [
        escaped + r"\s*task:",
        r"until\s+" + escaped + r"\s+performed",
        r"variable\s+" + escaped + tail,
    ]
    if context is not None and context.pattern is not None:
        names = sorted(context.names, key=len, reverse=True)
        alternatives.append("(?:" + "|".join(re.escape(n) for n in names) + r")\s+" + escaped + tail)
    return re.compile(r"^\s*(?:" + "|".join(alternatives) + ")")


def find_task_definition(
    document: Document, symbol: str, context: GlobalVariableContext | None = None
) -> TextLine | None:
    """Find the line declaring a task."""
    return find_line(document, _make_task_regex(symbol, context))


def find_task_references(
    document: Document,
    symbol: str,
    include_declaration: bool = True,
    context: GlobalVariableContext | None = None,
) -> Iterator[Range]:
    """Yield the first whole-word occurrence of the task symbol on each line."""
    declaration = _make_task_regex(symbol, context)
    word = re.compile(r"(?<![a-zA-Z0-9._-])" + re.escape(symbol) + r"(?![a-zA-Z0-9._-])")
    for line in find_lines(document, word):
        if not include_declaration and declaration.search(line.text):
            continue
        match = word.search(line.text)
        if match:
            yield Range.of(line.line_number, match.start(), line.line_number, match.end())


def find_all_tasks(document: Document) -> Iterator[LineMatch]:
    """Yield Standard and PersistUntil task declarations."""
    yield from match_all_lines(document, _ANY_TASK)


def find_all_variables(document: Document, context: GlobalVariableContext | None = None) -> Iterator[LineMatch]:
    """Yield Variable declarations, then global variable links.

    Variables are tasks which are only set or unset.
    """
    yield from match_all_lines(document, _VARIABLE)
    if context is not None and context.pattern is not None:
        yield from match_all_lines(document, context.pattern, 2)


def get_task_range(document: Document, definition_line: int) -> Range:
    """Span of a task block: declaration up to the line before the next block."""
    line = definition_line + 1
    while line < document.line_count and not _TASK_BLOCK_END.match(document.line_at(line).text):
        line += 1
    line -= 1
    return Range.of(definition_line, 0, line, len(document.line_at(line).text))


def is_conditional_task(document: Document, line_number: int, actions: ActionTable) -> bool:
    """Whether the first line of the task body is a condition."""
    if document.line_count <= line_number + 1:
        return False
    text = document.line_at(line_number + 1).text.strip()
    space = text.find(" ")
    if space <= 0:
        return False
    action = actions.find_action(text, text[:space])
    return action is not None and action.kind is ActionKind.CONDITION


def find_global_var_references(
    workspace: Workspace,
    name: str,
    context: GlobalVariableContext,
    token: CancellationToken | None = None,
    max_workers: int = DEFAULT_SCAN_WORKERS,
) -> list[Location]:
    """Find every link to a global variable across the workspace."""
    if name not in context or context.pattern is None:
        return []
    return find_references(workspace, name, context.pattern, token=token, max_workers=max_workers)
