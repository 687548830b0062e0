"""Query facade: definition and references for a word under the cursor.

Dispatches a word to the resolvers in a fixed order. The first category that
recognizes the word answers the query.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from questlens.config.constants import DEFAULT_SCAN_WORKERS
from questlens.config.models import QuestLensConfig
from questlens.resolve.messages import find_message_definition, find_message_references, get_message_range, is_message_id
from questlens.resolve.models import CancellationToken, Document, Location, Range
from questlens.resolve.naming import get_base_symbol, is_symbol
from questlens.resolve.quests import (
    find_quest_definition,
    find_quest_references,
    is_quest_reference,
    quest_index_to_name,
)
from questlens.resolve.symbols import find_symbol_definition, find_symbol_references
from questlens.resolve.tables import ResolutionTables, global_vars_path
from questlens.resolve.tasks import (
    EMPTY_CONTEXT,
    GlobalVariableContext,
    find_global_var_references,
    find_task_definition,
    find_task_references,
)
from questlens.resolve.workspace import FileSystemWorkspace, StaticWorkspace, Workspace

logger = structlog.get_logger()


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a query needs besides the document itself."""

    tables: ResolutionTables = field(default_factory=ResolutionTables)
    global_vars: GlobalVariableContext = EMPTY_CONTEXT
    workspace: Workspace = field(default_factory=StaticWorkspace)
    max_workers: int = DEFAULT_SCAN_WORKERS

    @classmethod
    def from_config(cls, config: QuestLensConfig, workspace_root: Path | None = None) -> ResolutionContext:
        """Load tables and global variables; scan ``workspace_root`` for quests."""
        tables = ResolutionTables.from_config(config.tables, workspace_root)
        path = global_vars_path(config.tables, workspace_root)
        global_vars = GlobalVariableContext.from_table(path) if path else EMPTY_CONTEXT
        workspace: Workspace = (
            FileSystemWorkspace(workspace_root, config.workspace) if workspace_root else StaticWorkspace()
        )
        return cls(
            tables=tables,
            global_vars=global_vars,
            workspace=workspace,
            max_workers=config.workspace.max_workers,
        )


def _line_text(document: Document, line_number: int) -> str:
    if 0 <= line_number < document.line_count:
        return document.line_at(line_number).text
    return ""


def _task_location(document: Document, symbol: str, context: ResolutionContext) -> Location | None:
    line = find_task_definition(document, symbol, context.global_vars)
    if line is None:
        return None
    start = line.text.find(symbol)
    if start < 0:
        return Location(document.uri, line.range)
    return Location(document.uri, Range.of(line.line_number, start, line.line_number, start + len(symbol)))


def _message_location(document: Document, word: str, context: ResolutionContext) -> Location | None:
    position = find_message_definition(document, word)
    if position is None and not is_message_id(word):
        alias_id = context.tables.messages.get_id(word)
        if alias_id is not None:
            position = find_message_definition(document, str(alias_id))
    if position is None:
        return None
    return Location(document.uri, Range(position, get_message_range(document, position.line).end))


def find_definition(
    document: Document,
    word: str,
    line_number: int,
    context: ResolutionContext | None = None,
    token: CancellationToken | None = None,
) -> list[Location]:
    """Find where the word at ``line_number`` is declared.

    Clock symbols resolve to both their symbol and their task declaration.
    """
    context = context or ResolutionContext()

    if is_quest_reference(_line_text(document, line_number), word):
        quest = find_quest_definition(context.workspace, quest_index_to_name(word), token, context.max_workers)
        logger.debug("definition_resolved", word=word, kind="quest", found=quest is not None)
        return [quest.location] if quest else []

    if is_symbol(word):
        symbol = find_symbol_definition(document, word)
        if symbol is not None:
            locations = [Location(document.uri, symbol.range)]
            if symbol.type == "Clock":
                task = _task_location(document, get_base_symbol(word), context)
                if task is not None:
                    locations.append(task)
            logger.debug("definition_resolved", word=word, kind="symbol", found=True)
            return locations

    task = _task_location(document, word, context)
    if task is not None:
        logger.debug("definition_resolved", word=word, kind="task", found=True)
        return [task]

    message = _message_location(document, word, context)
    if message is not None:
        logger.debug("definition_resolved", word=word, kind="message", found=True)
        return [message]

    logger.debug("definition_resolved", word=word, kind=None, found=False)
    return []


def find_references(
    document: Document,
    word: str,
    line_number: int,
    context: ResolutionContext | None = None,
    include_declaration: bool = True,
    token: CancellationToken | None = None,
) -> list[Location]:
    """Find all references to the word at ``line_number``.

    Categories are tried in order: symbol, task, message, quest, global
    variable. The first one that recognizes the word answers.
    """
    context = context or ResolutionContext()

    if is_symbol(word) and find_symbol_definition(document, word):
        ranges = find_symbol_references(document, word, include_declaration)
        return [Location(document.uri, r) for r in ranges]

    if find_task_definition(document, word, context.global_vars):
        ranges = find_task_references(document, word, include_declaration, context.global_vars)
        return [Location(document.uri, r) for r in ranges]

    messages = [
        Location(document.uri, r)
        for r in find_message_references(document, word, context.tables, include_declaration)
    ]
    if messages:
        return messages

    if is_quest_reference(_line_text(document, line_number)):
        return find_quest_references(context.workspace, word, token, context.max_workers)

    return find_global_var_references(context.workspace, word, context.global_vars, token, context.max_workers)
