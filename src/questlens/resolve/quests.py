"""Quest resolution across the workspace.

A quest is declared by a ``Quest: NAME`` line in its own document and started
from other quests with ``start quest NAME``. Quests of the classic family can
also be started by index (``start quest 12`` for ``S0000012``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from questlens.config.constants import DEFAULT_SCAN_WORKERS, QUEST_NAME_DIGITS
from questlens.resolve import aggregator
from questlens.resolve.models import CancellationToken, Document, Location, Position, Range
from questlens.resolve.scanner import match_all_lines
from questlens.resolve.workspace import Workspace

_QUEST_DEFINITION = re.compile(r"^\s*Quest:\s+([a-zA-Z0-9_]+)")
_QUEST_INVOCATION = re.compile(r"^\s*start\s+quest\s+([a-zA-Z0-9_]+)")
_QUEST_REFERENCE = re.compile(r"^\s*(Quest:|start\s+quest)\s+[a-zA-Z0-9_]+")
_DISPLAY_NAME = re.compile(r"^\s*DisplayName:\s(.*)$")


@dataclass(frozen=True, slots=True)
class Quest:
    """A quest declaration found in the workspace."""

    pattern: str
    display_name: str
    location: Location


def is_quest_definition(text: str) -> bool:
    return _QUEST_DEFINITION.match(text) is not None


def is_quest_invocation(text: str) -> bool:
    return _QUEST_INVOCATION.match(text) is not None


def is_quest_reference(text: str, name: str | None = None) -> bool:
    """Check if a line declares or starts a quest, optionally a specific one."""
    if name is None:
        return _QUEST_REFERENCE.match(text) is not None
    regex = re.compile(r"^\s*(Quest:|start\s+quest)\s+" + re.escape(name) + r"\b")
    return regex.match(text) is not None


def find_quest_name(document: Document) -> str:
    """Name of the quest declared in a document, or an empty string."""
    for match in match_all_lines(document, _QUEST_DEFINITION):
        return match.symbol
    return ""


def find_display_name(document: Document) -> str:
    """Human readable name of a quest, or an empty string."""
    for match in match_all_lines(document, _DISPLAY_NAME):
        return match.symbol
    return ""


def quest_index_to_name(index: str) -> str:
    """Name of a classic quest from its index: ``12`` -> ``S0000012``.

    Names that are not an index are returned unchanged.
    """
    if not index.isdigit():
        return index
    return "S" + index.zfill(QUEST_NAME_DIGITS)


def find_all_quests(
    workspace: Workspace,
    token: CancellationToken | None = None,
    max_workers: int = DEFAULT_SCAN_WORKERS,
) -> list[Quest]:
    """Find the quest declared by each workspace document."""
    quests: list[Quest] = []
    for hit in aggregator.find_lines_in_all_quests(
        workspace, _QUEST_DEFINITION, one_per_document=True, token=token, max_workers=max_workers
    ):
        match = _QUEST_DEFINITION.match(hit.line.text)
        if match:
            position = Position(hit.line.line_number, 0)
            quests.append(
                Quest(
                    pattern=match.group(1),
                    display_name=find_display_name(hit.document),
                    location=Location(hit.document.uri, Range(position, position)),
                )
            )
    return quests


def find_quest_definition(
    workspace: Workspace,
    name: str,
    token: CancellationToken | None = None,
    max_workers: int = DEFAULT_SCAN_WORKERS,
) -> Quest | None:
    for quest in find_all_quests(workspace, token, max_workers):
        if quest.pattern == name:
            return quest
    return None


def find_quest_references(
    workspace: Workspace,
    name: str,
    token: CancellationToken | None = None,
    max_workers: int = DEFAULT_SCAN_WORKERS,
) -> list[Location]:
    """Find every declaration and invocation of a quest in the workspace."""
    return aggregator.find_references(workspace, name, _QUEST_REFERENCE, token, max_workers)
