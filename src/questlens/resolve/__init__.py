"""Resolve module exports."""

from questlens.resolve.aggregator import WorkspaceLine, find_lines_in_all_quests
from questlens.resolve.messages import (
    MessageBlock,
    find_message_definition,
    find_message_references,
    get_message_id_for_position,
    get_message_range,
    next_available_message_id,
)
from questlens.resolve.models import (
    CancellationToken,
    Document,
    Location,
    Position,
    Range,
    TextDocument,
    TextLine,
)
from questlens.resolve.ops import ResolutionContext, find_definition, find_references
from questlens.resolve.quests import Quest, find_all_quests
from questlens.resolve.tables import ResolutionTables
from questlens.resolve.tasks import GlobalVariableContext, TaskDefinition, TaskKind, parse_task_definition
from questlens.resolve.workspace import FileSystemWorkspace, StaticWorkspace, Workspace

__all__ = [
    # Documents
    "CancellationToken",
    "Document",
    "Location",
    "Position",
    "Range",
    "TextDocument",
    "TextLine",
    # Workspace
    "FileSystemWorkspace",
    "StaticWorkspace",
    "Workspace",
    "WorkspaceLine",
    "find_lines_in_all_quests",
    # Resolvers
    "GlobalVariableContext",
    "MessageBlock",
    "Quest",
    "ResolutionTables",
    "TaskDefinition",
    "TaskKind",
    "find_all_quests",
    "find_message_definition",
    "find_message_references",
    "get_message_id_for_position",
    "get_message_range",
    "next_available_message_id",
    "parse_task_definition",
    # Queries
    "ResolutionContext",
    "find_definition",
    "find_references",
]
