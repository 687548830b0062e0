"""Workspace document providers.

The resolvers never touch the filesystem themselves; cross-document queries
go through a ``Workspace`` that enumerates the quest documents to scan.
"""

from __future__ import annotations

import fnmatch
import os
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

import structlog

from questlens.config.constants import CLASSIFY_MAX_LINES
from questlens.config.models import WorkspaceConfig
from questlens.resolve.models import Document, TextDocument

logger = structlog.get_logger()

_QUEST_TABLE = re.compile(r"Quest(s|List)-[a-zA-Z]+\.txt$")
_QUEST_MARKER = re.compile(r"^\s*(Quest:\s|QRC:\s*$|QBN:\s*$)")


class Workspace(Protocol):
    """Enumerates every quest document visible to a query."""

    def enumerate_documents(self) -> list[Document]:
        """Return the documents to scan. May raise OSError on host I/O failure."""
        ...


def is_quest_table(file_name: str) -> bool:
    """Check if a file is a quest table (``Quests-Name.txt`` / ``QuestList-Name.txt``)."""
    return _QUEST_TABLE.search(file_name) is not None


def is_quest_document(document: Document, max_lines: int = CLASSIFY_MAX_LINES) -> bool:
    """Check if a text document is written in the quest language."""
    for index in range(min(document.line_count, max_lines)):
        if _QUEST_MARKER.match(document.line_at(index).text):
            return True
    return False


class StaticWorkspace:
    """A fixed set of in-memory documents."""

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents = list(documents)

    def enumerate_documents(self) -> list[Document]:
        return list(self._documents)


class FileSystemWorkspace:
    """Quest documents found under a directory tree."""

    def __init__(self, root: Path, config: WorkspaceConfig | None = None) -> None:
        self.root = root
        self.config = config or WorkspaceConfig()

    def _matches_glob(self, rel_path: str) -> bool:
        pattern = self.config.include_glob
        if fnmatch.fnmatch(rel_path, pattern):
            return True
        # "**/" also matches files directly under the root
        return pattern.startswith("**/") and fnmatch.fnmatch(rel_path, pattern[3:])

    def iter_paths(self) -> Iterator[Path]:
        """Candidate files, pruning excluded directories."""
        if not self.root.is_dir():
            raise NotADirectoryError(f"Workspace root is not a directory: {self.root}")
        excluded = set(self.config.excluded_dirs)
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in excluded)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                rel_path = path.relative_to(self.root).as_posix()
                if self._matches_glob(rel_path) and not is_quest_table(filename):
                    yield path

    def enumerate_documents(self) -> list[Document]:
        documents: list[Document] = []
        for path in self.iter_paths():
            document = TextDocument.from_path(path)
            if is_quest_document(document):
                documents.append(document)
        logger.debug("workspace_enumerated", root=str(self.root), documents=len(documents))
        return documents
