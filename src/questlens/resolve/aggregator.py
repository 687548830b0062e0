"""Cross-document line search.

Fans a line scan out over every document of a workspace. Each document is an
independent unit of work and is scanned on a thread pool; per-document hits
are merged back in enumeration order, so a "first hit per document" search
reports exactly one line for every document that has a match.

This is best-effort tooling: a workspace that cannot be enumerated, or a
document that fails to read, produces an empty result instead of an error.
Cancellation is checked before enumeration and before each document scan;
a cancelled query returns whatever was collected.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import structlog

from questlens.config.constants import DEFAULT_SCAN_WORKERS
from questlens.core.errors import QuestLensError
from questlens.resolve.models import CancellationToken, Document, Location, Range, TextLine
from questlens.resolve.scanner import PatternLike, find_lines
from questlens.resolve.workspace import Workspace

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class WorkspaceLine:
    """A matching line and the document it belongs to."""

    document: Document
    line: TextLine


def _is_cancelled(token: CancellationToken | None) -> bool:
    return token is not None and token.is_cancellation_requested


def _scan_document(
    document: Document,
    regex: re.Pattern[str],
    one_per_document: bool,
    token: CancellationToken | None,
) -> list[WorkspaceLine]:
    if _is_cancelled(token):
        return []
    hits: list[WorkspaceLine] = []
    for line in find_lines(document, regex):
        hits.append(WorkspaceLine(document, line))
        if one_per_document:
            break
    return hits


def find_lines_in_all_quests(
    workspace: Workspace,
    pattern: PatternLike,
    one_per_document: bool = False,
    token: CancellationToken | None = None,
    max_workers: int = DEFAULT_SCAN_WORKERS,
) -> list[WorkspaceLine]:
    """Find all lines matching a pattern in every workspace document.

    Args:
        workspace: Document provider.
        pattern: Pattern searched on each line.
        one_per_document: Stop at the first match of each document.
        token: Optional cancellation signal.
        max_workers: Thread pool size; 1 scans sequentially.
    """
    if _is_cancelled(token):
        return []

    regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)

    try:
        documents = list(workspace.enumerate_documents())
    except (OSError, QuestLensError) as e:
        logger.warning("workspace_enumeration_failed", error=str(e))
        return []

    if not documents or _is_cancelled(token):
        return []

    def scan(document: Document) -> list[WorkspaceLine]:
        return _scan_document(document, regex, one_per_document, token)

    try:
        if max_workers <= 1 or len(documents) == 1:
            per_document = [scan(document) for document in documents]
        else:
            with ThreadPoolExecutor(
                max_workers=min(max_workers, len(documents)),
                thread_name_prefix="questlens-scan",
            ) as executor:
                per_document = list(executor.map(scan, documents))
    except OSError as e:
        logger.warning("workspace_scan_failed", error=str(e))
        return []

    results = [hit for hits in per_document for hit in hits]
    logger.debug(
        "workspace_scan_complete",
        pattern=regex.pattern,
        documents=len(documents),
        hits=len(results),
        cancelled=_is_cancelled(token),
    )
    return results


def find_references(
    workspace: Workspace,
    name: str,
    pattern: PatternLike,
    token: CancellationToken | None = None,
    max_workers: int = DEFAULT_SCAN_WORKERS,
) -> list[Location]:
    """Locate ``name`` on every workspace line matching ``pattern``."""
    word = re.compile(r"(?<![a-zA-Z0-9_])" + re.escape(name) + r"(?![a-zA-Z0-9_])")
    locations: list[Location] = []
    for hit in find_lines_in_all_quests(workspace, pattern, token=token, max_workers=max_workers):
        match = word.search(hit.line.text)
        if match:
            line_number = hit.line.line_number
            locations.append(
                Location(hit.document.uri, Range.of(line_number, match.start(), line_number, match.end()))
            )
    return locations
