"""Shared fixtures for CLI tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

MAINQ = """\
Quest: MAINQ
DisplayName: Main Quest
QRC:

QuestComplete:  [1004]
Done.


Message: 1011
Find =dungeon_.


QBN:
Place _dungeon_ remote dungeon
Crossroads _crossed_

_start_ task:
    say 1011
    start quest SIDEQ

variable _talked_
"""

SIDEQ = """\
Quest: SIDEQ
QBN:
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep the user's global config and env overrides out of CLI runs."""
    monkeypatch.setattr("questlens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml")
    for name in ("QUESTLENS__LOGGING__LEVEL", "QUESTLENS__TABLES__TABLES_PATH", "QUESTLENS__MESSAGES__FIRST_FREE_ID"):
        monkeypatch.delenv(name, raising=False)
    yield
    # The CLI binds handlers to the runner's streams
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace with two quests, a repo config and quest tables."""
    root = tmp_path / "quests"
    (root / ".questlens").mkdir(parents=True)
    (root / ".questlens" / "config.yaml").write_text("tables:\n  tables_path: Tables\n")
    tables = root / "Tables"
    tables.mkdir()
    (tables / "Quests-StaticMessages.txt").write_text("schema: id,*name\n1004, QuestComplete\n")
    (tables / "Quests-GlobalVars.txt").write_text("schema: n,*name\n14, Crossroads\n")
    (root / "MAINQ.txt").write_text(MAINQ)
    (root / "SIDEQ.txt").write_text(SIDEQ)
    return root
