"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (QUESTLENS__SECTION__KEY)
3. Repo YAML (.questlens/config.yaml)
4. Global YAML (~/.config/questlens/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    QUESTLENS__<SECTION>__<KEY>=<VALUE>

Examples:
    QUESTLENS__LOGGING__LEVEL=DEBUG
    QUESTLENS__WORKSPACE__MAX_WORKERS=8
    QUESTLENS__TABLES__TABLES_PATH=/opt/daggerfall/Tables
    QUESTLENS__MESSAGES__FIRST_FREE_ID=1011
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from questlens.config.constants import (
    DEFAULT_SCAN_WORKERS,
    FIRST_FREE_MESSAGE_ID,
    MAX_WORKERS_LIMIT,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        QUESTLENS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. Queries log scan details at DEBUG.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class WorkspaceConfig(BaseModel):
    """Workspace document discovery.

    Env vars:
        QUESTLENS__WORKSPACE__INCLUDE_GLOB: Glob for candidate quest files
        QUESTLENS__WORKSPACE__MAX_WORKERS: Threads used for cross-document scans
    """

    include_glob: str = Field(
        default="**/*.txt",
        description="Glob (relative to the workspace root) selecting candidate quest files.",
    )
    excluded_dirs: list[str] = Field(
        default_factory=lambda: [".git", ".hg", ".svn", ".questlens", "node_modules"],
        description="Directory names never traversed during discovery.",
    )
    max_workers: int = Field(
        default=DEFAULT_SCAN_WORKERS,
        description="Thread pool size for per-document scans. 1 scans sequentially.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if not (1 <= v <= MAX_WORKERS_LIMIT):
            raise ValueError(f"max_workers must be 1-{MAX_WORKERS_LIMIT}, got {v}")
        return v


class TablesConfig(BaseModel):
    """Static language data used to classify lines.

    Env vars:
        QUESTLENS__TABLES__TABLES_PATH: Directory holding Quests-*.txt tables
        QUESTLENS__TABLES__LANGUAGE_PATH: Keyword definitions (JSON)
    """

    tables_path: str | None = Field(
        default=None,
        description="Directory with Quests-StaticMessages.txt and Quests-GlobalVars.txt.",
    )
    language_path: str | None = Field(
        default=None,
        description="JSON file with symbol-defining keyword definitions.",
    )
    modules: list[str] = Field(
        default_factory=list,
        description=(
            "Module files with action and condition signatures. "
            "Entries without the .dfmodule.json suffix get it appended."
        ),
    )


class MessagesConfig(BaseModel):
    """Message id allocation.

    Env vars:
        QUESTLENS__MESSAGES__FIRST_FREE_ID: Baseline for new custom messages
    """

    first_free_id: int = Field(
        default=FIRST_FREE_MESSAGE_ID,
        description="First id probed when no additional message precedes the cursor.",
    )

    @field_validator("first_free_id")
    @classmethod
    def validate_first_free_id(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"first_free_id must be non-negative, got {v}")
        return v


class QuestLensConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    tables: TablesConfig = Field(default_factory=TablesConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
