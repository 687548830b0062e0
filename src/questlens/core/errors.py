"""questlens error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Tables

Expected absence (no definition, no match, empty workspace) is never an
error; lookups return ``None`` or an empty collection instead.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Tables (3xxx)
    TABLE_FILE_NOT_FOUND = 3001
    TABLE_PARSE_ERROR = 3002


@dataclass(frozen=True, slots=True)
class QuestLensError(Exception):
    """Base error with structured context for CLI and JSON output."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'TABLE_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(QuestLensError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class TableError(QuestLensError):
    """Errors raised while loading language, module or static tables."""

    @classmethod
    def file_not_found(cls, path: str) -> "TableError":
        return cls(
            code=ErrorCode.TABLE_FILE_NOT_FOUND,
            message=f"Table file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "TableError":
        return cls(
            code=ErrorCode.TABLE_PARSE_ERROR,
            message=f"Failed to parse table at {path}: {reason}",
            details={"path": path, "reason": reason},
        )
