"""Core module exports."""

from questlens.core.errors import (
    ConfigError,
    ErrorCode,
    QuestLensError,
    TableError,
)
from questlens.core.logging import (
    clear_query_id,
    configure_logging,
    get_logger,
    get_query_id,
    set_query_id,
)

__all__ = [
    # Errors
    "QuestLensError",
    "ConfigError",
    "ErrorCode",
    "TableError",
    # Logging
    "clear_query_id",
    "configure_logging",
    "get_logger",
    "get_query_id",
    "set_query_id",
]
