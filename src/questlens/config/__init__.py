"""Config module exports."""

from questlens.config.loader import QuestLensSettings, load_config
from questlens.config.models import (
    LoggingConfig,
    MessagesConfig,
    QuestLensConfig,
    TablesConfig,
    WorkspaceConfig,
)

__all__ = [
    "load_config",
    "QuestLensConfig",
    "QuestLensSettings",
    "LoggingConfig",
    "MessagesConfig",
    "TablesConfig",
    "WorkspaceConfig",
]
