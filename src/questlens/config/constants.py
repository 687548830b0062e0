"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are DSL conventions and implementation limits.

For configurable values, see models.py.
"""

# =============================================================================
# DSL Conventions
# =============================================================================

FIRST_FREE_MESSAGE_ID = 1011
"""Conventional first free slot for custom messages."""

QUEST_NAME_DIGITS = 7
"""Digits after the leading 'S' in S000nnnn quest names."""

STATIC_MESSAGES_TABLE = "Quests-StaticMessages.txt"
"""Static message alias table file name."""

GLOBAL_VARS_TABLE = "Quests-GlobalVars.txt"
"""Global variable table file name."""

MODULE_SUFFIX = ".dfmodule.json"
"""Suffix of action/condition module files."""

# =============================================================================
# Implementation Limits
# =============================================================================

MAX_WORKERS_LIMIT = 64
"""Upper bound for cross-document scan threads."""

CLASSIFY_MAX_LINES = 200
"""Lines inspected when deciding whether a text file is a quest script."""

DEFAULT_SCAN_WORKERS = 4
"""Default thread pool size for cross-document scans."""
