"""Structured logging for qlens queries.

Every event carries the id of the query that produced it, so the lines of one
``qlens references`` run can be picked out of a shared log file. Outputs come
from ``LoggingConfig``: console (stderr/stdout) or absolute file paths, each
rendered as console text or JSON, each with its own threshold.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from questlens.config.models import LoggingConfig, LogOutputConfig

_query_id: ContextVar[str | None] = ContextVar("query_id", default=None)

_log_file_path: Path | None = None

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_query_id() -> str | None:
    return _query_id.get()


def set_query_id(query_id: str | None = None) -> str:
    """Bind a query id to the current context; a short random id by default."""
    qid = query_id or uuid4().hex[:12]
    _query_id.set(qid)
    return qid


def clear_query_id() -> None:
    _query_id.set(None)


def get_log_file_path() -> Path | None:
    """First file output of the active configuration, if any."""
    return _log_file_path


def _add_query_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if qid := get_query_id():
        event_dict["query_id"] = qid
    return event_dict


def _level(name: str | None, default: int) -> int:
    return _LEVELS.get(name.upper(), default) if name else default


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "WARNING",
    verbose: bool = False,
) -> None:
    """Configure structlog over stdlib handlers.

    Args:
        config: Logging section of the loaded config. When omitted a single
            stderr output is built from ``json_format`` and ``level``.
        json_format: Render the default output as JSON
        level: Level of the default output
        verbose: Force DEBUG on the root level and on every output
    """
    from questlens.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    root_level = logging.DEBUG if verbose else _level(config.level, logging.WARNING)
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_query_id,  # type: ignore[list-item]
    ]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(root_level)

    global _log_file_path
    _log_file_path = None

    for output in config.outputs:
        handler = _create_handler(output)
        handler.setLevel(logging.DEBUG if verbose else _level(output.level, root_level))
        handler.setFormatter(_create_formatter(output, shared_processors))
        root_logger.addHandler(handler)
        if isinstance(handler, logging.FileHandler) and _log_file_path is None:
            _log_file_path = Path(output.destination)


def _create_handler(output: LogOutputConfig) -> logging.Handler:
    if output.destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if output.destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(output.destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def _create_formatter(
    output: LogOutputConfig, shared_processors: list[structlog.types.Processor]
) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        stream = sys.stdout if output.destination == "stdout" else sys.stderr
        is_tty = output.destination in ("stderr", "stdout") and stream.isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=is_tty, pad_event_to=0, pad_level=False)
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
