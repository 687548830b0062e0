"""CLI utilities."""

import json
from pathlib import Path
from typing import Any

import click

from questlens.config.loader import REPO_CONFIG_DIR, load_config
from questlens.config.models import QuestLensConfig
from questlens.core.errors import QuestLensError
from questlens.core.logging import configure_logging
from questlens.resolve.models import Location, Position, Range, TextDocument
from questlens.resolve.ops import ResolutionContext


def find_workspace_root(start_path: Path) -> Path:
    """Find the workspace root for a quest file.

    Walks up the directory tree looking for a .questlens directory. Falls
    back to the starting directory when none is found.
    """
    start = start_path.resolve()
    if start.is_file():
        start = start.parent

    current = start
    while current != current.parent:
        if (current / REPO_CONFIG_DIR).is_dir():
            return current
        current = current.parent

    return start


def _verbose() -> bool:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.obj, dict):
        return False
    return bool(ctx.obj.get("verbose"))


def load_context(workspace_root: Path) -> tuple[QuestLensConfig, ResolutionContext]:
    """Load config and resolution tables for a workspace.

    The config's ``logging`` section replaces the startup logging; ``-v``
    still forces DEBUG.

    Raises:
        click.ClickException: If the config or a table cannot be loaded
    """
    try:
        config = load_config(workspace_root)
        configure_logging(config=config.logging, verbose=_verbose())
        context = ResolutionContext.from_config(config, workspace_root)
    except QuestLensError as e:
        raise click.ClickException(str(e)) from e
    return config, context


def load_document(path: Path) -> TextDocument:
    try:
        return TextDocument.from_path(path)
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e}") from e


def position_to_dict(position: Position) -> dict[str, int]:
    return {"line": position.line, "character": position.character}


def range_to_dict(range_: Range) -> dict[str, Any]:
    return {"start": position_to_dict(range_.start), "end": position_to_dict(range_.end)}


def location_to_dict(location: Location) -> dict[str, Any]:
    return {"uri": location.uri, "range": range_to_dict(location.range)}


def format_location(location: Location) -> str:
    start = location.range.start
    return f"{location.uri}:{start.line}:{start.character}"


def echo_locations(locations: list[Location], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps([location_to_dict(loc) for loc in locations]))
        return
    if not locations:
        click.echo("No results")
        return
    for location in locations:
        click.echo(format_location(location))
