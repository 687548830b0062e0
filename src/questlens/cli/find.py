"""qlens definition / references commands - navigate symbols, tasks, messages and quests."""

from pathlib import Path

import click
import structlog

from questlens.cli.utils import echo_locations, find_workspace_root, load_context, load_document
from questlens.resolve.ops import find_definition, find_references

logger = structlog.get_logger()


def _check_line(line: int, line_count: int) -> None:
    if not 0 <= line < line_count:
        raise click.BadParameter(f"line {line} is outside the document (0-{line_count - 1})", param_hint="--line")


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("word")
@click.option("--line", "line", type=int, required=True, help="Zero-based line where WORD appears")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: nearest directory with .questlens, or the file's directory)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def definition_command(file: Path, word: str, line: int, root: Path | None, as_json: bool) -> None:
    """Show where WORD is declared.

    WORD may be a symbol, a task, a message id or alias, or a quest name.
    """
    document = load_document(file)
    _check_line(line, document.line_count)
    _, context = load_context(root or find_workspace_root(file))

    locations = find_definition(document, word, line, context)
    logger.debug("definition_command_done", file=str(file), word=word, results=len(locations))
    echo_locations(locations, as_json)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("word")
@click.option("--line", "line", type=int, required=True, help="Zero-based line where WORD appears")
@click.option("--no-declaration", is_flag=True, help="Leave the declaration out of the results")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (default: nearest directory with .questlens, or the file's directory)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def references_command(
    file: Path, word: str, line: int, no_declaration: bool, root: Path | None, as_json: bool
) -> None:
    """List every reference to WORD."""
    document = load_document(file)
    _check_line(line, document.line_count)
    _, context = load_context(root or find_workspace_root(file))

    locations = find_references(document, word, line, context, include_declaration=not no_declaration)
    logger.debug("references_command_done", file=str(file), word=word, results=len(locations))
    echo_locations(locations, as_json)
