"""qlens next-id / message-range / messages commands - inspect QRC messages."""

import json
from pathlib import Path

import click

from questlens.cli.utils import find_workspace_root, load_context, load_document, range_to_dict
from questlens.resolve.messages import (
    find_all_messages,
    get_message_id_for_position,
    get_message_range,
    is_message_id,
    next_available_message_id,
)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--start", "start", type=click.IntRange(min=0), default=None, help="First id to probe")
@click.option("--line", "line", type=click.IntRange(min=0), default=None, help="Zero-based insertion line")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def next_id_command(file: Path, start: int | None, line: int | None, as_json: bool) -> None:
    """Print the first free message id in FILE.

    With --line, the id follows the closest additional message above that
    line. Otherwise probing starts at --start, or at the configured
    messages.first_free_id.
    """
    if start is not None and line is not None:
        raise click.UsageError("--start and --line are mutually exclusive")

    document = load_document(file)
    config, _ = load_context(find_workspace_root(file))
    baseline = config.messages.first_free_id

    if line is not None:
        message_id = get_message_id_for_position(document, line, baseline)
    else:
        message_id = next_available_message_id(document, start if start is not None else baseline)

    if as_json:
        click.echo(json.dumps({"id": message_id}))
    else:
        click.echo(message_id)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("line", type=click.IntRange(min=0))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def message_range_command(file: Path, line: int, as_json: bool) -> None:
    """Print the span of the message declared at zero-based LINE."""
    document = load_document(file)
    if line >= document.line_count:
        raise click.BadParameter(f"line {line} is outside the document", param_hint="LINE")

    span = get_message_range(document, line)
    if as_json:
        click.echo(json.dumps(range_to_dict(span)))
    else:
        click.echo(f"{span.start.line}-{span.end.line}")


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def messages_command(file: Path, as_json: bool) -> None:
    """List the messages declared in FILE: default messages first."""
    document = load_document(file)
    entries = [
        {
            "message": match.symbol,
            "kind": "additional" if is_message_id(match.symbol) else "default",
            "line": match.line.line_number,
        }
        for match in find_all_messages(document)
    ]

    if as_json:
        click.echo(json.dumps(entries))
        return
    if not entries:
        click.echo("No messages")
        return
    for entry in entries:
        click.echo(f"{entry['line']}: {entry['message']} ({entry['kind']})")
