"""qlens tasks command - list task declarations."""

import json
from pathlib import Path

import click

from questlens.cli.utils import find_workspace_root, load_context, load_document
from questlens.resolve.tasks import find_all_tasks, find_all_variables, parse_task_definition


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks_command(file: Path, as_json: bool) -> None:
    """List the tasks and variables declared in FILE.

    Global variable links are listed when the tables directory is configured.
    """
    document = load_document(file)
    _, context = load_context(find_workspace_root(file))

    entries = []
    for match in [*find_all_tasks(document), *find_all_variables(document, context.global_vars)]:
        definition = parse_task_definition(match.line.text, context.global_vars)
        entries.append(
            {
                "symbol": match.symbol,
                "kind": definition.kind.value if definition else None,
                "global_var": definition.global_var_name if definition else None,
                "line": match.line.line_number,
            }
        )

    if as_json:
        click.echo(json.dumps(entries))
        return
    if not entries:
        click.echo("No tasks")
        return
    for entry in entries:
        suffix = f" -> {entry['global_var']}" if entry["global_var"] else ""
        click.echo(f"{entry['line']}: {entry['symbol']} ({entry['kind']}){suffix}")
