"""qlens quests command - list quests in a workspace."""

import json
from pathlib import Path

import click

from questlens.cli.utils import format_location, load_context, location_to_dict
from questlens.resolve.quests import find_all_quests


@click.command()
@click.argument("root", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def quests_command(root: Path, as_json: bool) -> None:
    """List every quest declared under ROOT.

    ROOT is the workspace directory (default: current directory).
    """
    root = root.resolve()
    _, context = load_context(root)
    quests = find_all_quests(context.workspace, max_workers=context.max_workers)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "name": quest.pattern,
                        "display_name": quest.display_name,
                        "location": location_to_dict(quest.location),
                    }
                    for quest in quests
                ]
            )
        )
        return

    if not quests:
        click.echo("No quests found")
        return
    for quest in quests:
        title = f" - {quest.display_name}" if quest.display_name else ""
        click.echo(f"{quest.pattern}{title}")
        click.echo(f"  {format_location(quest.location)}")
