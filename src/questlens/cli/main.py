"""QuestLens CLI - qlens command."""

import click

from questlens.cli.find import definition_command, references_command
from questlens.cli.messages import message_range_command, messages_command, next_id_command
from questlens.cli.quests import quests_command
from questlens.cli.tasks import tasks_command
from questlens.core.logging import configure_logging, set_query_id


@click.group()
@click.version_option(version="0.1.0", prog_name="qlens")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """QuestLens - Navigation queries for Daggerfall quest scripts.

    Logging starts on stderr; commands that load a workspace switch to the
    outputs of its ``logging`` config section.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(verbose=verbose)
    set_query_id()


cli.add_command(definition_command, name="definition")
cli.add_command(references_command, name="references")
cli.add_command(next_id_command, name="next-id")
cli.add_command(message_range_command, name="message-range")
cli.add_command(messages_command, name="messages")
cli.add_command(tasks_command, name="tasks")
cli.add_command(quests_command, name="quests")


if __name__ == "__main__":
    cli()
