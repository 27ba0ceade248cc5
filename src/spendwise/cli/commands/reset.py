"""Reset command."""

import click
from spendwise.cli.error_handling import report_persistence


@click.command("reset")
@click.confirmation_option(prompt="This erases your profile, expenses and challenges. Continue?")
@click.pass_context
def reset(ctx):
    """Erase all stored data and start over."""
    session = ctx.obj["session"]
    result = session.reset()
    click.echo("All data erased. Run 'onboard' to start again.")
    report_persistence(result)


def register_commands(cli):
    """Register reset command with main CLI."""
    cli.add_command(reset)
