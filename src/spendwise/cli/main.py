"""Main CLI entry point."""

import logging

import click
from sqlalchemy.exc import SQLAlchemyError

from spendwise.cli.error_handling import handle_domain_error
from spendwise.domain import errors
from spendwise.domain.errors import CorruptStateError, PersistenceError
from spendwise.store.factories import create_sqlite_store
from spendwise.session import SessionController

# Import and register all commands at module level
from spendwise.cli.commands import (
    onboard,
    add,
    dashboard,
    profile,
    challenges,
    goal,
    reset,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SPENDWISE_DB_PATH environment variable)",
    envvar="SPENDWISE_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """SpendWise - Budget tracking that rewards good habits.

    Log expenses against your monthly budget, earn points for staying under
    your daily allowance and complete challenges for extra rewards.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    # Open the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            store = create_sqlite_store(database_path=db_path)
            store.connect()
            store.initialize_schema()
        except SQLAlchemyError as e:
            handle_domain_error(ctx, PersistenceError(errors.database_unavailable(db_path, e)))
        ctx.call_on_close(store.disconnect)

        session = SessionController(store)
        recovered = session.load()
        if isinstance(recovered, CorruptStateError):
            click.echo(f"Warning: stored data was reset: {recovered}", err=True)
        elif recovered is not None:
            click.echo(f"Warning: could not read stored data: {recovered}", err=True)
        ctx.obj["store"] = store
        ctx.obj["session"] = session


# Register all commands
onboard.register_commands(cli)
add.register_commands(cli)
dashboard.register_commands(cli)
profile.register_commands(cli)
challenges.register_commands(cli)
goal.register_commands(cli)
reset.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
