"""CLI error handling helpers."""

import click

from spendwise.domain.errors import DomainError
from spendwise.session import MutationResult


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def report_persistence(result: MutationResult) -> None:
    """Warn when a change was applied but could not be saved."""
    if result.persistence_error is not None:
        click.echo(
            f"Warning: change kept for this session but not saved: {result.persistence_error}",
            err=True,
        )


def report_view_warnings(ctx: click.Context) -> None:
    """Warn about save failures that happened while building a view."""
    for warning in ctx.obj["session"].pop_warnings():
        click.echo(f"Warning: could not save progress: {warning}", err=True)
