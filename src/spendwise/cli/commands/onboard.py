"""Onboarding command."""

import click
from spendwise.cli.error_handling import handle_domain_error, report_persistence
from spendwise.domain.errors import DomainError
from spendwise.utils.amount_parser import parse_amount
from spendwise.utils.currency import format_currency


@click.command("onboard")
@click.option("--name", required=True, help="Your name")
@click.option("--email", required=True, help="Your email address")
@click.option("--income", required=True, help="Monthly income (e.g., 2,000,000)")
@click.option("--budget", required=True, help="Monthly spending budget (e.g., 1,500,000)")
@click.pass_context
def onboard(ctx, name: str, email: str, income: str, budget: str):
    """Create your profile.

    Examples:
        spendwise onboard --name Amina --email amina@example.com --income 2000000 --budget 1500000
    """
    session = ctx.obj["session"]

    try:
        monthly_income = parse_amount(income)
        monthly_budget = parse_amount(budget)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        result = session.create_profile(name, email, monthly_income, monthly_budget)
    except DomainError as e:
        handle_domain_error(ctx, e)

    profile = result.value
    click.echo(f"Welcome, {profile.name}! Your profile is ready.")
    click.echo(f"  Monthly income: {format_currency(profile.monthly_income)}")
    click.echo(f"  Monthly budget: {format_currency(profile.monthly_budget)}")
    report_persistence(result)


def register_commands(cli):
    """Register onboard command with main CLI."""
    cli.add_command(onboard)
