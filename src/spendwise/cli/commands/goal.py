"""Savings goal commands."""

import click
from spendwise.cli.error_handling import handle_domain_error, report_persistence
from spendwise.domain.errors import DomainError
from spendwise.utils.amount_parser import parse_amount
from spendwise.utils.currency import format_currency
from spendwise.utils.date_parser import end_of_day, parse_date


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("add")
@click.option("--title", required=True, help="What you are saving for")
@click.option("--target", required=True, help="Amount to save")
@click.option("--by", "target_date", required=True, help="Target date (YYYY-MM-DD or 'next month')")
@click.pass_context
def add_goal(ctx, title: str, target: str, target_date: str):
    """Add a savings goal."""
    session = ctx.obj["session"]

    try:
        amount = parse_amount(target)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        deadline = parse_date(target_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        result = session.add_savings_goal(title, amount, end_of_day(deadline))
    except DomainError as e:
        handle_domain_error(ctx, e)

    goal = result.value
    click.echo(f"Created savings goal '{goal.title}' (ID: {goal.id})")
    click.echo(f"  Target: {format_currency(goal.target_amount)} by {deadline}")
    report_persistence(result)


@goal_group.command("contribute")
@click.argument("goal_id")
@click.argument("amount")
@click.pass_context
def contribute(ctx, goal_id: str, amount: str):
    """Add AMOUNT to the savings goal GOAL_ID."""
    session = ctx.obj["session"]

    try:
        contribution = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        result = session.contribute_to_savings_goal(goal_id, contribution)
    except DomainError as e:
        handle_domain_error(ctx, e)

    goal = result.value
    click.echo(
        f"Saved {format_currency(contribution)} towards '{goal.title}': "
        f"{format_currency(goal.current_amount)} / {format_currency(goal.target_amount)}"
    )
    if goal.is_completed:
        click.echo("Goal reached!")
    report_persistence(result)


def register_commands(cli):
    """Register savings goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
