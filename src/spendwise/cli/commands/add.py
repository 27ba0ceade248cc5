"""Add expense command."""

import click
from spendwise.cli.error_handling import handle_domain_error, report_persistence
from spendwise.domain.entities import ExpenseCategory
from spendwise.domain.errors import DomainError
from spendwise.utils.amount_parser import parse_amount
from spendwise.utils.currency import format_currency


@click.command("add")
@click.option("--amount", required=True, help="Expense amount (e.g., 15000 or 'UGX 15,000')")
@click.option(
    "--category",
    required=True,
    help=f"Category ({', '.join(c.value for c in ExpenseCategory)})",
)
@click.option("--description", required=True, help="What the money was spent on (max 100 characters)")
@click.option("--recurring", is_flag=True, help="Mark as a recurring expense")
@click.pass_context
def add_expense(ctx, amount: str, category: str, description: str, recurring: bool):
    """Log an expense. Every expense earns 1 point.

    Examples:
        spendwise add --amount 15000 --category food --description "Lunch"
        spendwise add --amount "UGX 120,000" --category bills --description "Electricity" --recurring
    """
    session = ctx.obj["session"]

    try:
        expense_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    points_before = session.profile.points if session.profile else 0
    try:
        result = session.append_expense(
            expense_amount, category, description, is_recurring=recurring
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    expense = result.value
    earned = session.profile.points - points_before
    click.echo(f"Added expense {expense.id}")
    click.echo(f"  Amount: {format_currency(expense.amount)}")
    click.echo(f"  Category: {expense.category.value}")
    click.echo(f"  Description: {expense.description}")
    click.echo(f"  Points earned: +{earned} (total {session.profile.points})")
    report_persistence(result)


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_expense)
