"""Dashboard command."""

import click
from spendwise.cli.error_handling import handle_domain_error, report_view_warnings
from spendwise.domain.entities import StatusBand
from spendwise.domain.errors import DomainError
from spendwise.utils.currency import format_currency, format_percentage

STATUS_MESSAGES = {
    StatusBand.ON_TRACK: "You're doing amazing! Keep up the great work!",
    StatusBand.MINDFUL: "You're on track! Stay mindful of your spending.",
    StatusBand.NEAR_LIMIT: "Almost at your budget limit. Consider slowing down.",
    StatusBand.OVER_BUDGET: "Over budget this month. Let's plan better for next month!",
}


@click.command("dashboard")
@click.pass_context
def show_dashboard(ctx):
    """Show this month's budget, today's spending and top categories."""
    session = ctx.obj["session"]

    try:
        view = session.get_dashboard_view()
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nHello, {session.profile.name}!  Points: {view.points}  Level: {view.level}")
    click.echo("-" * 60)
    click.echo(f"{'Spent this month':<20} {format_currency(view.total_spent_this_month):>20}")
    click.echo(f"{'Budget':<20} {format_currency(session.profile.monthly_budget):>20}")
    click.echo(f"{'Remaining':<20} {format_currency(view.remaining):>20}")
    click.echo(f"{'Used':<20} {format_percentage(view.percentage_used):>20}")
    click.echo(STATUS_MESSAGES[view.status_band])
    click.echo("-" * 60)
    status = "under" if view.is_under_daily_budget else "over"
    click.echo(
        f"Today: {format_currency(view.today_spent)} of "
        f"{format_currency(view.daily_budget)} daily budget ({status})"
    )

    if view.top_categories:
        click.echo("\nTop categories this month:")
        for category, total in view.top_categories:
            click.echo(f"  {category.value:<15} {format_currency(total):>20}")

    if view.recent_expenses:
        click.echo("\nRecent expenses:")
        for expense in view.recent_expenses:
            click.echo(
                f"  {expense.date:%Y-%m-%d %H:%M}  {expense.description:<30} "
                f"{expense.category.value:<15} {format_currency(expense.amount):>15}"
            )

    report_view_warnings(ctx)


def register_commands(cli):
    """Register dashboard command with main CLI."""
    cli.add_command(show_dashboard)
