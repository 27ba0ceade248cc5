"""Profile commands."""

import click
from spendwise.cli.error_handling import handle_domain_error, report_persistence
from spendwise.domain.budget import savings_rate
from spendwise.domain.errors import DomainError, ValidationError, no_profile
from spendwise.utils.amount_parser import parse_amount
from spendwise.utils.currency import format_currency, format_percentage


@click.group()
def profile_group():
    """View and edit your profile."""
    pass


@profile_group.command("show")
@click.pass_context
def show_profile(ctx):
    """Show profile, badges and savings goals."""
    session = ctx.obj["session"]
    profile = session.profile
    if profile is None:
        handle_domain_error(ctx, ValidationError(no_profile()))

    click.echo(f"\n{profile.name} <{profile.email}>")
    click.echo(f"  Points: {profile.points}  Level: {profile.level}  Badges: {len(profile.badges)}")
    click.echo(f"  Monthly income: {format_currency(profile.monthly_income)}")
    click.echo(f"  Monthly budget: {format_currency(profile.monthly_budget)}")
    rate = savings_rate(profile.monthly_income, profile.monthly_budget)
    click.echo(f"  Planned savings rate: {format_percentage(rate)}")

    if profile.badges:
        click.echo("\nBadges:")
        for badge in profile.badges:
            click.echo(f"  {badge.icon} {badge.name} - {badge.description}")

    if profile.savings_goals:
        click.echo("\nSavings goals:")
        for goal in profile.savings_goals:
            done = " (completed)" if goal.is_completed else ""
            click.echo(
                f"  [{goal.id}] {goal.title}: {format_currency(goal.current_amount)} / "
                f"{format_currency(goal.target_amount)} by {goal.target_date.date()}{done}"
            )


@profile_group.command("update")
@click.option("--name", help="New name")
@click.option("--email", help="New email address")
@click.option("--income", help="New monthly income")
@click.option("--budget", help="New monthly budget")
@click.pass_context
def update_profile(ctx, name: str | None, email: str | None, income: str | None, budget: str | None):
    """Update profile fields. Only the options given are changed."""
    session = ctx.obj["session"]

    changes: dict[str, object] = {}
    if name is not None:
        changes["name"] = name
    if email is not None:
        changes["email"] = email
    try:
        if income is not None:
            changes["monthly_income"] = parse_amount(income)
        if budget is not None:
            changes["monthly_budget"] = parse_amount(budget)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        result = session.update_profile(**changes)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated profile for {result.value.name}")
    report_persistence(result)


def register_commands(cli):
    """Register profile commands with main CLI."""
    cli.add_command(profile_group, name="profile")
