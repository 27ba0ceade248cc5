"""Challenge commands."""

import click
from spendwise.cli.error_handling import (
    handle_domain_error,
    report_persistence,
    report_view_warnings,
)
from spendwise.domain.catalog import CHALLENGE_TEMPLATES, build_challenge, get_template
from spendwise.domain.entities import ChallengeType
from spendwise.domain.errors import DomainError
from spendwise.utils.currency import format_currency

# Challenge types whose target is an amount of money rather than a day count
AMOUNT_TYPES = (ChallengeType.CATEGORY_LIMIT, ChallengeType.WEEKLY_SAVINGS)


def format_target(challenge_type: ChallengeType, value) -> str:
    if challenge_type in AMOUNT_TYPES:
        return format_currency(value)
    return str(int(value))


@click.group()
def challenges_group():
    """Join challenges and track their progress."""
    pass


@challenges_group.command("available")
def list_available():
    """List challenges that can be joined."""
    click.echo("\nAvailable challenges:")
    for template in CHALLENGE_TEMPLATES:
        click.echo(
            f"  {template.key:<16} {template.title} - {template.description} "
            f"({template.points_reward} points)"
        )


@challenges_group.command("list")
@click.pass_context
def list_challenges(ctx):
    """Show joined challenges with their progress."""
    session = ctx.obj["session"]

    try:
        views = session.get_challenge_views()
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not views:
        click.echo("No challenges joined. Run 'challenges available' to see options.")
        return

    click.echo(f"\n{'Challenge':<28} {'Progress':<30} {'Status':<10}")
    click.echo("-" * 70)
    for view in views:
        challenge = view.challenge
        if view.is_completed:
            status = "completed"
        elif view.is_expired:
            status = "expired"
        elif not challenge.is_active:
            status = "closed"
        else:
            status = "active"
        progress = (
            f"{format_target(challenge.type, view.current_progress)} / "
            f"{format_target(challenge.type, challenge.target)}"
        )
        click.echo(f"{challenge.title:<28} {progress:<30} {status:<10}")

    report_view_warnings(ctx)


@challenges_group.command("join")
@click.argument("key")
@click.pass_context
def join_challenge(ctx, key: str):
    """Join the challenge KEY (see 'challenges available')."""
    session = ctx.obj["session"]

    try:
        template = get_template(key)
        result = session.join_challenge(build_challenge(template, session.clock()))
    except DomainError as e:
        handle_domain_error(ctx, e)

    challenge = result.value
    click.echo(f"Joined '{challenge.title}' until {challenge.end_date:%Y-%m-%d %H:%M}")
    click.echo(f"  Reward: {challenge.points_reward} points")
    report_persistence(result)


def register_commands(cli):
    """Register challenge commands with main CLI."""
    cli.add_command(challenges_group, name="challenges")
