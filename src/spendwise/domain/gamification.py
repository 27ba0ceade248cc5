"""Points, levels, badges and challenge evaluation.

Every function here takes the current state and returns new values; the
session controller decides what to keep and persist. Awards that must happen
at most once are guarded by state that travels with the result: the
last-bonus-date marker for the daily bonus, ``Challenge.is_completed`` for
challenge rewards and badge ids for badges.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from spendwise.domain import errors
from spendwise.domain.budget import daily_budget, is_under_daily_budget
from spendwise.domain.entities import (
    Badge,
    BadgeCategory,
    Challenge,
    ChallengeType,
    Expense,
    Profile,
    SavingsGoal,
)
from spendwise.domain.errors import ValidationError
from spendwise.domain.ledger import (
    as_local,
    daily_totals,
    expenses_between,
    expenses_on_day,
    local_day,
    sum_amounts,
)
from spendwise.domain.validation import require_positive

logger = logging.getLogger(__name__)

EXPENSE_LOGGED_POINTS = 1
DAILY_BUDGET_BONUS_POINTS = 5
POINTS_PER_LEVEL = 100

# Rules judged per whole calendar day
DAY_BASED_TYPES = (
    ChallengeType.DAILY_BUDGET,
    ChallengeType.NO_SPEND_DAY,
    ChallengeType.WEEKLY_SAVINGS,
)


@dataclass(frozen=True)
class DailyBonusResult:
    """Outcome of a daily bonus check."""

    profile: Profile
    last_bonus_date: Optional[str]
    awarded: bool


@dataclass(frozen=True)
class ChallengeEvaluation:
    """Outcome of evaluating one challenge."""

    challenge: Challenge
    newly_completed: bool
    is_expired: bool


def level_for_points(points: int) -> int:
    """Level reached with ``points`` cumulative points."""
    return 1 + points // POINTS_PER_LEVEL


def award_badge(profile: Profile, badge: Badge) -> Profile:
    """Add ``badge`` to the profile unless a badge with its id is present."""
    if profile.has_badge(badge.id):
        return profile
    logger.info("Awarded badge %s to profile %s", badge.id, profile.id)
    return replace(profile, badges=profile.badges + (badge,))


def level_badge(level: int, now: datetime) -> Badge:
    return Badge(
        id=f"level-{level}",
        name=f"Level {level}",
        description=f"Reached level {level}",
        icon="⭐",
        earned_at=now,
        category=BadgeCategory.MILESTONE,
    )


def add_points(profile: Profile, points: int, now: datetime) -> Profile:
    """Return a profile with ``points`` added and the level recomputed.

    Each level newly reached earns a milestone badge.

    Raises:
        ValueError: If ``points`` is negative
    """
    if points < 0:
        raise ValueError(f"Points can only be added, got {points}")
    total = profile.points + points
    previous_level = level_for_points(profile.points)
    new_level = level_for_points(total)
    updated = replace(profile, points=total, level=new_level)
    for reached in range(previous_level + 1, new_level + 1):
        updated = award_badge(updated, level_badge(reached, now))
    return updated


def award_expense_logged(profile: Profile, now: datetime) -> Profile:
    """Award the points earned by every appended expense."""
    return add_points(profile, EXPENSE_LOGGED_POINTS, now)


def evaluate_daily_bonus(
    profile: Profile,
    ledger: Sequence[Expense],
    now: datetime,
    last_bonus_date: Optional[str],
) -> DailyBonusResult:
    """Award the daily-budget bonus at most once per calendar day.

    The bonus needs at least one expense today, today's spend within the
    daily budget, and a marker that is not already today's ISO date. Safe to
    call on every recomputation.
    """
    today = local_day(now)
    marker = today.isoformat()
    if last_bonus_date == marker:
        return DailyBonusResult(profile, last_bonus_date, False)

    todays = expenses_on_day(ledger, today)
    if not todays:
        return DailyBonusResult(profile, last_bonus_date, False)

    allowance = daily_budget(profile.monthly_budget)
    if not is_under_daily_budget(sum_amounts(todays), allowance):
        return DailyBonusResult(profile, last_bonus_date, False)

    logger.info("Daily budget bonus for %s awarded to profile %s", marker, profile.id)
    updated = add_points(profile, DAILY_BUDGET_BONUS_POINTS, now)
    return DailyBonusResult(updated, marker, True)


def is_expired(challenge: Challenge, now: datetime) -> bool:
    return as_local(now) > as_local(challenge.end_date)


def challenge_window(challenge: Challenge, now: datetime) -> tuple[datetime, datetime]:
    """Inclusive window from start to the earlier of end and ``now``."""
    start = as_local(challenge.start_date)
    end = min(as_local(challenge.end_date), as_local(now))
    return start, end


def challenge_days(challenge: Challenge) -> list[date]:
    """Calendar days judged by the day-based rules.

    The join day is judged on its whole-day spending and the day on which
    the challenge ends is left out, so a seven day challenge covers seven
    calendar days. A challenge shorter than a day covers its start day.
    """
    first = local_day(challenge.start_date)
    span = (local_day(challenge.end_date) - first).days
    return [first + timedelta(days=offset) for offset in range(max(1, span))]


def _closed_days(challenge: Challenge, now: datetime) -> list[date]:
    """Challenge days that are over; the current day is still in progress."""
    today = local_day(now)
    return [day for day in challenge_days(challenge) if day < today]


def is_settled(challenge: Challenge, now: datetime) -> bool:
    """Whether the challenge's outcome can no longer change."""
    if is_expired(challenge, now):
        return True
    if challenge.type in DAY_BASED_TYPES:
        return local_day(now) > challenge_days(challenge)[-1]
    return False


def compute_challenge_progress(
    challenge: Challenge,
    ledger: Sequence[Expense],
    profile: Profile,
    now: datetime,
) -> Decimal:
    """Recompute a challenge's progress from the ledger."""
    if challenge.type in DAY_BASED_TYPES:
        allowance = daily_budget(profile.monthly_budget)
        closed = _closed_days(challenge, now)
        # whole-day totals, including spending before the join time
        totals = daily_totals(e for e in ledger if local_day(e.date) in closed)

        if challenge.type == ChallengeType.DAILY_BUDGET:
            under = [
                day
                for day in closed
                if is_under_daily_budget(totals.get(day, Decimal("0")), allowance)
            ]
            return Decimal(len(under))

        if challenge.type == ChallengeType.NO_SPEND_DAY:
            if any(day not in totals for day in closed):
                return Decimal("1")
            return Decimal("0")

        budgeted = allowance * len(closed)
        return max(Decimal("0"), budgeted - sum(totals.values(), Decimal("0")))

    start, end = challenge_window(challenge, now)
    in_window = expenses_between(ledger, start, end)

    if challenge.type == ChallengeType.EXPENSE_LOGGING:
        return Decimal(len(daily_totals(in_window)))

    if challenge.type == ChallengeType.CATEGORY_LIMIT:
        return sum_amounts(e for e in in_window if e.category == challenge.category)

    raise ValueError(f"Unsupported challenge type: {challenge.type}")


def evaluate_challenge(
    challenge: Challenge,
    ledger: Sequence[Expense],
    profile: Profile,
    now: datetime,
) -> ChallengeEvaluation:
    """Recompute progress and decide completion or expiry.

    Count-up challenges complete once progress reaches the target. A
    category_limit challenge is a spending cap and completes only after its
    window closes with spend strictly below the target. Once settled, an
    unmet challenge is closed (``is_active=False``) with its final progress.
    Completed and closed challenges are returned unchanged.
    """
    expired = is_expired(challenge, now)
    if challenge.is_completed:
        return ChallengeEvaluation(challenge, False, False)
    if not challenge.is_active:
        return ChallengeEvaluation(challenge, False, expired)

    progress = compute_challenge_progress(challenge, ledger, profile, now)
    settled = is_settled(challenge, now)
    if challenge.type == ChallengeType.CATEGORY_LIMIT:
        met = settled and progress < challenge.target
    else:
        met = progress >= challenge.target

    if met:
        logger.info("Challenge %s completed with progress %s", challenge.id, progress)
        completed = replace(challenge, current_progress=progress, is_completed=True)
        return ChallengeEvaluation(completed, True, False)

    if settled:
        logger.info("Challenge %s closed unmet with progress %s", challenge.id, progress)
        closed = replace(challenge, current_progress=progress, is_active=False)
        return ChallengeEvaluation(closed, False, expired)

    logger.debug(
        "Challenge %s progress %s of %s", challenge.id, progress, challenge.target
    )
    return ChallengeEvaluation(replace(challenge, current_progress=progress), False, expired)


def challenge_badge(challenge: Challenge, now: datetime) -> Badge:
    return Badge(
        id=f"challenge-{challenge.id}",
        name=challenge.title,
        description=f"Completed the '{challenge.title}' challenge",
        icon="🏆",
        earned_at=now,
        category=BadgeCategory.CHALLENGE,
    )


def reward_challenge(profile: Profile, challenge: Challenge, now: datetime) -> Profile:
    """Apply the points and badge for a newly completed challenge."""
    updated = add_points(profile, challenge.points_reward, now)
    return award_badge(updated, challenge_badge(challenge, now))


def savings_badge(goal: SavingsGoal, now: datetime) -> Badge:
    return Badge(
        id=f"goal-{goal.id}",
        name=goal.title,
        description=f"Reached the savings goal '{goal.title}'",
        icon="💰",
        earned_at=now,
        category=BadgeCategory.SAVINGS,
    )


def contribute_to_goal(
    profile: Profile, goal_id: str, amount: object, now: datetime
) -> Profile:
    """Add ``amount`` to a savings goal, awarding a badge on completion.

    Raises:
        ValidationError: If the goal does not exist or the amount is invalid
    """
    contribution = require_positive(amount, "amount")
    goals = list(profile.savings_goals)
    for index, goal in enumerate(goals):
        if goal.id == goal_id:
            break
    else:
        raise ValidationError(errors.savings_goal_not_found(goal_id), field="goal_id")

    was_completed = goal.is_completed
    goal = replace(goal, current_amount=goal.current_amount + contribution)
    goals[index] = goal
    updated = replace(profile, savings_goals=tuple(goals))
    if goal.is_completed and not was_completed:
        updated = award_badge(updated, savings_badge(goal, now))
    return updated
