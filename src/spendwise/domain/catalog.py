"""Built-in challenge templates offered to new users."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from spendwise.domain import errors
from spendwise.domain.entities import Challenge, ChallengeType, ExpenseCategory
from spendwise.domain.errors import ValidationError
from spendwise.domain.validation import generate_id


@dataclass(frozen=True)
class ChallengeTemplate:
    """Blueprint for a challenge; dates are filled in when joined."""

    key: str
    title: str
    description: str
    type: ChallengeType
    target: Decimal
    points_reward: int
    duration: timedelta
    category: Optional[ExpenseCategory] = None


CHALLENGE_TEMPLATES = [
    ChallengeTemplate(
        key="budget-streak",
        title="Budget Streak",
        description="Stay under your daily budget for 7 days in a row",
        type=ChallengeType.DAILY_BUDGET,
        target=Decimal("7"),
        points_reward=50,
        duration=timedelta(days=7),
    ),
    ChallengeTemplate(
        key="expense-logger",
        title="Expense Logger",
        description="Log at least one expense every day for a week",
        type=ChallengeType.EXPENSE_LOGGING,
        target=Decimal("7"),
        points_reward=30,
        duration=timedelta(days=7),
    ),
    ChallengeTemplate(
        key="food-budget",
        title="Food Budget Challenge",
        description="Spend less than UGX 70,000 on food this week",
        type=ChallengeType.CATEGORY_LIMIT,
        target=Decimal("70000"),
        points_reward=40,
        duration=timedelta(days=7),
        category=ExpenseCategory.FOOD,
    ),
    ChallengeTemplate(
        key="no-spend-day",
        title="No Spend Day",
        description="Have a complete no-spend day",
        type=ChallengeType.NO_SPEND_DAY,
        target=Decimal("1"),
        points_reward=25,
        duration=timedelta(days=1),
    ),
    ChallengeTemplate(
        key="weekly-saver",
        title="Weekly Saver",
        description="Save UGX 50,000 against your daily budget this week",
        type=ChallengeType.WEEKLY_SAVINGS,
        target=Decimal("50000"),
        points_reward=40,
        duration=timedelta(days=7),
    ),
]


def get_template(key: str) -> ChallengeTemplate:
    """Look up a template by key.

    Raises:
        ValidationError: If no template has this key
    """
    for template in CHALLENGE_TEMPLATES:
        if template.key == key:
            return template
    choices = [template.key for template in CHALLENGE_TEMPLATES]
    raise ValidationError(errors.unknown_choice("challenge", key, choices), field="challenge")


def build_challenge(template: ChallengeTemplate, now: datetime) -> Challenge:
    """Start a challenge from ``template`` at ``now``."""
    return Challenge(
        id=f"{template.key}-{generate_id(now)}",
        title=template.title,
        description=template.description,
        type=template.type,
        target=template.target,
        current_progress=Decimal("0"),
        points_reward=template.points_reward,
        start_date=now,
        end_date=now + template.duration,
        category=template.category,
    )
