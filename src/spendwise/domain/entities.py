"""Domain model entities for spendwise.

These are pure data classes representing business concepts, independent of
how they are persisted. Entities are immutable; the session controller
produces updated copies with ``dataclasses.replace``.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Optional


class ExpenseCategory(StrEnum):
    """Closed set of expense categories."""

    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    BILLS = "bills"
    HEALTH = "health"
    EDUCATION = "education"
    OTHER = "other"


class BadgeCategory(StrEnum):
    """Closed set of badge categories."""

    STREAK = "streak"
    SAVINGS = "savings"
    CONSISTENCY = "consistency"
    MILESTONE = "milestone"
    CHALLENGE = "challenge"


class ChallengeType(StrEnum):
    """Closed set of challenge rule types."""

    DAILY_BUDGET = "daily_budget"
    WEEKLY_SAVINGS = "weekly_savings"
    EXPENSE_LOGGING = "expense_logging"
    CATEGORY_LIMIT = "category_limit"
    NO_SPEND_DAY = "no_spend_day"


class StatusBand(StrEnum):
    """Qualitative label for the share of the monthly budget consumed."""

    ON_TRACK = "on_track"
    MINDFUL = "mindful"
    NEAR_LIMIT = "near_limit"
    OVER_BUDGET = "over_budget"


@dataclass(frozen=True)
class Badge:
    """Badge domain entity."""

    id: str
    name: str
    description: str
    icon: str
    earned_at: datetime
    category: BadgeCategory


@dataclass(frozen=True)
class SavingsGoal:
    """Savings goal domain entity."""

    id: str
    title: str
    target_amount: Decimal
    current_amount: Decimal
    target_date: datetime
    created_at: datetime

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount


@dataclass(frozen=True)
class Profile:
    """User profile with financial configuration and gamification state."""

    id: str
    name: str
    email: str
    monthly_income: Decimal
    monthly_budget: Decimal
    points: int
    level: int
    created_at: datetime
    badges: tuple[Badge, ...] = ()
    savings_goals: tuple[SavingsGoal, ...] = ()

    def has_badge(self, badge_id: str) -> bool:
        return any(badge.id == badge_id for badge in self.badges)


@dataclass(frozen=True)
class Expense:
    """Immutable ledger entry."""

    id: str
    amount: Decimal
    category: ExpenseCategory
    description: str
    date: datetime
    is_recurring: bool = False


@dataclass(frozen=True)
class Challenge:
    """Time-boxed challenge.

    ``target`` is a count of days or a currency amount depending on ``type``.
    ``category`` is only used by category_limit challenges.
    """

    id: str
    title: str
    description: str
    type: ChallengeType
    target: Decimal
    current_progress: Decimal
    points_reward: int
    start_date: datetime
    end_date: datetime
    is_completed: bool = False
    is_active: bool = True
    category: Optional[ExpenseCategory] = None


@dataclass(frozen=True)
class DashboardView:
    """Derived figures shown on the dashboard."""

    total_spent_this_month: Decimal
    remaining: Decimal
    percentage_used: Decimal
    status_band: StatusBand
    today_spent: Decimal
    daily_budget: Decimal
    is_under_daily_budget: bool
    top_categories: tuple[tuple[ExpenseCategory, Decimal], ...]
    points: int
    level: int
    recent_expenses: tuple[Expense, ...] = ()


@dataclass(frozen=True)
class ChallengeView:
    """Challenge together with its evaluated state."""

    challenge: Challenge
    current_progress: Decimal
    is_completed: bool
    is_expired: bool
