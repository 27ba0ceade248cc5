"""Validation and construction of domain entities.

These functions are the only way new profiles, expenses and savings goals
are built, so no partially-valid entity can reach the ledger or profile.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Optional, TypeVar

from spendwise.domain import errors
from spendwise.domain.entities import (
    Badge,
    Challenge,
    ChallengeType,
    Expense,
    ExpenseCategory,
    Profile,
    SavingsGoal,
)
from spendwise.domain.errors import ValidationError
from spendwise.domain.ledger import as_local

MAX_DESCRIPTION_LENGTH = 100

E = TypeVar("E", bound=StrEnum)


def generate_id(now: datetime) -> str:
    """Generate an id from a creation timestamp in microseconds."""
    return str(int(now.timestamp() * 1_000_000))


def parse_amount_value(value: object, field: str) -> Decimal:
    """Convert a user supplied amount into a finite Decimal.

    Raises:
        ValidationError: If the value is not a number
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(errors.not_positive(field, value), field=field)
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(errors.not_positive(field, value), field=field)
    if not amount.is_finite():
        raise ValidationError(errors.not_positive(field, value), field=field)
    return amount


def require_positive(value: object, field: str) -> Decimal:
    """Return ``value`` as a Decimal, failing unless it is positive and finite."""
    amount = parse_amount_value(value, field)
    if amount <= 0:
        raise ValidationError(errors.not_positive(field, value), field=field)
    return amount


def require_text(value: object, field: str) -> str:
    """Return ``value`` trimmed, failing if it is empty."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(errors.required_field(field), field=field)
    return value.strip()


def parse_choice(enum_type: type[E], value: object, field: str) -> E:
    """Resolve ``value`` to a member of a closed enumeration."""
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        choices = [member.value for member in enum_type]
        raise ValidationError(errors.unknown_choice(field, value, choices), field=field)


def validate_profile_fields(
    name: object, email: object, monthly_income: object, monthly_budget: object
) -> tuple[str, str, Decimal, Decimal]:
    """Validate onboarding or profile-edit input.

    Returns:
        Tuple of (name, email, monthly_income, monthly_budget), normalized

    Raises:
        ValidationError: If any field is invalid or budget exceeds income
    """
    clean_name = require_text(name, "name")
    clean_email = require_text(email, "email")
    income = require_positive(monthly_income, "monthly_income")
    budget = require_positive(monthly_budget, "monthly_budget")
    if budget > income:
        raise ValidationError(
            errors.budget_exceeds_income(budget, income), field="monthly_budget"
        )
    return clean_name, clean_email, income, budget


def create_profile(
    name: object,
    email: object,
    monthly_income: object,
    monthly_budget: object,
    *,
    now: datetime,
    profile_id: Optional[str] = None,
) -> Profile:
    """Build a new profile from onboarding input.

    Raises:
        ValidationError: If the input is invalid
    """
    clean_name, clean_email, income, budget = validate_profile_fields(
        name, email, monthly_income, monthly_budget
    )
    return Profile(
        id=profile_id or generate_id(now),
        name=clean_name,
        email=clean_email,
        monthly_income=income,
        monthly_budget=budget,
        points=0,
        level=1,
        created_at=now,
    )


def create_expense(
    amount: object,
    category: object,
    description: object,
    *,
    now: datetime,
    expense_id: Optional[str] = None,
    is_recurring: bool = False,
) -> Expense:
    """Build a new ledger entry dated ``now``.

    Raises:
        ValidationError: If amount, category or description is invalid
    """
    clean_amount = require_positive(amount, "amount")
    clean_category = parse_choice(ExpenseCategory, category, "category")
    clean_description = require_text(description, "description")
    if len(clean_description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            errors.description_too_long(len(clean_description), MAX_DESCRIPTION_LENGTH),
            field="description",
        )
    return Expense(
        id=expense_id or generate_id(now),
        amount=clean_amount,
        category=clean_category,
        description=clean_description,
        date=now,
        is_recurring=bool(is_recurring),
    )


def create_savings_goal(
    title: object,
    target_amount: object,
    target_date: datetime,
    *,
    now: datetime,
    goal_id: Optional[str] = None,
) -> SavingsGoal:
    """Build a new savings goal with nothing saved yet."""
    return SavingsGoal(
        id=goal_id or generate_id(now),
        title=require_text(title, "title"),
        target_amount=require_positive(target_amount, "target_amount"),
        current_amount=Decimal("0"),
        target_date=target_date,
        created_at=now,
    )


def validate_profile(profile: Profile) -> Profile:
    """Re-check a fully built profile, e.g. one read back from storage."""
    require_text(profile.id, "id")
    validate_profile_fields(
        profile.name, profile.email, profile.monthly_income, profile.monthly_budget
    )
    if isinstance(profile.points, bool) or not isinstance(profile.points, int) or profile.points < 0:
        raise ValidationError("points must be a non-negative integer", field="points")
    if isinstance(profile.level, bool) or not isinstance(profile.level, int) or profile.level < 1:
        raise ValidationError("level must be a positive integer", field="level")
    seen: set[str] = set()
    for badge in profile.badges:
        validate_badge(badge)
        if badge.id in seen:
            raise ValidationError(f"Duplicate badge '{badge.id}'", field="badges")
        seen.add(badge.id)
    for goal in profile.savings_goals:
        validate_savings_goal(goal)
    return profile


def validate_expense(expense: Expense) -> Expense:
    """Re-check a fully built expense."""
    require_text(expense.id, "id")
    require_positive(expense.amount, "amount")
    parse_choice(ExpenseCategory, expense.category, "category")
    description = require_text(expense.description, "description")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            errors.description_too_long(len(description), MAX_DESCRIPTION_LENGTH),
            field="description",
        )
    return expense


def validate_badge(badge: Badge) -> Badge:
    """Re-check a badge."""
    require_text(badge.id, "id")
    require_text(badge.name, "name")
    return badge


def validate_savings_goal(goal: SavingsGoal) -> SavingsGoal:
    """Re-check a savings goal."""
    require_text(goal.id, "id")
    require_text(goal.title, "title")
    require_positive(goal.target_amount, "target_amount")
    if parse_amount_value(goal.current_amount, "current_amount") < 0:
        raise ValidationError(
            "current_amount cannot be negative", field="current_amount"
        )
    return goal


def validate_challenge(challenge: Challenge) -> Challenge:
    """Re-check a challenge definition."""
    require_text(challenge.id, "id")
    require_text(challenge.title, "title")
    challenge_type = parse_choice(ChallengeType, challenge.type, "type")
    require_positive(challenge.target, "target")
    if parse_amount_value(challenge.current_progress, "current_progress") < 0:
        raise ValidationError(
            "current_progress cannot be negative", field="current_progress"
        )
    if challenge.points_reward < 0:
        raise ValidationError("points_reward cannot be negative", field="points_reward")
    if as_local(challenge.end_date) < as_local(challenge.start_date):
        raise ValidationError("end_date must not be before start_date", field="end_date")
    if challenge_type == ChallengeType.CATEGORY_LIMIT:
        if challenge.category is None:
            raise ValidationError(
                "category_limit challenges need a category", field="category"
            )
        parse_choice(ExpenseCategory, challenge.category, "category")
    return challenge
