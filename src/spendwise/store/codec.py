"""Conversion between domain entities and stored bytes.

Payloads are UTF-8 JSON. Decimals are written as strings and timestamps as
ISO-8601 so that every field round-trips without loss. Decoding validates
the result and raises ``CorruptStateError`` for anything unusable.
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, TypeVar

from dateutil.parser import isoparse

from spendwise.domain import entities as domain
from spendwise.domain.errors import CorruptStateError, ValidationError
from spendwise.domain.gamification import level_for_points
from spendwise.domain.validation import (
    validate_challenge,
    validate_expense,
    validate_profile,
)
from spendwise.store.base import CHALLENGES_KEY, DAILY_BONUS_KEY, EXPENSES_KEY, PROFILE_KEY

T = TypeVar("T")


def _encode(payload: Any) -> bytes:
    return json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")


def _decode(raw: bytes, key: str, parse: Callable[[Any], T]) -> T:
    try:
        payload = json.loads(raw.decode("utf-8"))
        return parse(payload)
    except (
        UnicodeDecodeError,
        json.JSONDecodeError,
        KeyError,
        TypeError,
        ValueError,
        AttributeError,
        InvalidOperation,
        OverflowError,
    ) as e:
        raise CorruptStateError(f"Stored value for '{key}' is unusable: {e}", key=key) from e


def _decimal(value: Any) -> Decimal:
    if not isinstance(value, str):
        raise TypeError(f"Expected decimal string, got {value!r}")
    return Decimal(value)


def _timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise TypeError(f"Expected ISO-8601 string, got {value!r}")
    return isoparse(value)


def _integer(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected integer, got {value!r}")
    return value


def _text(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Expected string, got {value!r}")
    return value


def _flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"Expected boolean, got {value!r}")
    return value


def badge_to_dict(badge: domain.Badge) -> dict[str, Any]:
    return {
        "id": badge.id,
        "name": badge.name,
        "description": badge.description,
        "icon": badge.icon,
        "earned_at": badge.earned_at.isoformat(),
        "category": badge.category.value,
    }


def badge_from_dict(data: dict[str, Any]) -> domain.Badge:
    return domain.Badge(
        id=_text(data["id"]),
        name=_text(data["name"]),
        description=_text(data["description"]),
        icon=_text(data["icon"]),
        earned_at=_timestamp(data["earned_at"]),
        category=domain.BadgeCategory(data["category"]),
    )


def savings_goal_to_dict(goal: domain.SavingsGoal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "target_amount": str(goal.target_amount),
        "current_amount": str(goal.current_amount),
        "target_date": goal.target_date.isoformat(),
        "created_at": goal.created_at.isoformat(),
    }


def savings_goal_from_dict(data: dict[str, Any]) -> domain.SavingsGoal:
    return domain.SavingsGoal(
        id=_text(data["id"]),
        title=_text(data["title"]),
        target_amount=_decimal(data["target_amount"]),
        current_amount=_decimal(data["current_amount"]),
        target_date=_timestamp(data["target_date"]),
        created_at=_timestamp(data["created_at"]),
    )


def profile_to_dict(profile: domain.Profile) -> dict[str, Any]:
    """Convert a Profile entity to its stored form."""
    return {
        "id": profile.id,
        "name": profile.name,
        "email": profile.email,
        "monthly_income": str(profile.monthly_income),
        "monthly_budget": str(profile.monthly_budget),
        "points": profile.points,
        "level": profile.level,
        "badges": [badge_to_dict(badge) for badge in profile.badges],
        "savings_goals": [savings_goal_to_dict(goal) for goal in profile.savings_goals],
        "created_at": profile.created_at.isoformat(),
    }


def profile_from_dict(data: dict[str, Any]) -> domain.Profile:
    """Convert a stored profile back to a validated Profile entity."""
    profile = domain.Profile(
        id=_text(data["id"]),
        name=_text(data["name"]),
        email=_text(data["email"]),
        monthly_income=_decimal(data["monthly_income"]),
        monthly_budget=_decimal(data["monthly_budget"]),
        points=_integer(data["points"]),
        level=_integer(data["level"]),
        badges=tuple(badge_from_dict(item) for item in data["badges"]),
        savings_goals=tuple(savings_goal_from_dict(item) for item in data["savings_goals"]),
        created_at=_timestamp(data["created_at"]),
    )
    if profile.level != level_for_points(profile.points):
        raise ValidationError(
            f"Level {profile.level} does not match {profile.points} points", field="level"
        )
    return validate_profile(profile)


def expense_to_dict(expense: domain.Expense) -> dict[str, Any]:
    """Convert an Expense entity to its stored form."""
    return {
        "id": expense.id,
        "amount": str(expense.amount),
        "category": expense.category.value,
        "description": expense.description,
        "date": expense.date.isoformat(),
        "is_recurring": expense.is_recurring,
    }


def expense_from_dict(data: dict[str, Any]) -> domain.Expense:
    """Convert a stored expense back to a validated Expense entity."""
    expense = domain.Expense(
        id=_text(data["id"]),
        amount=_decimal(data["amount"]),
        category=domain.ExpenseCategory(data["category"]),
        description=_text(data["description"]),
        date=_timestamp(data["date"]),
        is_recurring=_flag(data.get("is_recurring", False)),
    )
    return validate_expense(expense)


def challenge_to_dict(challenge: domain.Challenge) -> dict[str, Any]:
    """Convert a Challenge entity to its stored form."""
    return {
        "id": challenge.id,
        "title": challenge.title,
        "description": challenge.description,
        "type": challenge.type.value,
        "target": str(challenge.target),
        "current_progress": str(challenge.current_progress),
        "points_reward": challenge.points_reward,
        "start_date": challenge.start_date.isoformat(),
        "end_date": challenge.end_date.isoformat(),
        "is_completed": challenge.is_completed,
        "is_active": challenge.is_active,
        "category": challenge.category.value if challenge.category is not None else None,
    }


def challenge_from_dict(data: dict[str, Any]) -> domain.Challenge:
    """Convert a stored challenge back to a validated Challenge entity."""
    category = data.get("category")
    challenge = domain.Challenge(
        id=_text(data["id"]),
        title=_text(data["title"]),
        description=_text(data["description"]),
        type=domain.ChallengeType(data["type"]),
        target=_decimal(data["target"]),
        current_progress=_decimal(data["current_progress"]),
        points_reward=_integer(data["points_reward"]),
        start_date=_timestamp(data["start_date"]),
        end_date=_timestamp(data["end_date"]),
        is_completed=_flag(data["is_completed"]),
        is_active=_flag(data["is_active"]),
        category=domain.ExpenseCategory(category) if category is not None else None,
    )
    return validate_challenge(challenge)


def _list_of(parse: Callable[[dict[str, Any]], T]) -> Callable[[Any], list[T]]:
    def parse_list(payload: Any) -> list[T]:
        if not isinstance(payload, list):
            raise TypeError(f"Expected a list, got {type(payload).__name__}")
        return [parse(item) for item in payload]

    return parse_list


def _unique_ids(items: list[Any], key: str) -> None:
    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            raise CorruptStateError(f"Duplicate id '{item.id}' in '{key}'", key=key)
        seen.add(item.id)


def encode_profile(profile: domain.Profile) -> bytes:
    return _encode(profile_to_dict(profile))


def decode_profile(raw: bytes) -> domain.Profile:
    return _decode(raw, PROFILE_KEY, profile_from_dict)


def encode_expenses(expenses: list[domain.Expense]) -> bytes:
    return _encode([expense_to_dict(expense) for expense in expenses])


def decode_expenses(raw: bytes) -> list[domain.Expense]:
    expenses = _decode(raw, EXPENSES_KEY, _list_of(expense_from_dict))
    _unique_ids(expenses, EXPENSES_KEY)
    return expenses


def encode_challenges(challenges: list[domain.Challenge]) -> bytes:
    return _encode([challenge_to_dict(challenge) for challenge in challenges])


def decode_challenges(raw: bytes) -> list[domain.Challenge]:
    challenges = _decode(raw, CHALLENGES_KEY, _list_of(challenge_from_dict))
    _unique_ids(challenges, CHALLENGES_KEY)
    return challenges


def encode_bonus_date(marker: str) -> bytes:
    return marker.encode("utf-8")


def decode_bonus_date(raw: bytes) -> str:
    """Decode the last-daily-bonus marker, an ISO calendar date."""
    try:
        marker = raw.decode("utf-8").strip()
        return date.fromisoformat(marker).isoformat()
    except (UnicodeDecodeError, ValueError) as e:
        raise CorruptStateError(
            f"Stored value for '{DAILY_BONUS_KEY}' is unusable: {e}", key=DAILY_BONUS_KEY
        ) from e
