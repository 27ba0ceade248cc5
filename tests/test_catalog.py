"""Tests for the built-in challenge templates."""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from spendwise.domain.catalog import CHALLENGE_TEMPLATES, build_challenge, get_template
from spendwise.domain.entities import ChallengeType, ExpenseCategory
from spendwise.domain.errors import ValidationError
from spendwise.domain.validation import validate_challenge

NOW = datetime(2024, 3, 15, 12, 0)


def test_template_keys_are_unique():
    keys = [template.key for template in CHALLENGE_TEMPLATES]
    assert len(keys) == len(set(keys))


def test_every_type_has_a_template():
    assert {template.type for template in CHALLENGE_TEMPLATES} == set(ChallengeType)


@pytest.mark.parametrize("template", CHALLENGE_TEMPLATES, ids=lambda t: t.key)
def test_built_challenges_are_valid(template):
    challenge = build_challenge(template, NOW)
    assert validate_challenge(challenge) == challenge
    assert challenge.id.startswith(f"{template.key}-")
    assert challenge.start_date == NOW
    assert challenge.end_date == NOW + template.duration
    assert challenge.current_progress == Decimal("0")
    assert challenge.is_completed is False


def test_food_budget_template():
    template = get_template("food-budget")
    assert template.type == ChallengeType.CATEGORY_LIMIT
    assert template.category == ExpenseCategory.FOOD
    assert template.target == Decimal("70000")
    assert template.duration == timedelta(days=7)


def test_unknown_template():
    with pytest.raises(ValidationError) as exc_info:
        get_template("marathon")
    assert exc_info.value.field == "challenge"
    assert "budget-streak" in str(exc_info.value)
