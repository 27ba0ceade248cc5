"""Tests for points, levels, badges and challenge evaluation."""

import pytest
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal

from spendwise.domain.entities import (
    Badge,
    BadgeCategory,
    Challenge,
    ChallengeType,
    ExpenseCategory,
)
from spendwise.domain.errors import ValidationError
from spendwise.domain.gamification import (
    DAILY_BUDGET_BONUS_POINTS,
    add_points,
    award_badge,
    award_expense_logged,
    challenge_days,
    challenge_window,
    compute_challenge_progress,
    contribute_to_goal,
    evaluate_challenge,
    evaluate_daily_bonus,
    is_settled,
    level_for_points,
)
from spendwise.domain.validation import create_savings_goal

NOW = datetime(2024, 3, 15, 12, 0)


def make_challenge(challenge_type, target, start, days=7, category=None, **kwargs):
    return Challenge(
        id=kwargs.pop("id", "c1"),
        title=kwargs.pop("title", "Test challenge"),
        description="Test",
        type=challenge_type,
        target=Decimal(str(target)),
        current_progress=Decimal("0"),
        points_reward=kwargs.pop("points_reward", 40),
        start_date=start,
        end_date=start + timedelta(days=days),
        category=category,
        **kwargs,
    )


class TestLevels:
    """Tests for level calculation."""

    @pytest.mark.parametrize(
        "points,level", [(0, 1), (99, 1), (100, 2), (199, 2), (250, 3)]
    )
    def test_level_for_points(self, points, level):
        assert level_for_points(points) == level

    def test_add_points_recomputes_level(self, sample_profile):
        profile = add_points(sample_profile, 205, NOW)
        assert profile.points == 205
        assert profile.level == 3
        assert profile.has_badge("level-2")
        assert profile.has_badge("level-3")

    def test_add_points_rejects_negative(self, sample_profile):
        with pytest.raises(ValueError):
            add_points(sample_profile, -1, NOW)

    def test_expense_logged_awards_one_point(self, sample_profile):
        profile = award_expense_logged(sample_profile, NOW)
        assert profile.points == sample_profile.points + 1


class TestBadges:
    """Tests for badge awarding."""

    def test_award_badge_is_idempotent(self, sample_profile):
        badge = Badge(
            id="first",
            name="First",
            description="First badge",
            icon="🎉",
            earned_at=NOW,
            category=BadgeCategory.CONSISTENCY,
        )
        once = award_badge(sample_profile, badge)
        twice = award_badge(once, replace(badge, earned_at=NOW + timedelta(days=1)))
        assert once.badges == (badge,)
        assert twice is once


class TestDailyBonus:
    """Tests for the once-per-day budget bonus."""

    def test_bonus_awarded_once_per_day(self, sample_profile, expense_factory):
        """Test re-running the check on the same day awards nothing more."""
        ledger = [
            expense_factory("10000", NOW - timedelta(hours=2)),
            expense_factory("5000", NOW - timedelta(hours=1)),
        ]
        first = evaluate_daily_bonus(sample_profile, ledger, NOW, None)
        assert first.awarded is True
        assert first.last_bonus_date == "2024-03-15"
        assert first.profile.points == DAILY_BUDGET_BONUS_POINTS

        second = evaluate_daily_bonus(first.profile, ledger, NOW, first.last_bonus_date)
        assert second.awarded is False
        assert second.profile.points == DAILY_BUDGET_BONUS_POINTS

    def test_no_bonus_without_expenses_today(self, sample_profile, expense_factory):
        ledger = [expense_factory("100", NOW - timedelta(days=1))]
        result = evaluate_daily_bonus(sample_profile, ledger, NOW, None)
        assert result.awarded is False
        assert result.last_bonus_date is None

    def test_no_bonus_over_daily_budget(self, sample_profile, expense_factory):
        ledger = [expense_factory("50000.01", NOW)]
        result = evaluate_daily_bonus(sample_profile, ledger, NOW, None)
        assert result.awarded is False

    def test_bonus_available_again_next_day(self, sample_profile, expense_factory):
        tomorrow = NOW + timedelta(days=1)
        ledger = [expense_factory("100", NOW), expense_factory("100", tomorrow)]
        first = evaluate_daily_bonus(sample_profile, ledger, NOW, None)
        second = evaluate_daily_bonus(first.profile, ledger, tomorrow, first.last_bonus_date)
        assert second.awarded is True
        assert second.last_bonus_date == "2024-03-16"
        assert second.profile.points == 2 * DAILY_BUDGET_BONUS_POINTS


class TestChallengeProgress:
    """Tests for progress recomputation."""

    def test_window_is_clipped_to_now(self):
        challenge = make_challenge(ChallengeType.EXPENSE_LOGGING, 7, NOW - timedelta(days=2))
        assert challenge_window(challenge, NOW) == (NOW - timedelta(days=2), NOW)

    def test_expense_logging_counts_distinct_days(self, sample_profile, expense_factory):
        start = NOW - timedelta(days=3)
        challenge = make_challenge(ChallengeType.EXPENSE_LOGGING, 7, start)
        ledger = [
            expense_factory("1", start - timedelta(hours=1)),
            expense_factory("1", start + timedelta(hours=1)),
            expense_factory("1", start + timedelta(hours=2)),
            expense_factory("1", NOW - timedelta(minutes=5)),
        ]
        assert compute_challenge_progress(challenge, ledger, sample_profile, NOW) == 2

    def test_daily_budget_counts_closed_days_under_budget(self, sample_profile, expense_factory):
        start = datetime(2024, 3, 12, 8, 0)
        challenge = make_challenge(ChallengeType.DAILY_BUDGET, 7, start)
        ledger = [
            expense_factory("60000", datetime(2024, 3, 13, 10)),  # over 50,000
            expense_factory("100", datetime(2024, 3, 14, 10)),
            expense_factory("60000", NOW),  # today is still open
        ]
        # 12th (nothing spent) and 14th count; 13th is over; 15th not closed
        assert compute_challenge_progress(challenge, ledger, sample_profile, NOW) == 2

    def test_category_limit_sums_category_in_window(self, sample_profile, expense_factory):
        start = NOW - timedelta(days=1)
        challenge = make_challenge(
            ChallengeType.CATEGORY_LIMIT, 70000, start, category=ExpenseCategory.FOOD
        )
        ledger = [
            expense_factory("30000", start + timedelta(hours=1), ExpenseCategory.FOOD),
            expense_factory("99999", start + timedelta(hours=2), ExpenseCategory.BILLS),
            expense_factory("5000", start - timedelta(hours=1), ExpenseCategory.FOOD),
        ]
        assert compute_challenge_progress(challenge, ledger, sample_profile, NOW) == Decimal("30000")

    def test_no_spend_day(self, sample_profile, expense_factory):
        start = datetime(2024, 3, 13, 9, 0)
        challenge = make_challenge(ChallengeType.NO_SPEND_DAY, 1, start, days=3)
        busy = [
            expense_factory("10", datetime(2024, 3, 13, 10)),
            expense_factory("10", datetime(2024, 3, 14, 10)),
        ]
        assert compute_challenge_progress(challenge, busy, sample_profile, NOW) == 0

        quiet = busy[:1]
        assert compute_challenge_progress(challenge, quiet, sample_profile, NOW) == 1

    def test_no_spend_day_ignores_open_day(self, sample_profile):
        challenge = make_challenge(ChallengeType.NO_SPEND_DAY, 1, NOW - timedelta(hours=1), days=1)
        assert compute_challenge_progress(challenge, [], sample_profile, NOW) == 0

    def test_weekly_savings(self, sample_profile, expense_factory):
        start = datetime(2024, 3, 14, 9, 0)
        challenge = make_challenge(ChallengeType.WEEKLY_SAVINGS, 50000, start)
        ledger = [
            expense_factory("30000", datetime(2024, 3, 14, 10)),
            expense_factory("45000", NOW),
        ]
        # one closed day at 50,000 minus 30,000 spent; today is still open
        assert compute_challenge_progress(challenge, ledger, sample_profile, NOW) == Decimal("20000")

    def test_join_day_judged_on_whole_day(self, sample_profile, expense_factory):
        """Test spending earlier on the join day still counts against it."""
        lunch = expense_factory("12000", datetime(2024, 3, 14, 12))
        late_join = datetime(2024, 3, 14, 23, 0)
        no_spend = make_challenge(ChallengeType.NO_SPEND_DAY, 1, late_join, days=1)
        after_midnight = datetime(2024, 3, 15, 1, 0)
        assert compute_challenge_progress(no_spend, [lunch], sample_profile, after_midnight) == 0

        over = expense_factory("60000", datetime(2024, 3, 14, 12))
        streak = make_challenge(ChallengeType.DAILY_BUDGET, 7, late_join)
        assert compute_challenge_progress(streak, [over], sample_profile, after_midnight) == 0

    def test_end_day_is_not_judged(self):
        challenge = make_challenge(ChallengeType.DAILY_BUDGET, 7, datetime(2024, 3, 12, 8, 0))
        days = challenge_days(challenge)
        assert len(days) == 7
        assert days[0] == date(2024, 3, 12)
        assert days[-1] == date(2024, 3, 18)


class TestChallengeEvaluation:
    """Tests for completion and expiry."""

    def test_count_up_completes_when_target_met(self, sample_profile, expense_factory):
        start = NOW - timedelta(days=1)
        challenge = make_challenge(ChallengeType.EXPENSE_LOGGING, 2, start)
        ledger = [expense_factory("1", start + timedelta(hours=1)), expense_factory("1", NOW)]

        evaluation = evaluate_challenge(challenge, ledger, sample_profile, NOW)
        assert evaluation.newly_completed is True
        assert evaluation.challenge.is_completed is True
        assert evaluation.challenge.current_progress == 2

        again = evaluate_challenge(evaluation.challenge, ledger, sample_profile, NOW)
        assert again.newly_completed is False
        assert again.challenge is evaluation.challenge

    def test_count_up_in_progress(self, sample_profile, expense_factory):
        challenge = make_challenge(ChallengeType.EXPENSE_LOGGING, 7, NOW - timedelta(days=1))
        evaluation = evaluate_challenge(challenge, [expense_factory("1", NOW)], sample_profile, NOW)
        assert evaluation.newly_completed is False
        assert evaluation.is_expired is False
        assert evaluation.challenge.current_progress == 1

    def test_category_limit_waits_for_window_end(self, sample_profile, expense_factory):
        start = NOW - timedelta(days=2)
        challenge = make_challenge(
            ChallengeType.CATEGORY_LIMIT, 70000, start, category=ExpenseCategory.FOOD
        )
        ledger = [expense_factory("20000", start + timedelta(hours=3))]

        during = evaluate_challenge(challenge, ledger, sample_profile, NOW)
        assert during.newly_completed is False
        assert during.is_expired is False

        after = evaluate_challenge(challenge, ledger, sample_profile, start + timedelta(days=8))
        assert after.newly_completed is True
        assert after.challenge.is_completed is True

    def test_category_limit_breached_never_completes(self, sample_profile, expense_factory):
        start = NOW - timedelta(days=2)
        challenge = make_challenge(
            ChallengeType.CATEGORY_LIMIT, 70000, start, category=ExpenseCategory.FOOD
        )
        ledger = [
            expense_factory("40000", start + timedelta(hours=3)),
            expense_factory("31000", start + timedelta(days=1)),
        ]
        after = evaluate_challenge(challenge, ledger, sample_profile, start + timedelta(days=8))
        assert after.newly_completed is False
        assert after.is_expired is True
        assert after.challenge.is_completed is False
        assert after.challenge.current_progress == Decimal("71000")

    def test_expired_count_up_awards_nothing(self, sample_profile, expense_factory):
        start = NOW - timedelta(days=10)
        challenge = make_challenge(ChallengeType.EXPENSE_LOGGING, 7, start)
        ledger = [expense_factory("1", start + timedelta(hours=1)), expense_factory("1", NOW)]
        evaluation = evaluate_challenge(challenge, ledger, sample_profile, NOW)
        assert evaluation.is_expired is True
        assert evaluation.newly_completed is False
        # the expense after the window does not count
        assert evaluation.challenge.current_progress == 1

    def test_settled_challenge_is_closed_and_frozen(self, sample_profile, expense_factory):
        """Test a missed challenge keeps its result when the budget changes later."""
        start = datetime(2024, 3, 10, 12, 0)
        challenge = make_challenge(ChallengeType.DAILY_BUDGET, 3, start, days=3)
        ledger = [expense_factory("60000", start + timedelta(days=offset)) for offset in range(3)]

        first = evaluate_challenge(challenge, ledger, sample_profile, NOW)
        assert first.newly_completed is False
        assert first.is_expired is True
        assert first.challenge.is_active is False
        assert first.challenge.current_progress == 0

        generous = replace(
            sample_profile, monthly_income=Decimal("9000000"), monthly_budget=Decimal("9000000")
        )
        later = evaluate_challenge(first.challenge, ledger, generous, NOW)
        assert later.challenge is first.challenge
        assert later.newly_completed is False

    def test_day_based_challenge_settles_after_last_day(self):
        start = datetime(2024, 3, 14, 9, 0)
        challenge = make_challenge(ChallengeType.NO_SPEND_DAY, 1, start, days=1)
        assert is_settled(challenge, datetime(2024, 3, 14, 23, 59)) is False
        # the last judged day is over even though the end time has not passed
        assert is_settled(challenge, datetime(2024, 3, 15, 0, 30)) is True

        logging_challenge = make_challenge(ChallengeType.EXPENSE_LOGGING, 1, start, days=1)
        assert is_settled(logging_challenge, datetime(2024, 3, 15, 0, 30)) is False

    def test_inactive_challenge_untouched(self, sample_profile, expense_factory):
        challenge = make_challenge(
            ChallengeType.EXPENSE_LOGGING, 1, NOW - timedelta(days=1), is_active=False
        )
        evaluation = evaluate_challenge(challenge, [expense_factory("1", NOW)], sample_profile, NOW)
        assert evaluation.challenge is challenge
        assert evaluation.newly_completed is False


class TestSavingsGoals:
    """Tests for savings contributions."""

    def test_contribution_completes_goal_once(self, sample_profile):
        goal = create_savings_goal("Laptop", "100000", NOW + timedelta(days=90), now=NOW, goal_id="g1")
        profile = replace(sample_profile, savings_goals=(goal,))

        profile = contribute_to_goal(profile, "g1", "60000", NOW)
        assert profile.savings_goals[0].current_amount == Decimal("60000")
        assert not profile.has_badge("goal-g1")

        profile = contribute_to_goal(profile, "g1", "50000", NOW)
        assert profile.savings_goals[0].is_completed
        assert profile.has_badge("goal-g1")

        profile = contribute_to_goal(profile, "g1", "1", NOW)
        assert [b.id for b in profile.badges].count("goal-g1") == 1

    def test_unknown_goal(self, sample_profile):
        with pytest.raises(ValidationError):
            contribute_to_goal(sample_profile, "missing", "10", NOW)
