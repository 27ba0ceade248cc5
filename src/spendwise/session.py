"""Session controller: the single owner of profile and ledger state.

Every UI event goes through a ``SessionController`` method. Each mutation is
validated, applied in memory, persisted synchronously and followed by a
recomputation of the daily bonus and challenges. Store failures never undo
an in-memory mutation; they are returned to the caller instead.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Generic, Optional, TypeVar

from spendwise.domain import errors
from spendwise.domain.budget import (
    daily_budget,
    is_under_daily_budget,
    percentage_used,
    remaining,
    status_band,
)
from spendwise.domain.entities import (
    Challenge,
    ChallengeView,
    DashboardView,
    Expense,
    Profile,
    SavingsGoal,
)
from spendwise.domain.errors import (
    CorruptStateError,
    DomainError,
    PersistenceError,
    ValidationError,
)
from spendwise.domain.gamification import (
    award_expense_logged,
    contribute_to_goal,
    evaluate_challenge,
    evaluate_daily_bonus,
    is_expired,
    reward_challenge,
)
from spendwise.domain.ledger import (
    as_local,
    expenses_in_month,
    expenses_on_day,
    sum_amounts,
    top_categories,
)
from spendwise.domain.validation import (
    create_expense,
    create_profile,
    create_savings_goal,
    generate_id,
    validate_challenge,
    validate_profile_fields,
)
from spendwise.store import codec
from spendwise.store.base import (
    ALL_KEYS,
    CHALLENGES_KEY,
    DAILY_BONUS_KEY,
    EXPENSES_KEY,
    PROFILE_KEY,
    Store,
)

logger = logging.getLogger(__name__)

UPDATABLE_PROFILE_FIELDS = ("name", "email", "monthly_income", "monthly_budget")
RECENT_EXPENSE_COUNT = 5

T = TypeVar("T")


@dataclass(frozen=True)
class MutationResult(Generic[T]):
    """Value produced by a mutation plus any failure to persist it."""

    value: T
    persistence_error: Optional[PersistenceError] = None

    @property
    def persisted(self) -> bool:
        return self.persistence_error is None


class SessionController:
    """Owns the in-memory profile, ledger, challenges and bonus marker."""

    def __init__(self, store: Store, clock: Callable[[], datetime] = datetime.now):
        """Initialize session controller.

        Args:
            store: Store used to load and persist state
            clock: Returns the current local time
        """
        self.store = store
        self.clock = clock
        self._profile: Optional[Profile] = None
        self._expenses: list[Expense] = []
        self._challenges: list[Challenge] = []
        self._last_bonus_date: Optional[str] = None
        self._warnings: list[PersistenceError] = []
        self._load_failed = False

    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return tuple(self._expenses)

    @property
    def challenges(self) -> tuple[Challenge, ...]:
        return tuple(self._challenges)

    @property
    def last_bonus_date(self) -> Optional[str]:
        return self._last_bonus_date

    @property
    def has_profile(self) -> bool:
        return self._profile is not None

    def pop_warnings(self) -> list[PersistenceError]:
        """Return and clear persistence failures raised while building views."""
        warnings, self._warnings = self._warnings, []
        return warnings

    # Loading

    def load(self) -> Optional[DomainError]:
        """Load state from the store.

        Profile and ledger are loaded together: if either is corrupt every key
        is discarded and the session starts without a profile. If the store
        cannot be read, onboarding is refused until a later load succeeds or
        the session is reset. Never raises.

        Returns:
            The error recovered from, or None if everything loaded cleanly
        """
        self._clear()
        self._load_failed = False
        try:
            raw_profile = self.store.get(PROFILE_KEY)
            raw_expenses = self.store.get(EXPENSES_KEY)
        except PersistenceError as e:
            logger.warning("Could not read stored profile: %s", e)
            self._load_failed = True
            return e

        if raw_profile is None:
            return None

        try:
            profile = codec.decode_profile(raw_profile)
            expenses = codec.decode_expenses(raw_expenses) if raw_expenses is not None else []
        except CorruptStateError as e:
            logger.warning("Discarding corrupt profile and all dependent state: %s", e)
            self._discard(*ALL_KEYS)
            return e

        self._profile = profile
        self._expenses = expenses

        problem: Optional[DomainError] = None
        try:
            raw_marker = self.store.get(DAILY_BONUS_KEY)
            if raw_marker is not None:
                self._last_bonus_date = codec.decode_bonus_date(raw_marker)
        except CorruptStateError as e:
            logger.warning("Discarding corrupt daily bonus marker: %s", e)
            self._discard(DAILY_BONUS_KEY)
            problem = e
        except PersistenceError as e:
            logger.warning("Could not read daily bonus marker: %s", e)
            problem = e

        try:
            raw_challenges = self.store.get(CHALLENGES_KEY)
            if raw_challenges is not None:
                self._challenges = codec.decode_challenges(raw_challenges)
        except CorruptStateError as e:
            logger.warning("Discarding corrupt challenges: %s", e)
            self._discard(CHALLENGES_KEY)
            problem = problem or e
        except PersistenceError as e:
            logger.warning("Could not read challenges: %s", e)
            problem = problem or e

        logger.debug(
            "Loaded profile %s with %d expenses and %d challenges",
            profile.id,
            len(self._expenses),
            len(self._challenges),
        )
        return problem

    # Mutations

    def create_profile(
        self, name: object, email: object, monthly_income: object, monthly_budget: object
    ) -> MutationResult[Profile]:
        """Complete onboarding by creating the profile.

        Raises:
            ValidationError: If input is invalid or a profile already exists
        """
        if self._profile is not None:
            raise ValidationError("A profile already exists", field="profile")
        if self._load_failed:
            raise ValidationError(errors.store_unreadable(), field="profile")
        now = self.clock()
        profile = create_profile(name, email, monthly_income, monthly_budget, now=now)
        self._profile = profile
        self._expenses = []
        self._challenges = []
        logger.info("Created profile %s", profile.id)
        error = self._persist(PROFILE_KEY, EXPENSES_KEY, CHALLENGES_KEY)
        return MutationResult(profile, error)

    def append_expense(
        self,
        amount: object,
        category: object,
        description: object,
        is_recurring: bool = False,
    ) -> MutationResult[Expense]:
        """Record an expense, awarding the logging point.

        Raises:
            ValidationError: If input is invalid or there is no profile
        """
        profile = self._require_profile()
        now = self.clock()
        expense = create_expense(
            amount,
            category,
            description,
            now=now,
            expense_id=self._next_expense_id(now),
            is_recurring=is_recurring,
        )
        self._expenses.append(expense)
        self._profile = award_expense_logged(profile, now)
        logger.info("Logged expense %s of %s (%s)", expense.id, expense.amount, expense.category)
        error = self._persist(EXPENSES_KEY, PROFILE_KEY)
        refresh_error = self._recompute(now)
        return MutationResult(expense, error or refresh_error)

    def update_profile(self, **changes: object) -> MutationResult[Profile]:
        """Update editable profile fields.

        Only name, email, monthly_income and monthly_budget may change. On any
        validation failure the profile is left untouched.

        Raises:
            ValidationError: If a field is unknown or invalid
        """
        profile = self._require_profile()
        for field_name in changes:
            if field_name not in UPDATABLE_PROFILE_FIELDS:
                raise ValidationError(
                    f"Field '{field_name}' cannot be updated", field=field_name
                )
        merged = {
            field_name: changes.get(field_name, getattr(profile, field_name))
            for field_name in UPDATABLE_PROFILE_FIELDS
        }
        name, email, income, budget = validate_profile_fields(**merged)
        now = self.clock()
        # settle challenges against the budget they ran under
        settle_error = self._recompute(now)
        profile = self._profile
        self._profile = replace(
            profile, name=name, email=email, monthly_income=income, monthly_budget=budget
        )
        error = self._persist(PROFILE_KEY)
        refresh_error = self._recompute(now)
        return MutationResult(self._profile, settle_error or error or refresh_error)

    def join_challenge(self, challenge: Challenge) -> MutationResult[Challenge]:
        """Start tracking a challenge.

        Raises:
            ValidationError: If the challenge is invalid or already joined
        """
        self._require_profile()
        validate_challenge(challenge)
        if any(existing.id == challenge.id for existing in self._challenges):
            raise ValidationError(
                f"Challenge '{challenge.id}' already joined", field="challenge"
            )
        self._challenges.append(challenge)
        error = self._persist(CHALLENGES_KEY)
        refresh_error = self._recompute(self.clock())
        joined = next(c for c in self._challenges if c.id == challenge.id)
        return MutationResult(joined, error or refresh_error)

    def add_savings_goal(
        self, title: object, target_amount: object, target_date: datetime
    ) -> MutationResult[SavingsGoal]:
        """Append a savings goal to the profile."""
        profile = self._require_profile()
        goal = create_savings_goal(title, target_amount, target_date, now=self.clock())
        self._profile = replace(profile, savings_goals=profile.savings_goals + (goal,))
        return MutationResult(goal, self._persist(PROFILE_KEY))

    def contribute_to_savings_goal(
        self, goal_id: str, amount: object
    ) -> MutationResult[SavingsGoal]:
        """Add money to a savings goal."""
        profile = self._require_profile()
        self._profile = contribute_to_goal(profile, goal_id, amount, self.clock())
        goal = next(g for g in self._profile.savings_goals if g.id == goal_id)
        return MutationResult(goal, self._persist(PROFILE_KEY))

    def reset(self) -> MutationResult[None]:
        """Erase all state, in memory and in the store."""
        self._clear()
        self._load_failed = False
        error = None
        for key in ALL_KEYS:
            try:
                self.store.delete(key)
            except PersistenceError as e:
                logger.warning("Could not delete %s during reset: %s", key, e)
                error = error or e
        logger.info("Session state reset")
        return MutationResult(None, error)

    def refresh(self, now: Optional[datetime] = None) -> Optional[PersistenceError]:
        """Re-evaluate the daily bonus and challenges at ``now``."""
        return self._recompute(now or self.clock())

    # Views

    def get_dashboard_view(self, now: Optional[datetime] = None) -> DashboardView:
        """Derive the dashboard figures at ``now``.

        Raises:
            ValidationError: If there is no profile
        """
        now = now or self.clock()
        profile = self._require_profile()
        self._refresh_for_view(now)
        # refresh may have awarded points
        profile = self._profile
        local_now = as_local(now)

        monthly = expenses_in_month(self._expenses, local_now.year, local_now.month)
        spent = sum_amounts(monthly)
        today_spent = sum_amounts(expenses_on_day(self._expenses, local_now.date()))
        allowance = daily_budget(profile.monthly_budget)
        used = percentage_used(profile.monthly_budget, spent)

        return DashboardView(
            total_spent_this_month=spent,
            remaining=remaining(profile.monthly_budget, spent),
            percentage_used=used,
            status_band=status_band(used),
            today_spent=today_spent,
            daily_budget=allowance,
            is_under_daily_budget=is_under_daily_budget(today_spent, allowance),
            top_categories=tuple(top_categories(monthly)),
            points=profile.points,
            level=profile.level,
            recent_expenses=tuple(reversed(monthly[-RECENT_EXPENSE_COUNT:])),
        )

    def get_challenge_views(self, now: Optional[datetime] = None) -> list[ChallengeView]:
        """Evaluate every joined challenge at ``now``."""
        now = now or self.clock()
        self._refresh_for_view(now)
        return [
            ChallengeView(
                challenge=challenge,
                current_progress=challenge.current_progress,
                is_completed=challenge.is_completed,
                is_expired=not challenge.is_completed and is_expired(challenge, now),
            )
            for challenge in self._challenges
        ]

    # Internals

    def _clear(self) -> None:
        self._profile = None
        self._expenses = []
        self._challenges = []
        self._last_bonus_date = None

    def _require_profile(self) -> Profile:
        if self._profile is None:
            raise ValidationError(errors.no_profile(), field="profile")
        return self._profile

    def _next_expense_id(self, now: datetime) -> str:
        taken = {expense.id for expense in self._expenses}
        candidate = int(generate_id(now))
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def _recompute(self, now: datetime) -> Optional[PersistenceError]:
        if self._profile is None:
            return None
        changed: set[str] = set()

        bonus = evaluate_daily_bonus(self._profile, self._expenses, now, self._last_bonus_date)
        if bonus.awarded:
            self._profile = bonus.profile
            self._last_bonus_date = bonus.last_bonus_date
            changed.update((PROFILE_KEY, DAILY_BONUS_KEY))

        evaluated = []
        for challenge in self._challenges:
            evaluation = evaluate_challenge(challenge, self._expenses, self._profile, now)
            if evaluation.challenge != challenge:
                changed.add(CHALLENGES_KEY)
            if evaluation.newly_completed:
                self._profile = reward_challenge(self._profile, evaluation.challenge, now)
                changed.update((PROFILE_KEY, CHALLENGES_KEY))
            evaluated.append(evaluation.challenge)
        self._challenges = evaluated

        return self._persist(*(key for key in ALL_KEYS if key in changed))

    def _refresh_for_view(self, now: datetime) -> None:
        error = self._recompute(now)
        if error is not None:
            self._warnings.append(error)

    def _encode(self, key: str) -> bytes:
        if key == PROFILE_KEY:
            return codec.encode_profile(self._require_profile())
        if key == EXPENSES_KEY:
            return codec.encode_expenses(self._expenses)
        if key == CHALLENGES_KEY:
            return codec.encode_challenges(self._challenges)
        if key == DAILY_BONUS_KEY and self._last_bonus_date is not None:
            return codec.encode_bonus_date(self._last_bonus_date)
        raise KeyError(key)

    def _persist(self, *keys: str) -> Optional[PersistenceError]:
        """Write the current value of each key, returning the first failure."""
        first_error = None
        for key in keys:
            try:
                self.store.set(key, self._encode(key))
            except PersistenceError as e:
                logger.warning("Could not persist %s: %s", key, e)
                first_error = first_error or e
        return first_error

    def _discard(self, *keys: str) -> None:
        for key in keys:
            try:
                self.store.delete(key)
            except PersistenceError as e:
                logger.warning("Could not discard %s: %s", key, e)
