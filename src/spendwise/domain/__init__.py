"""Domain layer for spendwise application."""

from spendwise.domain.entities import (
    Badge,
    BadgeCategory,
    Challenge,
    ChallengeType,
    ChallengeView,
    DashboardView,
    Expense,
    ExpenseCategory,
    Profile,
    SavingsGoal,
    StatusBand,
)
from spendwise.domain.errors import (
    CorruptStateError,
    DomainError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "Badge",
    "BadgeCategory",
    "Challenge",
    "ChallengeType",
    "ChallengeView",
    "DashboardView",
    "Expense",
    "ExpenseCategory",
    "Profile",
    "SavingsGoal",
    "StatusBand",
    "CorruptStateError",
    "DomainError",
    "PersistenceError",
    "ValidationError",
]
