"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    Never mutates state. ``field`` names the offending input when known.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class CorruptStateError(DomainError):
    """Persisted bytes failed to parse or failed validation on load."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class PersistenceError(DomainError):
    """A store read or write failed.

    Reported to the caller as a warning; in-memory state is kept.
    """

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


def required_field(field: str) -> str:
    """Return message for an empty required text field."""
    return f"{field} is required"


def not_positive(field: str, value: object) -> str:
    """Return message for a non-positive or non-finite amount."""
    return f"{field} must be a positive number, got {value!r}"


def budget_exceeds_income(budget: object, income: object) -> str:
    """Return message when the monthly budget is above monthly income."""
    return f"Monthly budget ({budget}) cannot be greater than monthly income ({income})"


def unknown_choice(field: str, value: object, choices: list[str]) -> str:
    """Return message for a value outside a closed enumeration."""
    return f"Unknown {field} '{value}'. Expected one of: {', '.join(choices)}"


def description_too_long(length: int, limit: int) -> str:
    """Return message for an over-long expense description."""
    return f"Description is {length} characters long; the limit is {limit}"


def savings_goal_not_found(goal_id: str) -> str:
    """Return message for missing savings goal."""
    return f"Savings goal {goal_id} not found"


def no_profile() -> str:
    """Return message when an operation needs a profile but none exists."""
    return "No profile found. Complete onboarding first"


def store_failure(action: str, key: str, error: Exception) -> str:
    """Return message for a failed store operation."""
    return f"Could not {action} '{key}': {error}"


def store_unreadable() -> str:
    """Return message when onboarding would overwrite data that could not be read."""
    return "Stored data could not be read. Retry later or reset to start over"


def database_unavailable(path: object, error: Exception) -> str:
    """Return message when the database cannot be opened."""
    return f"Could not open database {path or 'at the default location'}: {error}"
