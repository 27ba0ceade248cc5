"""Abstract key/value store interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Keys used by the session controller
PROFILE_KEY = "spendwise-user"
EXPENSES_KEY = "spendwise-expenses"
DAILY_BONUS_KEY = "spendwise-last-daily-bonus"
CHALLENGES_KEY = "spendwise-challenges"

ALL_KEYS = (PROFILE_KEY, EXPENSES_KEY, DAILY_BONUS_KEY, CHALLENGES_KEY)


class Store(ABC):
    """Durable key/value byte storage for spendwise.

    Each call is a single unit of work: a write either lands in full or the
    previous value remains. Failures raise ``PersistenceError``.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the underlying storage."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the underlying storage."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Prepare storage (create tables)."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Get the value stored under ``key``, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""
        pass
