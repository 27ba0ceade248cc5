"""Shared pytest fixtures for spendwise tests."""

import tempfile
import os
from datetime import datetime, timedelta
from decimal import Decimal
import pytest

from spendwise.domain.entities import Expense, ExpenseCategory
from spendwise.domain.errors import PersistenceError
from spendwise.domain.validation import create_profile
from spendwise.session import SessionController
from spendwise.store.factories import create_sqlite_store
from spendwise.store.memory import MemoryStore


class FakeClock:
    """Controllable replacement for datetime.now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FailingStore(MemoryStore):
    """Memory store whose reads and writes can be switched off."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key):
        if self.fail_reads:
            raise PersistenceError(f"Could not read '{key}': disk unavailable", key=key)
        return super().get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise PersistenceError(f"Could not write '{key}': disk unavailable", key=key)
        super().set(key, value)

    def delete(self, key):
        if self.fail_writes:
            raise PersistenceError(f"Could not delete '{key}': disk unavailable", key=key)
        super().delete(key)


@pytest.fixture
def temp_store():
    """Create a temporary SQLite store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """A clock fixed at mid-day on 15 March 2024."""
    return FakeClock(datetime(2024, 3, 15, 12, 0, 0))


@pytest.fixture
def memory_store():
    return FailingStore()


@pytest.fixture
def session(memory_store, clock):
    """Session controller over an in-memory store."""
    controller = SessionController(memory_store, clock=clock)
    controller.load()
    return controller


@pytest.fixture
def onboarded_session(session):
    """Session with the standard profile (income 2,000,000, budget 1,500,000)."""
    session.create_profile("Amina", "amina@example.com", "2000000", "1500000")
    return session


@pytest.fixture
def sample_profile(clock):
    """Standalone profile entity."""
    return create_profile(
        "Amina", "amina@example.com", Decimal("2000000"), Decimal("1500000"), now=clock.now
    )


def make_expense(
    amount,
    when: datetime,
    category: ExpenseCategory = ExpenseCategory.FOOD,
    description: str = "Lunch",
    expense_id: str | None = None,
) -> Expense:
    """Build an expense without going through the session."""
    return Expense(
        id=expense_id or str(int(when.timestamp() * 1_000_000)),
        amount=Decimal(str(amount)),
        category=category,
        description=description,
        date=when,
    )


@pytest.fixture
def expense_factory():
    return make_expense


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
