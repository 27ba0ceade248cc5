"""Pure aggregation over the expense ledger.

All functions are total and side-effect free. Calendar comparisons use the
local wall-clock fields of each timestamp.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal

from spendwise.domain.entities import Expense, ExpenseCategory


def as_local(moment: datetime) -> datetime:
    """Return ``moment`` as naive local time.

    Aware timestamps are converted to the local timezone; naive ones are
    already local.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def local_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in local time."""
    return as_local(moment).date()


def expenses_in_month(ledger: Sequence[Expense], year: int, month: int) -> list[Expense]:
    """Expenses dated in the given calendar month, in ledger order."""
    result = []
    for expense in ledger:
        when = as_local(expense.date)
        if when.year == year and when.month == month:
            result.append(expense)
    return result


def expenses_on_day(ledger: Sequence[Expense], day: date | datetime) -> list[Expense]:
    """Expenses dated on the given calendar day, in ledger order."""
    if isinstance(day, datetime):
        day = local_day(day)
    return [expense for expense in ledger if local_day(expense.date) == day]


def expenses_between(
    ledger: Sequence[Expense], start: datetime, end: datetime
) -> list[Expense]:
    """Expenses with ``start <= date <= end``, in ledger order."""
    start = as_local(start)
    end = as_local(end)
    return [expense for expense in ledger if start <= as_local(expense.date) <= end]


def sum_amounts(expenses: Iterable[Expense]) -> Decimal:
    """Sum of expense amounts; zero for no expenses."""
    return sum((expense.amount for expense in expenses), Decimal("0"))


def category_breakdown(expenses: Iterable[Expense]) -> list[tuple[ExpenseCategory, Decimal]]:
    """Total per category, largest first.

    Only categories present in ``expenses`` appear. Ties keep the order in
    which each category first occurred.
    """
    totals: dict[ExpenseCategory, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, Decimal("0")) + expense.amount
    # sorted() is stable, so equal totals keep first-occurrence order
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def top_categories(
    expenses: Iterable[Expense], limit: int = 3
) -> list[tuple[ExpenseCategory, Decimal]]:
    """The ``limit`` highest-spend categories."""
    return category_breakdown(expenses)[:limit]


def daily_totals(expenses: Iterable[Expense]) -> dict[date, Decimal]:
    """Total spend per calendar day, keyed in first-seen order."""
    totals: dict[date, Decimal] = {}
    for expense in expenses:
        day = local_day(expense.date)
        totals[day] = totals.get(day, Decimal("0")) + expense.amount
    return totals
