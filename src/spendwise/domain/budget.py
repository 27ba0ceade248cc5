"""Budget evaluation over a monthly budget and aggregated spending."""

from decimal import Decimal

from spendwise.domain.entities import StatusBand

# Fixed month length used for the daily allowance, not the calendar length.
DAYS_PER_BUDGET_MONTH = 30

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def remaining(monthly_budget: Decimal, spent: Decimal) -> Decimal:
    """Budget left this month; negative when over budget."""
    return monthly_budget - spent


def percentage_used(monthly_budget: Decimal, spent: Decimal) -> Decimal:
    """Share of the monthly budget spent, in percent."""
    if monthly_budget <= 0:
        return ZERO
    return spent / monthly_budget * HUNDRED


def status_band(percentage: Decimal) -> StatusBand:
    """Map percentage used to a status band.

    Each boundary value belongs to the lower band.
    """
    if percentage <= 50:
        return StatusBand.ON_TRACK
    if percentage <= 80:
        return StatusBand.MINDFUL
    if percentage <= 100:
        return StatusBand.NEAR_LIMIT
    return StatusBand.OVER_BUDGET


def daily_budget(monthly_budget: Decimal) -> Decimal:
    """Daily allowance derived from the monthly budget."""
    if monthly_budget <= 0:
        return ZERO
    return monthly_budget / DAYS_PER_BUDGET_MONTH


def is_under_daily_budget(today_spent: Decimal, allowance: Decimal) -> bool:
    """Whether a day's spend fits the daily allowance.

    Without an allowance every day counts as under budget.
    """
    if allowance <= 0:
        return True
    return today_spent <= allowance


def savings_rate(monthly_income: Decimal, monthly_budget: Decimal) -> Decimal:
    """Planned savings (income not budgeted) as a percentage of income."""
    if monthly_income <= 0:
        return ZERO
    return (monthly_income - monthly_budget) / monthly_income * HUNDRED
