"""Currency formatting for Ugandan Shillings."""

from decimal import Decimal, ROUND_HALF_UP

CURRENCY_CODE = "UGX"


def format_currency(amount: Decimal) -> str:
    """Format ``amount`` as whole shillings, e.g. ``UGX 1,500,000``.

    UGX has no minor unit, so amounts are rounded to whole numbers.
    """
    whole = amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    if whole < 0:
        return f"-{CURRENCY_CODE} {-whole:,}"
    return f"{CURRENCY_CODE} {whole:,}"


def format_percentage(value: Decimal) -> str:
    """Format a percentage with one decimal place."""
    return f"{value.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}%"
