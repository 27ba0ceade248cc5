"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "15000"
    - "15,000"
    - "UGX 15,000"
    - "15000.50"
    - "$15.00"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Remove currency codes and symbols
    amount_str = re.sub(r"(?i)^ugx", "", amount_str)
    amount_str = re.sub(r"[$€£¥]", "", amount_str)

    # Remove thousands separators
    amount_str = amount_str.replace(",", "").replace("_", "")

    amount_str = amount_str.strip()

    try:
        return Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
