"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    words: "today", "yesterday", "tomorrow", "next week", "next month",
    "in N days".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "next week": today + timedelta(days=7),
        "next month": today + relativedelta(months=1),
        "next year": today + relativedelta(years=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # "in 10 days"
    parts = date_str.split()
    if len(parts) == 3 and parts[0] == "in" and parts[2] in ("day", "days") and parts[1].isdigit():
        return today + timedelta(days=int(parts[1]))

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def end_of_day(day: date) -> datetime:
    """Last representable local instant of ``day``."""
    return datetime.combine(day, time.max)
