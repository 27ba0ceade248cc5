"""Utility functions for spendwise."""

from spendwise.utils.date_parser import parse_date
from spendwise.utils.amount_parser import parse_amount
from spendwise.utils.currency import format_currency

__all__ = ["parse_date", "parse_amount", "format_currency"]
