"""Common utilities for RentWise backend."""

import calendar
import secrets
import string
from datetime import date


def add_months(start: date, months: int) -> date:
    """Add calendar months to a date, clamping to the last day of the month.

    Example: 2024-01-31 + 1 month -> 2024-02-29.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_temporary_password(length: int = 10) -> str:
    """Generate a random password for accounts created on a user's behalf.

    Always contains at least one letter and one digit.
    """
    alphabet = string.ascii_letters + string.digits
    while True:
        candidate = "".join(secrets.choice(alphabet) for _ in range(length))
        if any(c.isalpha() for c in candidate) and any(c.isdigit() for c in candidate):
            return candidate
