"""Date manipulation utilities"""

from datetime import date, datetime


def parse_date(value: date | datetime | str) -> date:
    """
    Coerce a date-like value to a calendar date.

    Accepts date objects, datetimes (time part dropped) and ISO 8601 strings
    in either date or datetime form.

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            # fromisoformat only learned the trailing "Z" in 3.11
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    raise ValueError(f"Unsupported date value: {value!r}")


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end"""
    return (end - start).days
