"""
Error taxonomy for the planning core.

The derivation functions never return a sentinel for bad input; they raise one
of these and let the caller decide what the user sees.
"""
from datetime import date, datetime
from typing import Union


class PlanningError(Exception):
    """Base class for errors raised by the derivation core."""


class InvalidInput(PlanningError):
    """A date or reference could not be interpreted."""


class InvalidRecurrence(PlanningError):
    """A recurring schedule template cannot be expanded."""


DateLike = Union[date, datetime, str]


def parse_iso_date(value: DateLike, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field}: expected an ISO date, got {value!r}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise InvalidInput(f"{field}: malformed ISO date {value!r}")
