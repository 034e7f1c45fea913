"""
Date utilities for daily challenge scopes.

Daily scopes are keyed by the UTC calendar date in ISO form (YYYY-MM-DD).
"""

from datetime import datetime, timezone
from typing import Optional

from rankings.constants import DAILY_DATE_FORMAT
from rankings.utils.leaderboard_exceptions import InvalidRequestError


def today_utc(now: Optional[datetime] = None) -> str:
    """Return today's daily challenge date in UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(DAILY_DATE_FORMAT)


def resolve_daily_date(date: Optional[str]) -> str:
    """
    Validate a daily challenge date, defaulting to today (UTC).

    Raises:
        InvalidRequestError: If the date is not a YYYY-MM-DD string
    """
    if date is None or date == "":
        return today_utc()
    if not isinstance(date, str):
        raise InvalidRequestError("Date must be a YYYY-MM-DD string")
    try:
        parsed = datetime.strptime(date, DAILY_DATE_FORMAT)
    except ValueError:
        raise InvalidRequestError(f"Invalid date '{date}', expected YYYY-MM-DD")
    # strptime accepts unpadded fields; keys must use the canonical form
    return parsed.strftime(DAILY_DATE_FORMAT)
