"""Anniversary-based leave year arithmetic.

A leave year runs from an anniversary of the hiring date up to the day before
the next anniversary. A Feb 29 hiring date anniversaries on Feb 28 in years
that have no Feb 29, so every leave year is 365 or 366 days long.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from leave_engine.schemas.balance import LeaveYearWindow

_ONE_DAY = timedelta(days=1)


def anniversary_in_year(hiring_date: date, year: int) -> date:
    """Return the anniversary of ``hiring_date`` in calendar ``year``."""
    if hiring_date.month == 2 and hiring_date.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return date(year, hiring_date.month, hiring_date.day)


def resolve_leave_year(hiring_date: date, today: date) -> LeaveYearWindow:
    """Return the leave year that contains ``today``."""
    this_year = anniversary_in_year(hiring_date, today.year)
    if today < this_year:
        return LeaveYearWindow(
            start=anniversary_in_year(hiring_date, today.year - 1),
            end=this_year - _ONE_DAY,
        )
    return LeaveYearWindow(
        start=this_year,
        end=anniversary_in_year(hiring_date, today.year + 1) - _ONE_DAY,
    )


def next_anniversary(hiring_date: date, today: date, *, inclusive: bool = True) -> date:
    """Return the first anniversary on or after ``today``.

    With ``inclusive=False`` an anniversary falling on ``today`` is skipped.
    """
    candidate = anniversary_in_year(hiring_date, today.year)
    if candidate < today or (not inclusive and candidate == today):
        candidate = anniversary_in_year(hiring_date, today.year + 1)
    return candidate


def closed_leave_year(hiring_date: date, today: date) -> LeaveYearWindow | None:
    """Return the most recently ended leave year, or None before the first anniversary."""
    current = resolve_leave_year(hiring_date, today)
    if current.start <= hiring_date:
        return None
    return resolve_leave_year(hiring_date, current.start - _ONE_DAY)
