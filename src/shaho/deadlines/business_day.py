"""Weekend adjustment of deadlines.

Public holidays are not considered: a deadline falling on a holiday is not
moved. Only Saturday and Sunday roll forward to Monday.
"""

from __future__ import annotations

from datetime import date, timedelta

_SATURDAY = 5
_SUNDAY = 6


def adjust_for_business_day(value: date) -> date:
    """Move a Saturday or Sunday deadline to the following Monday."""
    weekday = value.weekday()
    if weekday == _SATURDAY:
        return value + timedelta(days=2)
    if weekday == _SUNDAY:
        return value + timedelta(days=1)
    return value
