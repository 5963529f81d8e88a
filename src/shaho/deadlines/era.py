"""Japanese era dates to Gregorian calendar dates."""

from __future__ import annotations

from datetime import MAXYEAR, MINYEAR, date

from shaho.models.dates import Era, EraDate

# Gregorian year = era-relative year + offset
ERA_OFFSETS: dict[str, int] = {
    Era.REIWA: 2018,
    Era.HEISEI: 1988,
    Era.SHOWA: 1925,
    Era.TAISHO: 1911,
}


def _gregorian_year(value: EraDate) -> int | None:
    offset = ERA_OFFSETS.get(value.era or "")
    if offset is None or not value.year or value.year <= 0:
        return None
    year = value.year + offset
    return year if MINYEAR <= year <= MAXYEAR else None


def convert_era_date(value: date | EraDate | None) -> date | None:
    """Convert an era date (or pass through a calendar date).

    Returns None when the value is missing, the era is unknown, any of
    year/month/day is absent or non-positive, or the combination is not a
    real calendar day.
    """
    if value is None or isinstance(value, date):
        return value
    year = _gregorian_year(value)
    if year is None or not value.month or not value.day or value.month <= 0 or value.day <= 0:
        return None
    try:
        return date(year, value.month, value.day)
    except ValueError:
        return None


def resolve_year(value: date | EraDate | None) -> int | None:
    """Gregorian year of a date or of an era date's year field alone."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.year
    return _gregorian_year(value)


def resolve_year_month(value: date | EraDate | None) -> tuple[int, int] | None:
    """Gregorian (year, month); the day may be absent on era input."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.year, value.month
    year = _gregorian_year(value)
    if year is None or not value.month or not 1 <= value.month <= 12:
        return None
    return year, value.month
