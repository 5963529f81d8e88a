"""Tests for weekend adjustment."""

from __future__ import annotations

from datetime import date, timedelta

from shaho.deadlines.business_day import adjust_for_business_day


def test_saturday_moves_to_monday():
    assert adjust_for_business_day(date(2024, 4, 6)) == date(2024, 4, 8)


def test_sunday_moves_to_monday():
    assert adjust_for_business_day(date(2024, 4, 7)) == date(2024, 4, 8)


def test_weekday_unchanged():
    assert adjust_for_business_day(date(2024, 4, 10)) == date(2024, 4, 10)


def test_never_lands_on_weekend():
    start = date(2024, 1, 1)
    for offset in range(366):
        assert adjust_for_business_day(start + timedelta(days=offset)).weekday() < 5


def test_public_holidays_are_not_considered():
    # 2024-04-29 (Showa Day) is a Monday holiday
    assert adjust_for_business_day(date(2024, 4, 29)) == date(2024, 4, 29)
