"""Statutory deadline computation: era conversion, business days, per-type rules."""

from shaho.deadlines.business_day import adjust_for_business_day
from shaho.deadlines.calculator import DeadlineCalculator, DeadlineResult
from shaho.deadlines.era import convert_era_date

__all__ = [
    "DeadlineCalculator",
    "DeadlineResult",
    "adjust_for_business_day",
    "convert_era_date",
]
