"""Era-tagged dates as entered on Japanese filing forms."""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, BeforeValidator, ValidationInfo, field_validator

from shaho.models.base import context_timezone, to_calendar_date


class Era(StrEnum):
    REIWA = "reiwa"
    HEISEI = "heisei"
    SHOWA = "showa"
    TAISHO = "taisho"


class EraDate(BaseModel):
    """A date written as era + era-relative year/month/day.

    Fields are optional: forms submit partially filled groups (for example a
    year/month with no day), which are valid input but not convertible.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    era: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None

    @field_validator("year", "month", "day", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        if isinstance(v, str):
            v = v.strip()
            return int(v) if v.isdigit() else None
        return v


def _to_date_input(value: Any, info: ValidationInfo) -> Any:
    if isinstance(value, dict):
        return value if "era" in value else None
    return to_calendar_date(value, context_timezone(info))


# A date field that may hold a Gregorian date or an era date.
DateInput = Annotated[Union[date, EraDate, None], BeforeValidator(_to_date_input)]
