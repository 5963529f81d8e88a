"""Shared model configuration and date coercion."""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Annotated, Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationInfo
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for models stored as camelCase documents.

    Unknown fields are kept so that a document read, recomputed and written
    back loses nothing the engine does not model.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        """Dump to a JSON-compatible camelCase dict."""
        return self.model_dump(mode="json", by_alias=True)


DEFAULT_TIMEZONE = ZoneInfo("Asia/Tokyo")


def context_timezone(info: ValidationInfo | None) -> tzinfo:
    """Timezone passed as ``context={"timezone": ...}`` to ``model_validate``."""
    context = info.context if info is not None else None
    return (context or {}).get("timezone") or DEFAULT_TIMEZONE


def to_calendar_date(value: Any, tz: tzinfo | None = None) -> Any:
    """Accept datetimes, ISO strings and blanks where a calendar date is expected.

    Timezone-aware values are read as a date in ``tz`` (Asia/Tokyo by default),
    so ``2024-03-31T15:00:00Z`` is 2024-04-01.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz or DEFAULT_TIMEZONE)
        return value.date()
    return value


def _coerce_calendar_date(value: Any, info: ValidationInfo) -> Any:
    return to_calendar_date(value, context_timezone(info))


CalendarDate = Annotated[Optional[date], BeforeValidator(_coerce_calendar_date)]
