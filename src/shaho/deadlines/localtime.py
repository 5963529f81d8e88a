"""Organization-local calendar helpers."""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shaho.core.exceptions import ConfigurationError


def resolve_timezone(tz: tzinfo | str) -> tzinfo:
    if not isinstance(tz, str):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {tz!r}") from exc


def to_local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of ``moment`` in ``tz``; naive datetimes are taken as local."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def to_local_datetime(moment: datetime, tz: tzinfo) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)
