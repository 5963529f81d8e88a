"""Reminder events, requests and run summaries."""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from shaho.models.notification import ReminderCategory


class ReminderAudience(StrEnum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class ReminderEvent(BaseModel):
    """A reminder that is due today for one audience."""

    audience: ReminderAudience
    category: ReminderCategory
    deadline: date
    days_until: int


class ReminderSubject(BaseModel):
    """What a reminder is about: a stored application, or an employee's pending filing."""

    organization_id: str
    application_type_name: str
    application_id: Optional[str] = None
    employee_id: Optional[str] = None


class ReminderRequest(BaseModel):
    """One reminder addressed to one recipient, before dedup."""

    recipient_user_id: str
    subject: ReminderSubject
    event: ReminderEvent


class ReminderRunSummary(BaseModel):
    """Counters for one organization pass."""

    organization_id: str
    skipped: bool = False  # no reminder settings configured
    applications_evaluated: int = 0
    applications_skipped: int = 0
    employees_evaluated: int = 0
    notifications_created: int = 0
    duplicates_suppressed: int = 0
    failures: list[str] = Field(default_factory=list)
