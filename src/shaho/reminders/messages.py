"""Reminder notification text and priority."""

from __future__ import annotations

from datetime import date, datetime

from shaho.models.notification import (
    Notification,
    NotificationPriority,
    NotificationType,
    ReminderCategory,
)
from shaho.models.reminder import ReminderRequest

HOLIDAY_CAVEAT = (
    "If the deadline falls on a weekend or public holiday, "
    "the next business day may apply."
)


def _format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def build_message(application_type_name: str, category: ReminderCategory,
                  deadline: date, days_until: int) -> str:
    when = _format_date(deadline)
    if category == ReminderCategory.OVERDUE:
        return f"The {application_type_name} application is past its deadline ({when})."
    if category == ReminderCategory.DAY_OF:
        return f"The {application_type_name} application is due today ({when})."
    unit = "day" if days_until == 1 else "days"
    return (
        f"The {application_type_name} application is due in {days_until} {unit} "
        f"(deadline: {when}). {HOLIDAY_CAVEAT}"
    )


def priority_for(category: ReminderCategory, days_until: int) -> NotificationPriority:
    if category in (ReminderCategory.OVERDUE, ReminderCategory.DAY_OF) or days_until <= 1:
        return NotificationPriority.HIGH
    return NotificationPriority.MEDIUM


def build_notification(request: ReminderRequest, now: datetime) -> Notification:
    """Materialize a reminder request as an unsaved notification."""
    event = request.event
    subject = request.subject
    return Notification(
        user_id=request.recipient_user_id,
        application_id=subject.application_id,
        employee_id=subject.employee_id,
        type=NotificationType.REMINDER,
        title=event.category.title,
        message=build_message(subject.application_type_name, event.category,
                              event.deadline, event.days_until),
        priority=priority_for(event.category, event.days_until),
        organization_id=subject.organization_id,
        created_at=now,
    )
