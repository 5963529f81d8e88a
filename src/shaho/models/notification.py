"""Notification records: engine output and dedup history."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from shaho.models.base import DocumentModel


class NotificationType(StrEnum):
    APPLICATION = "application"
    APPROVAL = "approval"
    REJECTION = "rejection"
    RETURN = "return"
    REMINDER = "reminder"
    SYSTEM = "system"


class NotificationPriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReminderCategory(StrEnum):
    PRE_DEADLINE = "pre_deadline"
    DAY_OF = "day_of"
    OVERDUE = "overdue"

    @property
    def title(self) -> str:
        return _TITLES[self]

    @property
    def marker(self) -> str:
        """Substring identifying this category in a stored notification title."""
        return _MARKERS[self]


_TITLES = {
    ReminderCategory.PRE_DEADLINE: "Upcoming application deadline",
    ReminderCategory.DAY_OF: "Application deadline is today",
    ReminderCategory.OVERDUE: "Application deadline overdue",
}

_MARKERS = {
    ReminderCategory.PRE_DEADLINE: "Upcoming",
    ReminderCategory.DAY_OF: "is today",
    ReminderCategory.OVERDUE: "overdue",
}


class Notification(DocumentModel):
    """A write-once notification addressed to one user."""

    id: Optional[str] = None
    user_id: str
    application_id: Optional[str] = None
    employee_id: Optional[str] = None
    type: NotificationType
    title: str
    message: str
    read: bool = False
    priority: NotificationPriority = NotificationPriority.MEDIUM
    organization_id: str
    created_at: datetime
    read_at: Optional[datetime] = None

    def reminder_category(self) -> ReminderCategory | None:
        """Recover the reminder category from the title."""
        if self.type != NotificationType.REMINDER:
            return None
        for category in ReminderCategory:
            if category.marker in self.title:
                return category
        return None
