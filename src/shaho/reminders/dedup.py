"""Notification deduplication gate.

A reminder is a duplicate when the recipient already has a reminder of the
same category about the same subject. Pre-deadline and day-of reminders are
sent once, ever. Overdue reminders repeat, at most once per local calendar
day.

The check is read-then-write against the notification store and is not
transactional: two concurrent passes for one organization can both pass the
gate. Passes are serialized with the organization lock instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo

from shaho.core.protocols import INotificationStore
from shaho.deadlines.localtime import resolve_timezone, to_local_date
from shaho.models.notification import Notification, NotificationType, ReminderCategory
from shaho.models.reminder import ReminderRequest, ReminderSubject

logger = logging.getLogger(__name__)


def matches_subject(notification: Notification, subject: ReminderSubject) -> bool:
    """Whether a stored notification is about ``subject``."""
    if subject.application_id is not None:
        return notification.application_id == subject.application_id
    return (
        notification.application_id is None
        and notification.employee_id == subject.employee_id
        and subject.application_type_name in notification.message
    )


class DeduplicationGate:
    """Filters reminder requests against each recipient's reminder history.

    History is fetched once per recipient and kept for the gate's lifetime;
    notifications created through :meth:`record` are added to it, so a
    single pass never emits the same reminder twice.
    """

    def __init__(
        self,
        store: INotificationStore,
        organization_id: str,
        *,
        timezone: tzinfo | str = "Asia/Tokyo",
        history_limit: int = 1000,
        skip_duplicate_check: bool = False,
    ) -> None:
        self._store = store
        self._organization_id = organization_id
        self._tz = resolve_timezone(timezone)
        self._history_limit = history_limit
        self._skip = skip_duplicate_check
        self._history: dict[str, list[Notification]] = {}

    def _history_for(self, user_id: str) -> list[Notification]:
        if user_id not in self._history:
            self._history[user_id] = self._store.query(
                user_id,
                self._organization_id,
                type=NotificationType.REMINDER,
                limit=self._history_limit,
            )
        return self._history[user_id]

    def is_duplicate(self, request: ReminderRequest, now: datetime) -> bool:
        if self._skip:
            return False
        category = request.event.category
        today = to_local_date(now, self._tz)
        for sent in self._history_for(request.recipient_user_id):
            if sent.reminder_category() != category:
                continue
            if not matches_subject(sent, request.subject):
                continue
            if category == ReminderCategory.OVERDUE and to_local_date(sent.created_at, self._tz) != today:
                continue
            logger.debug(
                "Duplicate %s reminder for user=%s application=%s employee=%s",
                category.value, request.recipient_user_id,
                request.subject.application_id, request.subject.employee_id,
            )
            return True
        return False

    def record(self, notification: Notification) -> None:
        """Add a freshly created notification to the cached history."""
        self._history_for(notification.user_id).append(notification)
