"""Decides which reminders are due today for one application."""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo

from shaho.core.config import ReminderConfig
from shaho.deadlines.calculator import DeadlineCalculator
from shaho.deadlines.localtime import resolve_timezone, to_local_datetime
from shaho.models.application import Application, ApplicationCategory, ApplicationType
from shaho.models.notification import ReminderCategory
from shaho.models.organization import ReminderSettings
from shaho.models.reminder import ReminderAudience, ReminderEvent

logger = logging.getLogger(__name__)


class ReminderEvaluator:
    """Classifies today's reminder obligations per audience.

    At most one event per audience per pass, by precedence overdue, day-of,
    pre-deadline. Day counts are calendar-day differences in the
    organization's timezone.
    """

    def __init__(self, calculator: DeadlineCalculator, config: ReminderConfig | None = None,
                 timezone: tzinfo | str = "Asia/Tokyo") -> None:
        self._calculator = calculator
        self._config = config or ReminderConfig()
        self._tz = resolve_timezone(timezone)

    def effective_deadline(self, application: Application, legal_deadline: date | None,
                           today: date) -> date | None:
        """The deadline reminders count down to.

        A lapsed statutory deadline on a filing that depends on an internal
        application collapses to the filing date + 1 business day.
        """
        if (legal_deadline is not None and legal_deadline < today
                and application.has_related_internal_applications):
            return self._calculator.compute_overdue_deadline(application)
        return legal_deadline or application.deadline

    def evaluate(
        self,
        application: Application,
        application_type: ApplicationType,
        legal_deadline: date | None,
        settings: ReminderSettings,
        now: datetime,
        *,
        catch_up: bool = False,
    ) -> list[ReminderEvent]:
        """Return the reminder events due at ``now``.

        ``catch_up`` is used right after a data change: the day-of reminder is
        not held until the configured hour, and a pre-deadline reminder whose
        exact day has already passed still fires.
        """
        local_now = to_local_datetime(now, self._tz)
        today = local_now.date()
        past_day_of_hour = catch_up or local_now.hour >= self._config.day_of_notify_hour

        events: list[ReminderEvent] = []
        effective = self.effective_deadline(application, legal_deadline, today)
        if effective is not None:
            days = (effective - today).days
            admin_event = self._classify(
                settings,
                ReminderAudience.ADMIN,
                deadline=effective,
                days=days,
                allow_pre_deadline=legal_deadline is not None,
                lead_days=settings.admin_days_before_legal_deadline,
                past_day_of_hour=past_day_of_hour,
                catch_up=catch_up,
            )
            if admin_event is not None:
                events.append(admin_event)

        admin_deadline = application.deadline
        if application_type.category == ApplicationCategory.INTERNAL and admin_deadline is not None:
            employee_event = self._classify(
                settings,
                ReminderAudience.EMPLOYEE,
                deadline=admin_deadline,
                days=(admin_deadline - today).days,
                allow_pre_deadline=True,
                lead_days=settings.employee_days_before_admin_deadline,
                past_day_of_hour=past_day_of_hour,
                catch_up=catch_up,
            )
            if employee_event is not None:
                events.append(employee_event)

        if events:
            logger.debug("Application %s: due reminders %s", application.id,
                         [(e.audience.value, e.category.value, e.days_until) for e in events])
        return events

    @staticmethod
    def _classify(
        settings: ReminderSettings,
        audience: ReminderAudience,
        *,
        deadline: date,
        days: int,
        allow_pre_deadline: bool,
        lead_days: int,
        past_day_of_hour: bool,
        catch_up: bool,
    ) -> ReminderEvent | None:
        if days < 0:
            if settings.notify_on_overdue:
                return ReminderEvent(audience=audience, category=ReminderCategory.OVERDUE,
                                     deadline=deadline, days_until=days)
            return None
        if days == 0:
            if settings.notify_on_deadline_day and past_day_of_hour:
                return ReminderEvent(audience=audience, category=ReminderCategory.DAY_OF,
                                     deadline=deadline, days_until=0)
            return None
        if not settings.notify_before_deadline or not allow_pre_deadline:
            return None
        if days == lead_days or (catch_up and days < lead_days):
            return ReminderEvent(audience=audience, category=ReminderCategory.PRE_DEADLINE,
                                 deadline=deadline, days_until=days)
        return None
