"""Tests for reminder classification."""

from __future__ import annotations

from datetime import date

import pytest

from shaho.core.config import ReminderConfig
from shaho.deadlines.calculator import DeadlineCalculator
from shaho.models.notification import ReminderCategory
from shaho.models.organization import ReminderSettings
from shaho.models.reminder import ReminderAudience, ReminderEvent
from shaho.reminders.evaluator import ReminderEvaluator
from tests.fakes import APPLICATION_TYPES, jst, make_application

ACQUISITION = APPLICATION_TYPES[1]
JOIN_NOTICE = APPLICATION_TYPES[0]
LEGAL = date(2024, 4, 8)


@pytest.fixture
def evaluator():
    return ReminderEvaluator(DeadlineCalculator())


def _admin(category, deadline, days):
    return ReminderEvent(audience=ReminderAudience.ADMIN, category=category,
                         deadline=deadline, days_until=days)


def _employee(category, deadline, days):
    return ReminderEvent(audience=ReminderAudience.EMPLOYEE, category=category,
                         deadline=deadline, days_until=days)


class TestEffectiveDeadline:
    def test_lapsed_deadline_with_related_internal_collapses(self, evaluator):
        application = make_application(created_at=jst(2024, 4, 5, 15),
                                       related_internal_application_ids=["int-1"])
        assert evaluator.effective_deadline(application, date(2024, 4, 1), date(2024, 4, 10)) == date(2024, 4, 8)

    def test_lapsed_deadline_without_links_is_kept(self, evaluator):
        application = make_application(created_at=jst(2024, 4, 5, 15))
        assert evaluator.effective_deadline(application, date(2024, 4, 1), date(2024, 4, 10)) == date(2024, 4, 1)

    def test_future_legal_deadline_is_kept(self, evaluator):
        application = make_application(related_internal_application_ids=["int-1"])
        assert evaluator.effective_deadline(application, LEGAL, date(2024, 4, 2)) == LEGAL

    def test_falls_back_to_admin_deadline(self, evaluator):
        application = make_application(deadline=date(2024, 4, 20))
        assert evaluator.effective_deadline(application, None, date(2024, 4, 2)) == date(2024, 4, 20)


class TestAdminReminders:
    def _evaluate(self, evaluator, now, settings=ReminderSettings(), **kwargs):
        return evaluator.evaluate(make_application(), ACQUISITION, LEGAL, settings, now, **kwargs)

    def test_pre_deadline_on_exact_lead_day(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 4, 1, 8)) == [
            _admin(ReminderCategory.PRE_DEADLINE, LEGAL, 7),
        ]

    def test_nothing_between_lead_day_and_deadline(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 4, 2)) == []

    def test_pre_deadline_disabled(self, evaluator):
        settings = ReminderSettings(notify_before_deadline=False)
        assert self._evaluate(evaluator, jst(2024, 4, 1), settings) == []

    def test_day_of_waits_for_ten_oclock(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 4, 8, 9, 59)) == []
        assert self._evaluate(evaluator, jst(2024, 4, 8, 10, 0)) == [
            _admin(ReminderCategory.DAY_OF, LEGAL, 0),
        ]

    def test_day_of_hour_is_configurable(self):
        evaluator = ReminderEvaluator(DeadlineCalculator(), ReminderConfig(day_of_notify_hour=8))
        assert self._evaluate(evaluator, jst(2024, 4, 8, 8, 30)) == [
            _admin(ReminderCategory.DAY_OF, LEGAL, 0),
        ]

    def test_day_of_late_in_the_evening(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 4, 8, 23, 30)) == [
            _admin(ReminderCategory.DAY_OF, LEGAL, 0),
        ]

    def test_overdue_every_day_after(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 4, 9, 0, 5)) == [
            _admin(ReminderCategory.OVERDUE, LEGAL, -1),
        ]
        assert self._evaluate(evaluator, jst(2024, 4, 20)) == [
            _admin(ReminderCategory.OVERDUE, LEGAL, -12),
        ]

    def test_overdue_disabled(self, evaluator):
        settings = ReminderSettings(notify_on_overdue=False)
        assert self._evaluate(evaluator, jst(2024, 4, 9), settings) == []

    def test_no_deadline_no_events(self, evaluator):
        events = evaluator.evaluate(make_application(), ACQUISITION, None, ReminderSettings(), jst(2024, 4, 1))
        assert events == []

    def test_catch_up_fires_inside_window(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 4, 3), catch_up=True) == [
            _admin(ReminderCategory.PRE_DEADLINE, LEGAL, 5),
        ]

    def test_catch_up_ignores_ten_oclock_rule(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 4, 8, 7), catch_up=True) == [
            _admin(ReminderCategory.DAY_OF, LEGAL, 0),
        ]

    def test_catch_up_outside_window_is_silent(self, evaluator):
        assert self._evaluate(evaluator, jst(2024, 3, 20), catch_up=True) == []

    def test_overdue_collapse_counts_down_to_filing_plus_one(self, evaluator):
        application = make_application(created_at=jst(2024, 4, 5, 15),
                                       related_internal_application_ids=["int-1"])
        events = evaluator.evaluate(application, ACQUISITION, date(2024, 4, 1),
                                    ReminderSettings(), jst(2024, 4, 8, 10, 30))
        assert events == [_admin(ReminderCategory.DAY_OF, date(2024, 4, 8), 0)]


class TestEmployeeReminders:
    def test_internal_application_reminds_employee_before_admin_deadline(self, evaluator):
        application = make_application("t-join", deadline=date(2024, 4, 10))
        events = evaluator.evaluate(application, JOIN_NOTICE, None, ReminderSettings(), jst(2024, 4, 7))
        assert events == [_employee(ReminderCategory.PRE_DEADLINE, date(2024, 4, 10), 3)]

    def test_internal_day_of_reaches_both_audiences(self, evaluator):
        application = make_application("t-join", deadline=date(2024, 4, 10))
        events = evaluator.evaluate(application, JOIN_NOTICE, None, ReminderSettings(), jst(2024, 4, 10, 10, 30))
        assert events == [
            _admin(ReminderCategory.DAY_OF, date(2024, 4, 10), 0),
            _employee(ReminderCategory.DAY_OF, date(2024, 4, 10), 0),
        ]

    def test_external_application_never_targets_employee(self, evaluator):
        application = make_application(deadline=date(2024, 4, 4))
        events = evaluator.evaluate(application, ACQUISITION, LEGAL, ReminderSettings(), jst(2024, 4, 1))
        assert [e.audience for e in events] == [ReminderAudience.ADMIN]
