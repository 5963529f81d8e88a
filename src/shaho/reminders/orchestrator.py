"""Organization-wide reminder passes.

A pass loads the organization's awaiting applications and its employees,
computes deadlines, classifies today's reminder obligations and creates the
notifications the dedup gate lets through. One failing application or
employee is logged and skipped; the pass carries on with the rest.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, nullcontext
from datetime import datetime
from typing import Iterable, Optional

from shaho.core.config import AppSettings
from shaho.core.exceptions import NotFoundError, StoreError
from shaho.core.protocols import (
    IApplicationStore,
    IEmployeeStore,
    INotificationStore,
    IOrganizationLock,
    IOrganizationStore,
    IUserDirectory,
)
from shaho.deadlines.calculator import DeadlineCalculator, DeadlineResult
from shaho.deadlines.localtime import resolve_timezone, to_local_datetime
from shaho.models.application import (
    AWAITING_STATUSES,
    Application,
    ApplicationCategory,
    ApplicationType,
    ApplicationTypeCode,
)
from shaho.models.application_data import parse_application_data
from shaho.models.employee import Employee
from shaho.models.organization import OrganizationConfig, ReminderSettings
from shaho.models.reminder import (
    ReminderAudience,
    ReminderEvent,
    ReminderRequest,
    ReminderRunSummary,
    ReminderSubject,
)
from shaho.reminders.dedup import DeduplicationGate
from shaho.reminders.evaluator import ReminderEvaluator
from shaho.reminders.messages import build_notification
from shaho.reminders.virtual import synthesize_virtual_application

logger = logging.getLogger(__name__)

# Employee fields whose change triggers an immediate check of the matching filing.
DATE_CHANGE_FILINGS: dict[str, ApplicationTypeCode] = {
    "joinDate": ApplicationTypeCode.INSURANCE_ACQUISITION,
    "join_date": ApplicationTypeCode.INSURANCE_ACQUISITION,
    "retirementDate": ApplicationTypeCode.INSURANCE_LOSS,
    "retirement_date": ApplicationTypeCode.INSURANCE_LOSS,
}

_Pair = tuple[Optional[str], str]


class _Pass:
    """State shared by one organization pass."""

    def __init__(self, org: OrganizationConfig, settings: ReminderSettings,
                 gate: DeduplicationGate, admin_ids: list[str], now: datetime,
                 summary: ReminderRunSummary) -> None:
        self.org = org
        self.settings = settings
        self.gate = gate
        self.admin_ids = admin_ids
        self.now = now
        self.summary = summary


class ReminderOrchestrator:
    """Runs reminder passes against the persistence collaborators."""

    def __init__(
        self,
        *,
        applications: IApplicationStore,
        employees: IEmployeeStore,
        organizations: IOrganizationStore,
        notifications: INotificationStore,
        directory: IUserDirectory,
        settings: AppSettings | None = None,
        calculator: DeadlineCalculator | None = None,
        evaluator: ReminderEvaluator | None = None,
        lock: IOrganizationLock | None = None,
    ) -> None:
        self._applications = applications
        self._employees = employees
        self._organizations = organizations
        self._notifications = notifications
        self._directory = directory
        self._settings = settings or AppSettings()
        self._tz = resolve_timezone(self._settings.timezone)
        self._calculator = calculator or DeadlineCalculator(self._settings.deadlines, self._tz)
        self._evaluator = evaluator or ReminderEvaluator(
            self._calculator, self._settings.reminders, self._tz
        )
        self._lock = lock

    # ---- public API ----

    def run(self, organization_id: str, now: datetime | None = None,
            skip_duplicate_check: bool = False) -> ReminderRunSummary:
        """Evaluate every awaiting application and every employee's pending filings.

        Safe to re-run: reminders already sent are suppressed by the dedup
        gate unless ``skip_duplicate_check`` is set.
        """
        now = self._now(now)
        with self._hold(organization_id):
            ctx = self._open_pass(organization_id, now, skip_duplicate_check)
            if ctx is None:
                return ReminderRunSummary(organization_id=organization_id, skipped=True)

            awaiting = self._applications.list(organization_id, statuses=AWAITING_STATUSES)
            external = self._applications.list(organization_id, category=ApplicationCategory.EXTERNAL)
            covered_pairs, sent_pairs = self._external_pairs(ctx.org, external)

            for application in awaiting:
                try:
                    self._evaluate_application(ctx, application, sent_pairs)
                except Exception:
                    logger.exception("Reminder evaluation failed for application %s", application.id)
                    ctx.summary.failures.append(f"application:{application.id}")

            for employee in self._employees.list(organization_id):
                try:
                    self._evaluate_employee(ctx, employee, ctx.org.external_application_types,
                                            covered_pairs)
                except Exception:
                    logger.exception("Reminder evaluation failed for employee %s", employee.id)
                    ctx.summary.failures.append(f"employee:{employee.id}")

        summary = ctx.summary
        logger.info(
            "Reminder pass for organization %s: %d applications, %d employees, "
            "%d notifications created, %d duplicates suppressed, %d failures",
            organization_id, summary.applications_evaluated, summary.employees_evaluated,
            summary.notifications_created, summary.duplicates_suppressed, len(summary.failures),
        )
        return summary

    def notify_employee_change(
        self,
        organization_id: str,
        employee_id: str,
        changed_fields: Iterable[str],
        now: datetime | None = None,
        skip_duplicate_check: bool = False,
    ) -> ReminderRunSummary:
        """Check the filings affected by an employee's join/retirement date change.

        Runs in catch-up mode: an overdue, due-today or within-window filing
        is reported immediately instead of waiting for the daily pass.
        """
        codes = list(dict.fromkeys(
            DATE_CHANGE_FILINGS[field] for field in changed_fields if field in DATE_CHANGE_FILINGS
        ))
        if not codes:
            return ReminderRunSummary(organization_id=organization_id)

        now = self._now(now)
        with self._hold(organization_id):
            employee = self._employees.get(employee_id)
            if employee is None or employee.organization_id != organization_id:
                raise NotFoundError(
                    f"Employee {employee_id!r} not found in organization {organization_id!r}"
                )
            ctx = self._open_pass(organization_id, now, skip_duplicate_check)
            if ctx is None:
                return ReminderRunSummary(organization_id=organization_id, skipped=True)

            types = [
                t for t in (ctx.org.find_application_type_by_code(code) for code in codes)
                if t is not None and t.is_external and t.enabled
            ]
            stored = self._applications.list(
                organization_id, employee_id=employee_id, category=ApplicationCategory.EXTERNAL
            )
            covered_pairs, _ = self._external_pairs(ctx.org, stored)
            self._evaluate_employee(ctx, employee, types, covered_pairs, catch_up=True)

        logger.info(
            "Date change check for employee %s (%s): %d notifications created",
            employee_id, ", ".join(codes), ctx.summary.notifications_created,
        )
        return ctx.summary

    # ---- pass setup ----

    def _now(self, now: datetime | None) -> datetime:
        return to_local_datetime(now, self._tz) if now is not None else datetime.now(self._tz)

    def _hold(self, organization_id: str) -> AbstractContextManager[None]:
        if self._lock is None:
            return nullcontext()
        return self._lock.hold(organization_id)

    def _open_pass(self, organization_id: str, now: datetime,
                   skip_duplicate_check: bool) -> _Pass | None:
        org = self._organizations.get(organization_id)
        if org is None:
            logger.warning("Organization %s not found, skipping", organization_id)
            return None
        if org.reminder_settings is None:
            logger.info("Organization %s has no reminder settings, skipping", organization_id)
            return None

        gate = DeduplicationGate(
            self._notifications,
            organization_id,
            timezone=self._tz,
            history_limit=self._settings.reminders.history_limit,
            skip_duplicate_check=skip_duplicate_check,
        )
        return _Pass(
            org=org,
            settings=org.reminder_settings,
            gate=gate,
            admin_ids=self._admin_ids(organization_id),
            now=now,
            summary=ReminderRunSummary(organization_id=organization_id),
        )

    def _admin_ids(self, organization_id: str) -> list[str]:
        try:
            return self._directory.get_admin_user_ids(organization_id)
        except Exception:
            logger.exception("Admin lookup failed for organization %s; admin reminders skipped",
                             organization_id)
            return []

    @staticmethod
    def _type_key(org: OrganizationConfig, application: Application) -> str:
        app_type = org.find_application_type(application.type)
        return app_type.id if app_type is not None else application.type

    def _external_pairs(self, org: OrganizationConfig,
                        applications: list[Application]) -> tuple[set[_Pair], set[_Pair]]:
        """Pairs the virtual path must skip, and pairs already sent externally.

        The virtual path skips an (employee, type) pair when an awaiting
        application covers it or a stored one has been sent. Approved, returned
        or draft filings that were never sent still get virtual reminders.
        """
        covered: set[_Pair] = set()
        sent: set[_Pair] = set()
        for application in applications:
            pair = (application.employee_id, self._type_key(org, application))
            if application.is_awaiting or application.is_sent_externally:
                covered.add(pair)
            if application.is_sent_externally:
                sent.add(pair)
        return covered, sent

    # ---- evaluation ----

    def _evaluate_application(self, ctx: _Pass, application: Application,
                              sent_pairs: set[_Pair]) -> None:
        app_type = ctx.org.find_application_type(application.type)
        if app_type is None:
            logger.warning("Application %s has unknown type %r, skipping",
                           application.id, application.type)
            ctx.summary.applications_skipped += 1
            return
        if app_type.is_external and (
            application.is_sent_externally
            or (application.employee_id, app_type.id) in sent_pairs
        ):
            logger.debug("Application %s: %s already sent externally, no reminders",
                         application.id, app_type.code)
            ctx.summary.applications_skipped += 1
            return

        result = self._calculator.compute_deadlines(application, app_type)
        if app_type.is_external and self._settings.deadlines.persist_computed_deadlines:
            self._persist_deadlines(application, app_type, result)

        events = self._evaluator.evaluate(
            application, app_type, result.legal_deadline, ctx.settings, ctx.now
        )
        subject = ReminderSubject(
            organization_id=ctx.org.id,
            application_type_name=app_type.name,
            application_id=application.id,
            employee_id=application.employee_id,
        )
        self._dispatch(ctx, events, subject)
        ctx.summary.applications_evaluated += 1

    def _evaluate_employee(self, ctx: _Pass, employee: Employee,
                           application_types: list[ApplicationType],
                           covered_pairs: set[_Pair], *, catch_up: bool = False) -> None:
        for app_type in application_types:
            if (employee.id, app_type.id) in covered_pairs:
                continue
            virtual = synthesize_virtual_application(employee, app_type, ctx.now)
            if virtual is None:
                continue
            result = self._calculator.compute_deadlines(virtual, app_type)
            events = self._evaluator.evaluate(
                virtual, app_type, result.legal_deadline, ctx.settings, ctx.now, catch_up=catch_up
            )
            subject = ReminderSubject(
                organization_id=ctx.org.id,
                application_type_name=app_type.name,
                employee_id=employee.id,
            )
            self._dispatch(ctx, events, subject)
        ctx.summary.employees_evaluated += 1

    def _persist_deadlines(self, application: Application, app_type: ApplicationType,
                           result: DeadlineResult) -> None:
        fields: dict[str, object] = {}
        stored = parse_application_data(app_type.code, application.data, self._tz).to_document()
        recomputed = result.data_document()
        if result.item_deadlines and recomputed != stored:
            fields["data"] = recomputed
        if result.application_deadline != application.legal_deadline:
            fields["legalDeadline"] = (
                result.application_deadline.isoformat() if result.application_deadline else None
            )
        if not fields or application.id is None:
            return
        try:
            self._applications.update(application.id, fields)
        except StoreError:
            logger.warning("Could not store computed deadlines for application %s",
                           application.id, exc_info=True)

    # ---- delivery ----

    def _recipients(self, ctx: _Pass, event: ReminderEvent,
                    subject: ReminderSubject) -> list[str]:
        if event.audience == ReminderAudience.ADMIN:
            return ctx.admin_ids
        if subject.employee_id is None:
            return []
        try:
            user_id = self._directory.get_user_id_for_employee(subject.employee_id)
        except Exception:
            logger.exception("User lookup failed for employee %s", subject.employee_id)
            return []
        if user_id is None:
            logger.info("No user account for employee %s, employee reminder skipped",
                        subject.employee_id)
            return []
        return [user_id]

    def _dispatch(self, ctx: _Pass, events: list[ReminderEvent],
                  subject: ReminderSubject) -> None:
        for event in events:
            for user_id in self._recipients(ctx, event, subject):
                request = ReminderRequest(recipient_user_id=user_id, subject=subject, event=event)
                if ctx.gate.is_duplicate(request, ctx.now):
                    ctx.summary.duplicates_suppressed += 1
                    continue
                notification = build_notification(request, ctx.now)
                notification_id = self._notifications.create(notification)
                ctx.gate.record(notification.model_copy(update={"id": notification_id}))
                ctx.summary.notifications_created += 1
