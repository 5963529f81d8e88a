"""Per-application-type statutory deadline rules.

Rules by type code (external applications only; internal ones have no
statutory deadline):

- INSURANCE_ACQUISITION / INSURANCE_LOSS: each insured person's acquisition
  or loss date + 5 days, stored on that person.
- DEPENDENT_CHANGE_EXTERNAL: earliest anchor across spouse and other
  dependents + 5 days, for the whole application.
- REWARD_BASE: July 10 of each person's target year, stored on that person.
- REWARD_CHANGE: last day of the month after the first person's change month.
- BONUS_PAYMENT: each person's payment date (or the common one) + 5 days,
  stored on that person.
- ADDRESS_CHANGE_EXTERNAL / NAME_CHANGE_EXTERNAL: filing date + 14 days.

Every computed date is moved off weekends. Missing or unconvertible anchors
mean "no deadline", never an error.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from shaho.core.config import DeadlineConfig
from shaho.deadlines.business_day import adjust_for_business_day
from shaho.deadlines.era import convert_era_date, resolve_year, resolve_year_month
from shaho.deadlines.localtime import resolve_timezone, to_local_date
from shaho.models.application import Application, ApplicationCategory, ApplicationType
from shaho.models.application_data import (
    ApplicationData,
    BonusPaymentData,
    DependentChangeData,
    DependentEntry,
    InsuranceAcquisitionData,
    InsuranceLossData,
    NoDeadlineData,
    PromptFilingData,
    RewardBaseData,
    RewardChangeData,
    parse_application_data,
)

logger = logging.getLogger(__name__)


class DeadlineResult(BaseModel):
    """Outcome of one rule evaluation.

    ``data`` is a new copy of the application data with item deadlines filled
    in; the caller's application is never modified.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    application_deadline: Optional[date] = None
    data: Any = None
    item_deadlines: list[date] = Field(default_factory=list)

    @property
    def legal_deadline(self) -> date | None:
        """Application deadline, or the earliest item deadline for item-scoped rules."""
        if self.application_deadline is not None:
            return self.application_deadline
        return min(self.item_deadlines) if self.item_deadlines else None

    def data_document(self) -> dict[str, Any]:
        return self.data.to_document() if self.data is not None else {}


class DeadlineCalculator:
    """Computes statutory deadlines for applications."""

    def __init__(self, config: DeadlineConfig | None = None,
                 timezone: tzinfo | str = "Asia/Tokyo") -> None:
        self._config = config or DeadlineConfig()
        self._tz = resolve_timezone(timezone)

    def _offset(self, anchor: date | None, days: int | None = None) -> date | None:
        if anchor is None:
            return None
        if days is None:
            days = self._config.statutory_offset_days
        try:
            return adjust_for_business_day(anchor + timedelta(days=days))
        except OverflowError:
            return None

    def _filing_date(self, created_at: datetime) -> date:
        return to_local_date(created_at, self._tz)

    # ---- public API ----

    def compute_deadlines(self, application: Application,
                          application_type: ApplicationType) -> DeadlineResult:
        """Compute the application-level deadline and/or per-item deadlines."""
        if application_type.category == ApplicationCategory.INTERNAL:
            return DeadlineResult(data=parse_application_data("", application.data, self._tz))

        data = parse_application_data(application_type.code, application.data, self._tz)
        result = self._dispatch(application, data)
        logger.debug(
            "Deadlines for application=%s code=%s: application=%s items=%s",
            application.id, application_type.code,
            result.application_deadline, result.item_deadlines,
        )
        return result

    def compute_overdue_deadline(self, application: Application) -> date:
        """Fallback deadline once the statutory one has lapsed: filing date + 1 day."""
        return adjust_for_business_day(self._filing_date(application.created_at) + timedelta(days=1))

    # ---- rules ----

    def _dispatch(self, application: Application, data: ApplicationData) -> DeadlineResult:
        match data:
            case InsuranceAcquisitionData():
                return self._insured_persons(data, "acquisition_date")
            case InsuranceLossData():
                return self._insured_persons(data, "loss_date")
            case DependentChangeData():
                return DeadlineResult(application_deadline=self._dependent_change(data), data=data)
            case RewardBaseData():
                return self._reward_base(data)
            case RewardChangeData():
                return DeadlineResult(application_deadline=self._reward_change(data), data=data)
            case BonusPaymentData():
                return self._bonus_payment(data)
            case PromptFilingData():
                deadline = self._offset(self._filing_date(application.created_at),
                                        self._config.prompt_filing_days)
                return DeadlineResult(application_deadline=deadline, data=data)
            case NoDeadlineData():
                return DeadlineResult(data=data)
        raise TypeError(f"Unhandled application data variant: {type(data).__name__}")

    def _insured_persons(self, data: InsuranceAcquisitionData | InsuranceLossData,
                         anchor_field: str) -> DeadlineResult:
        persons = []
        deadlines: list[date] = []
        for person in data.insured_persons:
            deadline = self._offset(convert_era_date(getattr(person, anchor_field)))
            persons.append(person.model_copy(update={"deadline": deadline}))
            if deadline is not None:
                deadlines.append(deadline)
        return DeadlineResult(
            data=data.model_copy(update={"insured_persons": persons}),
            item_deadlines=deadlines,
        )

    def _dependent_anchor(self, dependent: DependentEntry,
                          submission_date: date | None) -> date | None:
        match dependent.change_type:
            case "change":
                return submission_date
            case "applicable":
                return convert_era_date(dependent.dependent_start_date)
            case "not_applicable":
                return convert_era_date(dependent.dependent_end_date)
        return None

    def _dependent_change(self, data: DependentChangeData) -> date | None:
        submission_date = convert_era_date(data.submission_date)
        anchors = [
            anchor for anchor in (
                self._dependent_anchor(d, submission_date) for d in data.dependents()
            )
            if anchor is not None
        ]
        return self._offset(min(anchors)) if anchors else None

    def _reward_base(self, data: RewardBaseData) -> DeadlineResult:
        persons = []
        deadlines: list[date] = []
        for person in data.reward_base_persons:
            year = resolve_year(person.applicable_date)
            deadline = None
            if year is not None:
                try:
                    deadline = adjust_for_business_day(
                        date(year, self._config.reward_base_month, self._config.reward_base_day)
                    )
                except (ValueError, OverflowError):
                    deadline = None
            if deadline is not None:
                deadlines.append(deadline)
            persons.append(person.model_copy(update={"deadline": deadline}))
        return DeadlineResult(
            data=data.model_copy(update={"reward_base_persons": persons}),
            item_deadlines=deadlines,
        )

    def _reward_change(self, data: RewardChangeData) -> date | None:
        # Only the first person's change month is used, even with several persons.
        person = data.first_person()
        if person is None:
            return None
        year_month = resolve_year_month(person.change_date)
        if year_month is None:
            return None
        year, month = year_month
        if month == 12:
            year, month = year + 1, 1
        else:
            month += 1
        try:
            last_day = calendar.monthrange(year, month)[1]
            return adjust_for_business_day(date(year, month, last_day))
        except (ValueError, OverflowError):
            return None

    def _bonus_payment(self, data: BonusPaymentData) -> DeadlineResult:
        common = convert_era_date(data.common_bonus_payment_date)
        persons = []
        deadlines: list[date] = []
        for person in data.insured_persons:
            paid_on = convert_era_date(person.bonus_payment_date) or common
            deadline = self._offset(paid_on)
            persons.append(person.model_copy(update={"deadline": deadline}))
            if deadline is not None:
                deadlines.append(deadline)
        return DeadlineResult(
            data=data.model_copy(update={"insured_persons": persons}),
            item_deadlines=deadlines,
        )
