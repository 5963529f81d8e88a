"""Typed views over ``Application.data``, one variant per deadline rule.

Stored application data is an open camelCase map. The calculator parses it
into the variant for the application type's code, which carries exactly the
fields that rule reads. Fields the engine does not model ride along as
extras, so a recomputed copy can be written back without loss.
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Any, Optional, Union

from pydantic import Field, ValidationError, field_validator

from shaho.models.application import ApplicationTypeCode
from shaho.models.base import CalendarDate, DocumentModel
from shaho.models.dates import DateInput

logger = logging.getLogger(__name__)


class _Section(DocumentModel):
    @field_validator("*", mode="before")
    @classmethod
    def _lists_from_none(cls, v: Any, info: Any) -> Any:
        field = cls.model_fields.get(info.field_name)
        if field is not None and v is None and field.default_factory is list:
            return []
        return v


class InsuredPersonEntry(_Section):
    """One insured person on an acquisition or loss filing."""

    acquisition_date: DateInput = None
    loss_date: DateInput = None
    deadline: CalendarDate = None


class DependentEntry(_Section):
    """The spouse or one other dependent on a dependent-change filing."""

    change_type: Optional[str] = None  # applicable | not_applicable | change
    dependent_start_date: DateInput = None
    dependent_end_date: DateInput = None


class RewardBasePersonEntry(_Section):
    applicable_date: DateInput = None
    deadline: CalendarDate = None


class RewardChangePersonEntry(_Section):
    change_date: DateInput = None


class BonusPersonEntry(_Section):
    bonus_payment_date: DateInput = None
    deadline: CalendarDate = None


class InsuranceAcquisitionData(_Section):
    insured_persons: list[InsuredPersonEntry] = Field(default_factory=list)


class InsuranceLossData(_Section):
    insured_persons: list[InsuredPersonEntry] = Field(default_factory=list)


class DependentChangeData(_Section):
    submission_date: DateInput = None
    spouse_dependent: Optional[DependentEntry] = None
    other_dependents: list[DependentEntry] = Field(default_factory=list)

    def dependents(self) -> list[DependentEntry]:
        """Spouse first, then the others."""
        found = [self.spouse_dependent] if self.spouse_dependent is not None else []
        return found + list(self.other_dependents)


class RewardBaseData(_Section):
    reward_base_persons: list[RewardBasePersonEntry] = Field(default_factory=list)


class RewardChangeData(_Section):
    reward_change_persons: list[RewardChangePersonEntry] = Field(default_factory=list)
    insured_persons: list[RewardChangePersonEntry] = Field(default_factory=list)

    def first_person(self) -> RewardChangePersonEntry | None:
        persons = self.reward_change_persons or self.insured_persons
        return persons[0] if persons else None


class BonusPaymentData(_Section):
    common_bonus_payment_date: DateInput = None
    insured_persons: list[BonusPersonEntry] = Field(default_factory=list)


class PromptFilingData(_Section):
    """Address/name change filings: the deadline depends only on the filing date."""


class NoDeadlineData(_Section):
    """Any application type without a statutory rule."""


ApplicationData = Union[
    InsuranceAcquisitionData,
    InsuranceLossData,
    DependentChangeData,
    RewardBaseData,
    RewardChangeData,
    BonusPaymentData,
    PromptFilingData,
    NoDeadlineData,
]

DATA_VARIANTS: dict[str, type[_Section]] = {
    ApplicationTypeCode.INSURANCE_ACQUISITION: InsuranceAcquisitionData,
    ApplicationTypeCode.INSURANCE_LOSS: InsuranceLossData,
    ApplicationTypeCode.DEPENDENT_CHANGE_EXTERNAL: DependentChangeData,
    ApplicationTypeCode.REWARD_BASE: RewardBaseData,
    ApplicationTypeCode.REWARD_CHANGE: RewardChangeData,
    ApplicationTypeCode.BONUS_PAYMENT: BonusPaymentData,
    ApplicationTypeCode.ADDRESS_CHANGE_EXTERNAL: PromptFilingData,
    ApplicationTypeCode.NAME_CHANGE_EXTERNAL: PromptFilingData,
}


def parse_application_data(code: str, raw: dict[str, Any] | None,
                           timezone: tzinfo | None = None) -> ApplicationData:
    """Parse raw application data into the variant for ``code``.

    Timestamps with an offset are read as dates in ``timezone``. Malformed
    data degrades to ``NoDeadlineData`` (no deadline computable) rather than
    raising.
    """
    raw = raw or {}
    context = {"timezone": timezone} if timezone is not None else None
    variant = DATA_VARIANTS.get(code, NoDeadlineData)
    try:
        return variant.model_validate(raw, context=context)
    except ValidationError as exc:
        logger.warning("Unparseable %s application data, no deadline computed: %s", code, exc)
        return NoDeadlineData.model_validate(raw, context=context)
