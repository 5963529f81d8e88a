"""Virtual filings for employees whose external filing is neither awaiting nor sent."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from shaho.models.application import (
    Application,
    ApplicationStatus,
    ApplicationType,
    ApplicationTypeCode,
)
from shaho.models.employee import Employee


def _anchor(employee: Employee, code: str) -> tuple[str, date] | None:
    if code == ApplicationTypeCode.INSURANCE_ACQUISITION and employee.join_date is not None:
        return "acquisitionDate", employee.join_date
    if code == ApplicationTypeCode.INSURANCE_LOSS and employee.retirement_date is not None:
        # coverage is lost the day after retirement
        return "lossDate", employee.retirement_date + timedelta(days=1)
    return None


def synthesize_virtual_application(employee: Employee, application_type: ApplicationType,
                                   now: datetime) -> Application | None:
    """Build an unsaved application standing in for a filing not yet created.

    Only acquisition and loss filings have an employee-side anchor; ``None``
    is returned for other types or when the employee lacks the date.
    """
    anchor = _anchor(employee, application_type.code)
    if anchor is None:
        return None
    field, value = anchor
    return Application(
        id=None,
        type=application_type.id,
        category=application_type.category,
        employee_id=employee.id,
        organization_id=employee.organization_id,
        status=ApplicationStatus.PENDING,
        data={"insuredPersons": [{field: value.isoformat()}]},
        created_at=now,
    )
