"""Shared test doubles: memory backends plus document builders."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from shaho.models.application import (
    Application,
    ApplicationCategory,
    ApplicationStatus,
    ApplicationType,
    ApplicationTypeCode,
)
from shaho.models.employee import Employee
from shaho.models.organization import OrganizationConfig, ReminderSettings
from shaho.persistence.memory_backend import (
    MemoryApplicationStore,
    MemoryCacheBackend,
    MemoryEmployeeStore,
    MemoryNotificationStore,
    MemoryOrganizationLock,
    MemoryOrganizationStore,
    MemoryUserDirectory,
)

JST = ZoneInfo("Asia/Tokyo")
ORG_ID = "org-1"

APPLICATION_TYPES = [
    ApplicationType(id="t-join", code="JOIN_NOTICE", category=ApplicationCategory.INTERNAL,
                    name="Joining notice"),
    ApplicationType(id="t-acq", code=ApplicationTypeCode.INSURANCE_ACQUISITION,
                    category=ApplicationCategory.EXTERNAL, name="Insurance acquisition"),
    ApplicationType(id="t-loss", code=ApplicationTypeCode.INSURANCE_LOSS,
                    category=ApplicationCategory.EXTERNAL, name="Insurance loss"),
    ApplicationType(id="t-address", code=ApplicationTypeCode.ADDRESS_CHANGE_EXTERNAL,
                    category=ApplicationCategory.EXTERNAL, name="Address change"),
]


def jst(year: int, month: int, day: int, hour: int = 11, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=JST)


def make_organization(settings: Optional[ReminderSettings] = ReminderSettings(),
                      org_id: str = ORG_ID) -> OrganizationConfig:
    return OrganizationConfig(
        id=org_id,
        name="Test Co.",
        application_types=APPLICATION_TYPES,
        reminder_settings=settings,
    )


def make_application(
    type_id: str = "t-acq",
    *,
    id: Optional[str] = "app-1",
    employee_id: Optional[str] = "emp-1",
    status: ApplicationStatus = ApplicationStatus.PENDING,
    data: Optional[dict[str, Any]] = None,
    deadline: Optional[date] = None,
    created_at: Optional[datetime] = None,
    **extra: Any,
) -> Application:
    category = next(t.category for t in APPLICATION_TYPES if t.id == type_id)
    return Application(
        id=id,
        type=type_id,
        category=category,
        employee_id=employee_id,
        organization_id=ORG_ID,
        status=status,
        data=data or {},
        deadline=deadline,
        created_at=created_at or jst(2024, 4, 2, 9),
        **extra,
    )


def acquisition_data(*dates: str) -> dict[str, Any]:
    return {"insuredPersons": [{"acquisitionDate": d} for d in dates]}


def make_employee(id: str = "emp-1", *, join_date: Optional[date] = None,
                  retirement_date: Optional[date] = None) -> Employee:
    return Employee(
        id=id,
        organization_id=ORG_ID,
        last_name="Sato",
        first_name="Hanako",
        join_date=join_date,
        retirement_date=retirement_date,
    )


__all__ = [
    "APPLICATION_TYPES",
    "JST",
    "ORG_ID",
    "MemoryApplicationStore",
    "MemoryCacheBackend",
    "MemoryEmployeeStore",
    "MemoryNotificationStore",
    "MemoryOrganizationLock",
    "MemoryOrganizationStore",
    "MemoryUserDirectory",
    "acquisition_data",
    "jst",
    "make_application",
    "make_employee",
    "make_organization",
]
