"""Organization configuration consumed by the reminder engine."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from shaho.models.application import ApplicationType
from shaho.models.base import DocumentModel


class ReminderSettings(DocumentModel):
    """Organization reminder policy."""

    notify_before_deadline: bool = True
    admin_days_before_legal_deadline: int = 7
    employee_days_before_admin_deadline: int = 3
    notify_on_deadline_day: bool = True
    notify_on_overdue: bool = True


class OrganizationConfig(DocumentModel):
    id: str
    name: str = ""
    application_types: list[ApplicationType] = Field(default_factory=list)
    reminder_settings: Optional[ReminderSettings] = None

    def find_application_type(self, ref: str) -> ApplicationType | None:
        """Resolve an application's ``type`` reference by id, then by code."""
        for app_type in self.application_types:
            if app_type.id == ref:
                return app_type
        for app_type in self.application_types:
            if app_type.code == ref:
                return app_type
        return None

    def find_application_type_by_code(self, code: str) -> ApplicationType | None:
        return next((t for t in self.application_types if t.code == code), None)

    @property
    def external_application_types(self) -> list[ApplicationType]:
        return [t for t in self.application_types if t.is_external and t.enabled]
