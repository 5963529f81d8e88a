"""Application, application type and status models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import Field, field_validator

from shaho.models.base import CalendarDate, DocumentModel


class ApplicationCategory(StrEnum):
    INTERNAL = "internal"
    EXTERNAL = "external"


class ApplicationStatus(StrEnum):
    DRAFT = "draft"
    CREATED = "created"
    PENDING = "pending"
    PENDING_RECEIVED = "pending_received"
    PENDING_NOT_RECEIVED = "pending_not_received"
    APPROVED = "approved"
    REJECTED = "rejected"
    RETURNED = "returned"
    WITHDRAWN = "withdrawn"


# Statuses in which an application is still waiting on someone and gets reminders.
AWAITING_STATUSES = frozenset({
    ApplicationStatus.PENDING,
    ApplicationStatus.PENDING_RECEIVED,
    ApplicationStatus.PENDING_NOT_RECEIVED,
})


class ExternalApplicationStatus(StrEnum):
    SENT = "sent"
    RECEIVED = "received"
    ERROR = "error"


class ApplicationTypeCode(StrEnum):
    """Codes that carry a statutory deadline rule."""

    INSURANCE_ACQUISITION = "INSURANCE_ACQUISITION"
    INSURANCE_LOSS = "INSURANCE_LOSS"
    DEPENDENT_CHANGE_EXTERNAL = "DEPENDENT_CHANGE_EXTERNAL"
    REWARD_BASE = "REWARD_BASE"
    REWARD_CHANGE = "REWARD_CHANGE"
    BONUS_PAYMENT = "BONUS_PAYMENT"
    ADDRESS_CHANGE_EXTERNAL = "ADDRESS_CHANGE_EXTERNAL"
    NAME_CHANGE_EXTERNAL = "NAME_CHANGE_EXTERNAL"


class ApplicationType(DocumentModel):
    """An organization-configured application type (read-only to the engine)."""

    id: str
    code: str
    category: ApplicationCategory
    name: str
    enabled: bool = True

    @property
    def is_external(self) -> bool:
        return self.category == ApplicationCategory.EXTERNAL


class Application(DocumentModel):
    """A submitted application.

    ``deadline`` is the administrator-set deadline. ``legal_deadline`` is the
    statutory deadline the engine computed for application-scoped rules; for
    item-scoped rules the deadlines live on the entries inside ``data``.
    """

    id: Optional[str] = None
    type: str  # ApplicationType.id (or code)
    category: ApplicationCategory
    employee_id: Optional[str] = None
    organization_id: str
    status: ApplicationStatus
    data: dict[str, Any] = Field(default_factory=dict)
    deadline: CalendarDate = None
    legal_deadline: CalendarDate = None
    external_application_status: Optional[ExternalApplicationStatus] = None
    related_internal_application_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("data", "related_internal_application_ids", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any, info: Any) -> Any:
        if v is None:
            return {} if info.field_name == "data" else []
        return v

    @property
    def is_awaiting(self) -> bool:
        return self.status in AWAITING_STATUSES

    @property
    def has_related_internal_applications(self) -> bool:
        return bool(self.related_internal_application_ids)

    @property
    def is_sent_externally(self) -> bool:
        return self.external_application_status == ExternalApplicationStatus.SENT
