"""Protocol interfaces for the engine's collaborators.

The engine only talks to persistence, the user directory and locks through
these Protocols. Structural typing, no inheritance required, easy to fake
in tests.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shaho.models.application import Application, ApplicationCategory, ApplicationStatus
    from shaho.models.employee import Employee
    from shaho.models.notification import Notification, NotificationType
    from shaho.models.organization import OrganizationConfig


# ---------------------------------------------------------------------------
# Document stores
# ---------------------------------------------------------------------------

@runtime_checkable
class IApplicationStore(Protocol):
    """Applications of an organization."""

    def get(self, application_id: str) -> Optional[Application]: ...

    def list(
        self,
        organization_id: str,
        *,
        statuses: Optional[Iterable[ApplicationStatus]] = None,
        employee_id: Optional[str] = None,
        category: Optional[ApplicationCategory] = None,
    ) -> list[Application]: ...

    def update(self, application_id: str, fields: dict[str, Any]) -> None: ...


@runtime_checkable
class IEmployeeStore(Protocol):
    """Employees of an organization."""

    def get(self, employee_id: str) -> Optional[Employee]: ...

    def list(self, organization_id: str) -> list[Employee]: ...


@runtime_checkable
class IOrganizationStore(Protocol):
    """Organization configuration: application types and reminder policy."""

    def get(self, organization_id: str) -> Optional[OrganizationConfig]: ...


@runtime_checkable
class INotificationStore(Protocol):
    """Write-once notification log, also queried for dedup."""

    def create(self, notification: Notification) -> str: ...

    def query(
        self,
        user_id: str,
        organization_id: str,
        *,
        type: Optional[NotificationType] = None,
        application_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Notification]: ...


# ---------------------------------------------------------------------------
# User directory
# ---------------------------------------------------------------------------

@runtime_checkable
class IUserDirectory(Protocol):
    """Resolves notification recipients."""

    def get_user_id_for_employee(self, employee_id: str) -> Optional[str]: ...

    def get_admin_user_ids(self, organization_id: str) -> list[str]: ...


# ---------------------------------------------------------------------------
# Cache / locking
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


@runtime_checkable
class IOrganizationLock(Protocol):
    """Serializes reminder passes for the same organization."""

    def hold(self, organization_id: str) -> AbstractContextManager[None]: ...
