"""In-memory backends for unit tests and local runs: dict-backed fakes."""

from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from shaho.core.exceptions import OrganizationLockError
from shaho.models.application import Application, ApplicationCategory, ApplicationStatus
from shaho.models.employee import Employee
from shaho.models.notification import Notification, NotificationType
from shaho.models.organization import OrganizationConfig
from shaho.models.user import User


class MemoryApplicationStore:
    """Dict-backed IApplicationStore."""

    def __init__(self, applications: Iterable[Application] = ()) -> None:
        self._applications: dict[str, Application] = {}
        self.updates: list[tuple[str, dict[str, Any]]] = []
        for application in applications:
            self.add(application)

    def add(self, application: Application) -> Application:
        if application.id is None:
            application = application.model_copy(update={"id": f"app-{len(self._applications) + 1}"})
        self._applications[application.id] = application
        return application

    def get(self, application_id: str) -> Optional[Application]:
        return self._applications.get(application_id)

    def list(
        self,
        organization_id: str,
        *,
        statuses: Optional[Iterable[ApplicationStatus]] = None,
        employee_id: Optional[str] = None,
        category: Optional[ApplicationCategory] = None,
    ) -> list[Application]:
        wanted = set(statuses) if statuses is not None else None
        return [
            a for a in self._applications.values()
            if a.organization_id == organization_id
            and (wanted is None or a.status in wanted)
            and (employee_id is None or a.employee_id == employee_id)
            and (category is None or a.category == category)
        ]

    def update(self, application_id: str, fields: dict[str, Any]) -> None:
        current = self._applications[application_id]
        document = current.to_document()
        document.update(fields)
        self._applications[application_id] = Application.model_validate(document)
        self.updates.append((application_id, fields))


class MemoryEmployeeStore:
    """Dict-backed IEmployeeStore."""

    def __init__(self, employees: Iterable[Employee] = ()) -> None:
        self._employees: dict[str, Employee] = {e.id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._employees[employee.id] = employee

    def get(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get(employee_id)

    def list(self, organization_id: str) -> list[Employee]:
        return [e for e in self._employees.values() if e.organization_id == organization_id]


class MemoryOrganizationStore:
    """Dict-backed IOrganizationStore."""

    def __init__(self, organizations: Iterable[OrganizationConfig] = ()) -> None:
        self._organizations: dict[str, OrganizationConfig] = {o.id: o for o in organizations}

    def add(self, organization: OrganizationConfig) -> None:
        self._organizations[organization.id] = organization

    def get(self, organization_id: str) -> Optional[OrganizationConfig]:
        return self._organizations.get(organization_id)


class MemoryNotificationStore:
    """List-backed INotificationStore; newest first on query like the real store."""

    def __init__(self) -> None:
        self._notifications: list[Notification] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def create(self, notification: Notification) -> str:
        with self._lock:
            notification_id = f"ntf-{next(self._ids)}"
            self._notifications.append(notification.model_copy(update={"id": notification_id}))
        return notification_id

    def query(
        self,
        user_id: str,
        organization_id: str,
        *,
        type: Optional[NotificationType] = None,
        application_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Notification]:
        found = [
            n for n in reversed(self._notifications)
            if n.user_id == user_id
            and n.organization_id == organization_id
            and (type is None or n.type == type)
            and (application_id is None or n.application_id == application_id)
        ]
        return found[:limit] if limit is not None else found


class MemoryUserDirectory:
    """IUserDirectory over a list of users."""

    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users: list[User] = list(users)

    def add(self, user: User) -> None:
        self._users.append(user)

    def get_user_id_for_employee(self, employee_id: str) -> Optional[str]:
        return next(
            (u.id for u in self._users if u.employee_id == employee_id and u.is_active), None
        )

    def get_admin_user_ids(self, organization_id: str) -> list[str]:
        return [
            u.id for u in self._users
            if u.organization_id == organization_id and u.is_admin and u.is_active
        ]


class MemoryCacheBackend:
    """Dict-backed ICacheBackend."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


class MemoryOrganizationLock:
    """Process-local IOrganizationLock, one ``threading.Lock`` per organization."""

    def __init__(self, blocking_timeout: float = 30) -> None:
        self._blocking_timeout = blocking_timeout
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, organization_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(organization_id, threading.Lock())

    @contextmanager
    def hold(self, organization_id: str) -> Iterator[None]:
        lock = self._lock_for(organization_id)
        if not lock.acquire(timeout=self._blocking_timeout):
            raise OrganizationLockError(organization_id, self._blocking_timeout)
        try:
            yield
        finally:
            lock.release()
