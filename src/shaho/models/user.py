"""Users as seen by the notification directory."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from shaho.models.base import DocumentModel


class UserRole(StrEnum):
    OWNER = "owner"
    ADMIN = "admin"
    EMPLOYEE = "employee"


ADMIN_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN})


class User(DocumentModel):
    id: str
    organization_id: str
    role: UserRole = UserRole.EMPLOYEE
    employee_id: Optional[str] = None
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
