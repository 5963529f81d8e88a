"""Employee model (the fields the deadline engine reads)."""

from __future__ import annotations

from typing import Optional

from shaho.models.base import CalendarDate, DocumentModel


class Employee(DocumentModel):
    id: str
    organization_id: str
    employee_number: str = ""
    last_name: str = ""
    first_name: str = ""
    join_date: CalendarDate = None
    retirement_date: CalendarDate = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.last_name} {self.first_name}".strip() or self.id
