"""Admin endpoints: on-demand reminder passes."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from shaho.core.exceptions import CacheError, NotFoundError, OrganizationLockError, StoreError
from shaho.models.reminder import ReminderRunSummary
from shaho.reminders.orchestrator import ReminderOrchestrator

router = APIRouter(tags=["admin"])


class DateChangeRequest(BaseModel):
    """Employee fields that just changed, e.g. ``["joinDate"]``."""

    changed_fields: list[str] = Field(min_length=1)
    skip_duplicate_check: bool = False


def get_orchestrator(request: Request) -> ReminderOrchestrator:
    return request.app.state.orchestrator


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, OrganizationLockError):
        return HTTPException(status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.post("/organizations/{organization_id}/reminders/run")
def run_reminders(
    organization_id: str,
    skip_duplicate_check: bool = False,
    now: Optional[datetime] = None,
    orchestrator: ReminderOrchestrator = Depends(get_orchestrator),
) -> ReminderRunSummary:
    """Run a full reminder pass for one organization now."""
    try:
        return orchestrator.run(organization_id, now=now,
                                skip_duplicate_check=skip_duplicate_check)
    except (NotFoundError, OrganizationLockError, StoreError, CacheError) as exc:
        raise _http_error(exc) from exc


@router.post("/organizations/{organization_id}/employees/{employee_id}/date-change")
def employee_date_change(
    organization_id: str,
    employee_id: str,
    body: DateChangeRequest,
    now: Optional[datetime] = None,
    orchestrator: ReminderOrchestrator = Depends(get_orchestrator),
) -> ReminderRunSummary:
    """Check the filings affected by a join/retirement date change."""
    try:
        return orchestrator.notify_employee_change(
            organization_id, employee_id, body.changed_fields,
            now=now, skip_duplicate_check=body.skip_duplicate_check,
        )
    except (NotFoundError, OrganizationLockError, StoreError, CacheError) as exc:
        raise _http_error(exc) from exc
