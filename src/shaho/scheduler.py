"""Daily reminder batch on APScheduler."""

from __future__ import annotations

import logging
from typing import Iterable

from apscheduler.schedulers.background import BackgroundScheduler

from shaho.core.config import AppSettings
from shaho.reminders.orchestrator import ReminderOrchestrator

logger = logging.getLogger(__name__)

JOB_ID = "daily_deadline_reminders"

# One scheduler per process; repeated start calls (reloads, several app
# instances in one interpreter) reuse it.
_scheduler: BackgroundScheduler | None = None


def run_daily_reminders(orchestrator: ReminderOrchestrator,
                        organization_ids: Iterable[str]) -> int:
    """Run one reminder pass per organization; returns notifications created.

    An organization whose pass fails is logged and the batch moves on.
    """
    created = 0
    for organization_id in organization_ids:
        try:
            summary = orchestrator.run(organization_id)
        except Exception:
            logger.exception("Daily reminder pass failed for organization %s", organization_id)
            continue
        created += summary.notifications_created
    logger.info("Daily reminders finished: %d notifications created", created)
    return created


def start_scheduler(orchestrator: ReminderOrchestrator,
                    settings: AppSettings | None = None) -> BackgroundScheduler | None:
    """Start the daily reminder job unless disabled or already running."""
    global _scheduler

    settings = settings or AppSettings()
    if not settings.scheduler.enabled:
        logger.info("Reminder scheduler disabled (SHAHO_SCHEDULER_ENABLED=false)")
        return None
    if _scheduler is not None:
        logger.info("Reminder scheduler already running, skipping initialization")
        return _scheduler

    scheduler = BackgroundScheduler(timezone=settings.timezone)
    scheduler.add_job(
        run_daily_reminders,
        trigger="cron",
        hour=settings.scheduler.hour,
        minute=settings.scheduler.minute,
        kwargs={
            "orchestrator": orchestrator,
            "organization_ids": list(settings.scheduler.organization_ids),
        },
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    _scheduler = scheduler
    logger.info(
        "Reminder scheduler started: daily at %02d:%02d %s for %d organizations",
        settings.scheduler.hour, settings.scheduler.minute, settings.timezone,
        len(settings.scheduler.organization_ids),
    )
    return scheduler


def stop_scheduler() -> None:
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Reminder scheduler stopped")
    _scheduler = None
