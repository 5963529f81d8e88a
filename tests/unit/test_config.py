"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

import pytest

from shaho.core.config import AppSettings, DeadlineConfig, ReminderConfig, SchedulerConfig
from shaho.core.exceptions import ConfigurationError
from shaho.deadlines.localtime import resolve_timezone
from shaho.reminders.orchestrator import ReminderOrchestrator
from tests.fakes import (
    MemoryApplicationStore,
    MemoryEmployeeStore,
    MemoryNotificationStore,
    MemoryOrganizationStore,
    MemoryUserDirectory,
)


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.timezone == "Asia/Tokyo"
    assert settings.dynamodb.region == "ap-northeast-1"


def test_deadline_config_defaults():
    config = DeadlineConfig()
    assert config.statutory_offset_days == 5
    assert config.prompt_filing_days == 14
    assert (config.reward_base_month, config.reward_base_day) == (7, 10)


def test_reminder_config_defaults():
    config = ReminderConfig()
    assert config.day_of_notify_hour == 10
    assert config.history_limit == 1000


def test_prompt_filing_days_env_override(monkeypatch):
    monkeypatch.setenv("SHAHO_DEADLINE_PROMPT_FILING_DAYS", "10")
    assert DeadlineConfig().prompt_filing_days == 10


def test_scheduler_organizations_from_env(monkeypatch):
    monkeypatch.setenv("SHAHO_SCHEDULER_ENABLED", "true")
    monkeypatch.setenv("SHAHO_SCHEDULER_ORGANIZATION_IDS", '["org-1", "org-2"]')
    config = SchedulerConfig()
    assert config.enabled is True
    assert config.organization_ids == ["org-1", "org-2"]


def test_unknown_timezone_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="Mars/Olympus"):
        resolve_timezone("Mars/Olympus")


def test_orchestrator_rejects_unknown_timezone_setting(monkeypatch):
    monkeypatch.setenv("SHAHO_TIMEZONE", "Mars/Olympus")
    with pytest.raises(ConfigurationError):
        ReminderOrchestrator(
            applications=MemoryApplicationStore(),
            employees=MemoryEmployeeStore(),
            organizations=MemoryOrganizationStore(),
            notifications=MemoryNotificationStore(),
            directory=MemoryUserDirectory(),
            settings=AppSettings(),
        )
