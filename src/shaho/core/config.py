"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class DeadlineConfig(BaseSettings):
    """Statutory deadline rule parameters."""

    model_config = {"env_prefix": "SHAHO_DEADLINE_"}

    statutory_offset_days: int = 5  # acquisition/loss/dependent/bonus filings
    prompt_filing_days: int = 14  # address/name change ("without delay")
    reward_base_month: int = 7
    reward_base_day: int = 10
    persist_computed_deadlines: bool = True


class ReminderConfig(BaseSettings):
    """Reminder evaluation and dedup configuration."""

    model_config = {"env_prefix": "SHAHO_REMINDER_"}

    day_of_notify_hour: int = 10
    history_limit: int = 1000
    lock_timeout: int = 300  # seconds a pass may hold the organization lock
    lock_blocking_timeout: int = 30


class DynamoDBConfig(BaseSettings):
    """DynamoDB document store configuration."""

    model_config = {"env_prefix": "SHAHO_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "ap-northeast-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis cache and lock configuration."""

    model_config = {"env_prefix": "SHAHO_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    decode_responses: bool = True


class SchedulerConfig(BaseSettings):
    """Daily reminder batch configuration."""

    model_config = {"env_prefix": "SHAHO_SCHEDULER_"}

    enabled: bool = False
    hour: int = 10
    minute: int = 5
    organization_ids: list[str] = Field(default_factory=list)


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "SHAHO_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    timezone: str = "Asia/Tokyo"

    deadlines: DeadlineConfig = DeadlineConfig()
    reminders: ReminderConfig = ReminderConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    scheduler: SchedulerConfig = SchedulerConfig()
