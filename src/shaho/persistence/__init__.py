"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from typing import NamedTuple

from shaho.core.config import AppSettings
from shaho.core.protocols import (
    IApplicationStore,
    ICacheBackend,
    IEmployeeStore,
    INotificationStore,
    IOrganizationLock,
    IOrganizationStore,
    IUserDirectory,
)
from shaho.persistence.dynamodb_backend import (
    DynamoDBApplicationStore,
    DynamoDBEmployeeStore,
    DynamoDBNotificationStore,
    DynamoDBOrganizationStore,
    DynamoDBUserDirectory,
)
from shaho.persistence.redis_backend import RedisCacheBackend, RedisOrganizationLock


class Persistence(NamedTuple):
    applications: IApplicationStore
    employees: IEmployeeStore
    organizations: IOrganizationStore
    notifications: INotificationStore
    directory: IUserDirectory
    cache: ICacheBackend
    lock: IOrganizationLock


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up production backends from application settings."""
    if settings is None:
        settings = AppSettings()

    cache = RedisCacheBackend(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        decode_responses=settings.redis.decode_responses,
    )
    lock = RedisOrganizationLock(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        timeout=settings.reminders.lock_timeout,
        blocking_timeout=settings.reminders.lock_blocking_timeout,
    )

    table_kwargs = {
        "table_suffix": settings.dynamodb.table_suffix,
        "region": settings.dynamodb.region,
        "endpoint_url": settings.dynamodb.endpoint_url,
    }
    return Persistence(
        applications=DynamoDBApplicationStore(**table_kwargs),
        employees=DynamoDBEmployeeStore(**table_kwargs),
        organizations=DynamoDBOrganizationStore(**table_kwargs, cache=cache),
        notifications=DynamoDBNotificationStore(**table_kwargs),
        directory=DynamoDBUserDirectory(**table_kwargs),
        cache=cache,
        lock=lock,
    )
