"""Redis backends: ICacheBackend and the per-organization reminder lock."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import redis
from redis.exceptions import LockError

from shaho.core.exceptions import CacheError, OrganizationLockError

logger = logging.getLogger(__name__)


def _client(host: str, port: int, db: int, decode_responses: bool = True) -> redis.Redis:
    return redis.Redis(host=host, port=port, db=db, decode_responses=decode_responses)


class RedisCacheBackend:
    """Production ICacheBackend backed by Redis."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 decode_responses: bool = True) -> None:
        self._client = _client(host, port, db, decode_responses)

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except redis.RedisError as exc:
            raise CacheError(f"Redis GET failed for key={key!r}: {exc}") from exc

    def setex(self, key: str, ttl: int, value: str) -> None:
        try:
            self._client.setex(key, ttl, value)
        except redis.RedisError as exc:
            raise CacheError(f"Redis SETEX failed for key={key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            raise CacheError(f"Redis DELETE failed for key={key!r}: {exc}") from exc


class RedisOrganizationLock:
    """IOrganizationLock shared by every process talking to the same Redis.

    ``timeout`` bounds how long a crashed holder can block others;
    ``blocking_timeout`` is how long a caller waits before giving up.
    """

    KEY_PREFIX = "shaho:reminder-lock:"

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 timeout: int = 300, blocking_timeout: float = 30) -> None:
        self._client = _client(host, port, db)
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout

    @contextmanager
    def hold(self, organization_id: str) -> Iterator[None]:
        lock = self._client.lock(
            f"{self.KEY_PREFIX}{organization_id}",
            timeout=self._timeout,
            blocking_timeout=self._blocking_timeout,
        )
        try:
            acquired = lock.acquire()
        except redis.RedisError as exc:
            raise CacheError(f"Redis lock failed for organization={organization_id!r}: {exc}") from exc
        if not acquired:
            raise OrganizationLockError(organization_id, self._blocking_timeout)
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                logger.warning("Reminder lock for organization %s expired before release",
                               organization_id)
