"""Shaho exception hierarchy."""

from __future__ import annotations


class ShahoError(Exception):
    """Base exception for all Shaho errors."""


class StoreError(ShahoError):
    """A persistence collaborator read or write failed."""


class CacheError(ShahoError):
    """Redis cache operation failed."""


class ConfigurationError(ShahoError):
    """Required configuration is missing or invalid."""


class OrganizationLockError(ShahoError):
    """Another reminder pass holds the organization lock."""

    def __init__(self, organization_id: str, waited_seconds: float) -> None:
        self.organization_id = organization_id
        self.waited_seconds = waited_seconds
        super().__init__(
            f"Could not lock organization {organization_id!r} within {waited_seconds:g}s"
        )


class NotFoundError(ShahoError):
    """A referenced organization or employee does not exist."""
