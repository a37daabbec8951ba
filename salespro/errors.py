"""
Exception hierarchy shared by the store, repositories and services.

Validation and business-rule errors are meant to be handled where the action
was requested; storage errors propagate up to whoever triggered the write.
"""
from __future__ import annotations

from typing import Optional


class SalesProError(Exception):
    """Base class for every error raised by this package."""


# ── Validation ────────────────────────────────────────────────────────────────

class ValidationError(SalesProError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


# ── Storage ───────────────────────────────────────────────────────────────────

class StorageError(SalesProError):
    """Device storage failed while reading or writing."""


class StorageUnavailableError(StorageError):
    """Database file cannot be opened, is locked, read-only, or not connected."""


class StorageQuotaExceededError(StorageError):
    """No space left for the write."""


class RecordNotFoundError(SalesProError):
    def __init__(self, collection: str, key):
        super().__init__(f"No record {key!r} in {collection}")
        self.collection = collection
        self.key = key


# ── Attendance / geolocation ──────────────────────────────────────────────────

class StoreLocationNotMappedError(SalesProError):
    pass


class GeofenceRejectedError(SalesProError):
    def __init__(self, distance_m: float, radius_m: float):
        super().__init__(
            f"Can't mark attendance! You are not in store yet. "
            f"You are {round(distance_m)}m away. (Allowed: {round(radius_m)}m)"
        )
        self.distance_m = distance_m
        self.radius_m = radius_m


class GeolocationError(SalesProError):
    pass


class GeolocationPermissionDeniedError(GeolocationError):
    pass


class GeolocationUnavailableError(GeolocationError):
    pass


class GeolocationTimeoutError(GeolocationError):
    pass


# ── Backup ────────────────────────────────────────────────────────────────────

class BackupFormatError(SalesProError):
    """Backup document rejected before anything was cleared."""


class BackupImportError(SalesProError):
    """Restore failed after parsing; the transaction was rolled back."""


# ── External collaborators ────────────────────────────────────────────────────

class ExternalServiceError(SalesProError):
    pass


class AssistantUnavailableError(ExternalServiceError):
    pass


class ReportRenderError(ExternalServiceError):
    pass
