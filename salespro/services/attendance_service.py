"""
Geofenced attendance check-in.

Present is only recorded from inside the store radius. The first Present of
a day sets time-in; any later Present on the same day sets time-out and
keeps the original time-in.
"""
from __future__ import annotations

from typing import Optional

import structlog

from salespro.config import GEOLOCATION_TIMEOUT_SECONDS
from salespro.constants import (
    ERROR_STORE_NOT_MAPPED,
    GEOFENCE_RADIUS_M,
    STATUS_LEAVE,
    STATUS_WEEK_OFF,
)
from salespro.errors import GeofenceRejectedError, StoreLocationNotMappedError, ValidationError
from salespro.models.attendance import Attendance
from salespro.services.geofence import Coordinate, check_geofence
from salespro.services.geolocation import LocationProvider, acquire_position
from salespro.state import AppState
from salespro.utils import clock_hhmm

logger = structlog.get_logger(__name__)


def location_label(point: Coordinate, distance_m: float) -> str:
    return f"{point.label()} (At Store, {round(distance_m)}m)"


class AttendanceService:
    def __init__(
        self,
        state: AppState,
        locator: LocationProvider,
        timeout: float = GEOLOCATION_TIMEOUT_SECONDS,
        radius_m: float = GEOFENCE_RADIUS_M,
    ):
        self.state = state
        self.locator = locator
        self.timeout = timeout
        self.radius_m = radius_m

    async def _store_coordinate(self) -> Coordinate:
        settings = self.state.settings or await self.state.load_settings()
        if not settings.has_store_location:
            raise StoreLocationNotMappedError(ERROR_STORE_NOT_MAPPED)
        return Coordinate(settings.store_lat, settings.store_lng)

    async def mark_present(self, day: str, clock: Optional[str] = None) -> Attendance:
        """
        Check in (or out) at the store for day.

        Raises StoreLocationNotMappedError, a GeolocationError subclass, or
        GeofenceRejectedError; nothing is written in any of those cases.
        """
        store = await self._store_coordinate()
        point = await acquire_position(self.locator, self.timeout)
        result = check_geofence(point, store, self.radius_m)
        if not result.admitted:
            logger.info(
                "attendance_rejected",
                date=day,
                distance_m=round(result.distance_m),
                radius_m=result.radius_m,
            )
            raise GeofenceRejectedError(result.distance_m, result.radius_m)

        return await self.state.mark_present(
            day,
            clock or clock_hhmm(),
            location_label(point, result.distance_m),
        )

    async def mark_absence(self, day: str, status: str) -> Attendance:
        """Week Off or Leave; no location is needed."""
        if status not in (STATUS_WEEK_OFF, STATUS_LEAVE):
            raise ValidationError(f"Invalid absence status: {status}", "status")
        return await self.state.mark_attendance(day, status=status)

    async def map_store_location(self) -> Coordinate:
        """Save the current position as the store reference point."""
        point = await acquire_position(self.locator, self.timeout)
        await self.state.update_settings(store_lat=point.latitude, store_lng=point.longitude)
        logger.info("store_location_mapped", location=point.label())
        return point
