"""
Device position acquisition.

A provider reports failures with the three distinct geolocation errors;
acquire_position() bounds the wait so a missing GPS fix never hangs the caller.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol

import structlog

from salespro.config import GEOLOCATION_TIMEOUT_SECONDS
from salespro.constants import ERROR_LOCATION_TIMEOUT, ERROR_LOCATION_UNAVAILABLE
from salespro.errors import (
    GeolocationError,
    GeolocationTimeoutError,
    GeolocationUnavailableError,
)
from salespro.services.geofence import Coordinate

logger = structlog.get_logger(__name__)


class LocationProvider(Protocol):
    async def current_position(self) -> Coordinate:
        ...


class StaticLocationProvider:
    """Fixed position, e.g. coordinates typed on the command line."""

    def __init__(self, coordinate: Optional[Coordinate]):
        self.coordinate = coordinate

    async def current_position(self) -> Coordinate:
        if self.coordinate is None:
            raise GeolocationUnavailableError(ERROR_LOCATION_UNAVAILABLE)
        return self.coordinate


async def acquire_position(
    provider: LocationProvider,
    timeout: float = GEOLOCATION_TIMEOUT_SECONDS,
) -> Coordinate:
    try:
        return await asyncio.wait_for(provider.current_position(), timeout)
    except asyncio.TimeoutError:
        logger.warning("geolocation_timeout", timeout=timeout)
        raise GeolocationTimeoutError(ERROR_LOCATION_TIMEOUT) from None
    except GeolocationError as exc:
        logger.warning("geolocation_failed", kind=type(exc).__name__, error=str(exc))
        raise
    except Exception as exc:
        logger.warning("geolocation_failed", kind=type(exc).__name__, error=str(exc))
        raise GeolocationUnavailableError(ERROR_LOCATION_UNAVAILABLE) from exc
