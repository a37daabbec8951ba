"""
Geofence validation service.
Uses Haversine formula to calculate distance between points.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from salespro.constants import EARTH_RADIUS_M, GEOFENCE_RADIUS_M


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def label(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True)
class GeofenceResult:
    admitted: bool
    distance_m: float
    radius_m: float


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in meters
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2 +
        math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def check_geofence(
    point: Coordinate,
    store: Coordinate,
    radius_m: float = GEOFENCE_RADIUS_M,
) -> GeofenceResult:
    """Admit the point when it lies within radius_m of the store (boundary included)."""
    distance = haversine_distance(point.latitude, point.longitude, store.latitude, store.longitude)
    return GeofenceResult(distance <= radius_m, distance, radius_m)
