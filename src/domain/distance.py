"""
Distance lookup capability.

``DistanceLookup`` is the narrow interface the lifecycle manager depends on:
two points in, a ``Distance`` (integer metres) out, or a
``DistanceLookupError`` subclass.

Implementations
---------------
* ``GoogleMapsDistanceLookup`` (``src.infrastructure.distance_client``) --
  road distance from the Distance Matrix API.
* ``HaversineDistanceLookup`` -- great-circle distance, no network.  Used for
  local development, seeding and tests where no API key is available.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from .entities import Distance, Location

EARTH_RADIUS_KM = 6_371.0


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


class DistanceLookup(ABC):
    @abstractmethod
    async def lookup(self, origin: Location, destination: Location) -> Distance:
        """Return the travel distance from *origin* to *destination*."""

    async def aclose(self) -> None:
        """Release any held resources.  No-op by default."""


class HaversineDistanceLookup(DistanceLookup):
    async def lookup(self, origin: Location, destination: Location) -> Distance:
        km = haversine_km(
            origin.latitude, origin.longitude,
            destination.latitude, destination.longitude,
        )
        return Distance(meters=round(km * 1000), text=f"{km:.1f} km")
