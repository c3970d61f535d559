"""Great-circle distance and proximity predicates for place deduplication."""

from __future__ import annotations

import math
from typing import NamedTuple, Protocol

EARTH_RADIUS_KM = 6371.0
DEFAULT_THRESHOLD_DEG = 0.1


class Coordinate(NamedTuple):
    latitude: float
    longitude: float


class HasCoordinates(Protocol):
    @property
    def latitude(self) -> float: ...

    @property
    def longitude(self) -> float: ...


def distance_km(a: HasCoordinates, b: HasCoordinates) -> float:
    """Haversine distance between two points on a spherical Earth.

    Out-of-range coordinates are not rejected here; callers validate inputs.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # Rounding can push h a hair above 1.0 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def is_same_location(
    a: HasCoordinates,
    b: HasCoordinates,
    threshold_deg: float = DEFAULT_THRESHOLD_DEG,
) -> bool:
    """Rectangular degree-difference check used for search deduplication.

    Both the latitude and longitude differences must be strictly below
    ``threshold_deg``. This does not wrap across the antimeridian and the
    east-west extent of the box shrinks toward the poles.
    """
    return (
        abs(a.latitude - b.latitude) < threshold_deg
        and abs(a.longitude - b.longitude) < threshold_deg
    )


def is_within_radius(a: HasCoordinates, b: HasCoordinates, radius_km: float) -> bool:
    """True when the great-circle distance is strictly below ``radius_km``."""
    return distance_km(a, b) < radius_km
