"""Great-circle distance helpers.

Every distance in the package is computed with the Haversine formula on a
spherical Earth. Meters are the canonical unit; the chairlift proximity test
works in kilometers and converts at its boundary with
:func:`haversine_distance_km`.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .points import TrackPoint

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_KILOMETER = 1_000.0


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    *,
    radius: float = EARTH_RADIUS_M,
) -> float:
    """Return the great-circle distance between two coordinates.

    Latitudes and longitudes are in degrees. The result is expressed in the
    unit of ``radius`` (meters by default).
    """

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    # Rounding can push antipodal pairs just past 1.
    if a > 1.0:
        a = 1.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius * c


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_distance(lat1, lon1, lat2, lon2) / METERS_PER_KILOMETER


def path_length_m(latitudes: Sequence[float], longitudes: Sequence[float]) -> float:
    """Sum the Haversine distances between consecutive coordinates (meters)."""

    lats = np.radians(np.asarray(latitudes, dtype=float))
    lons = np.radians(np.asarray(longitudes, dtype=float))
    if lats.shape != lons.shape:
        raise ValueError("latitudes and longitudes must have the same length")
    if lats.size < 2:
        return 0.0

    delta_phi = np.diff(lats)
    delta_lambda = np.diff(lons)
    a = (
        np.sin(delta_phi / 2) ** 2
        + np.cos(lats[:-1]) * np.cos(lats[1:]) * np.sin(delta_lambda / 2) ** 2
    )
    a = np.minimum(a, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return float(np.sum(EARTH_RADIUS_M * c))


def average_speed_from_points(points: Sequence[TrackPoint]) -> float:
    """Average speed (m/s) along a sequence of samples.

    Only samples carrying both a timestamp and a position take part. The
    distance is the path length through those samples and the time is the
    whole seconds elapsed between the first and the last of them. ``0.0`` is
    returned when no time elapses.
    """

    usable = [
        point
        for point in points
        if point.timestamp is not None and point.position is not None
    ]
    if len(usable) < 2:
        return 0.0

    elapsed_s = int(usable[-1].timestamp.timestamp()) - int(usable[0].timestamp.timestamp())
    if elapsed_s == 0:
        return 0.0

    distance = path_length_m(
        [point.position[0] for point in usable],
        [point.position[1] for point in usable],
    )
    return distance / elapsed_s
