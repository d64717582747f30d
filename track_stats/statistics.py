"""Incremental statistics for a GPS track.

:class:`TrackStatistics` holds the running totals for a track or a track
segment. It is filled sample by sample (see :mod:`track_stats.updater`) and
two aggregates covering disjoint time windows of the same track can be
combined with :meth:`TrackStatistics.merge` or :func:`merged`.

Units are fixed across the module:

* distances and altitudes in meters;
* durations as :class:`datetime.timedelta`;
* speeds in meters per second;
* heart rate in beats per minute.

Optional values (altitude gain/loss, heart rate) use ``None`` for "never
observed", which is kept distinct from zero through every merge.
"""

from __future__ import annotations

import copy
import math
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from .chairlift import ONE_SECOND, LiftQueueDetector, LiftRideDetector
from .config import ChairliftThresholds
from .extremity import ExtremityTracker
from .formatting import format_statistics
from .points import TrackPoint


class InvariantViolation(ValueError):
    """Raised when a caller supplies temporally inconsistent data."""


def _parse_instant(value: str) -> datetime:
    # ``fromisoformat`` only accepts a trailing "Z" on recent interpreters.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _add_optional(left: Optional[float], right: Optional[float]) -> Optional[float]:
    if left is None:
        return right
    if right is None:
        return left
    return left + right


class TrackStatistics:
    """Running statistics for a track.

    The reported maximum speed never falls below the average moving speed.
    """

    def __init__(self, thresholds: Optional[ChairliftThresholds] = None) -> None:
        thresholds = thresholds or ChairliftThresholds()
        self.altitude_extremities = ExtremityTracker()
        self.lift_ride = LiftRideDetector(thresholds=thresholds)
        self.lift_queue = LiftQueueDetector(thresholds=thresholds)
        self.reset()

    @classmethod
    def from_values(
        cls,
        start_time: str,
        stop_time: str,
        total_distance_m: float,
        total_time_s: int,
        moving_time_s: int,
        max_speed_mps: float,
        total_altitude_gain_m: Optional[float] = None,
        total_altitude_loss_m: Optional[float] = None,
    ) -> "TrackStatistics":
        """Build an aggregate from literal values (test fixtures)."""

        stats = cls()
        stats.start_time = _parse_instant(start_time)
        stats._stop_time = _parse_instant(stop_time)
        stats.total_distance_m = float(total_distance_m)
        stats.total_time = timedelta(seconds=total_time_s)
        stats.moving_time = timedelta(seconds=moving_time_s)
        stats.recorded_max_speed_mps = float(max_speed_mps)
        stats.total_altitude_gain_m = total_altitude_gain_m
        stats.total_altitude_loss_m = total_altitude_loss_m
        return stats

    def copy(self) -> "TrackStatistics":
        """Return an independent aggregate with identical values."""

        return copy.deepcopy(self)

    def reset(self, start_time: Optional[datetime] = None) -> None:
        self.start_time: Optional[datetime] = None
        self._stop_time: Optional[datetime] = None
        self.total_distance_m = 0.0
        self.total_time = timedelta(0)
        self.moving_time = timedelta(0)
        self.recorded_max_speed_mps = 0.0
        self.total_altitude_gain_m: Optional[float] = None
        self.total_altitude_loss_m: Optional[float] = None
        self.average_heart_rate_bpm: Optional[float] = None
        self.is_idle = False
        self.altitude_extremities.reset()
        self.lift_ride.reset()
        self.lift_queue.reset()

        if start_time is not None:
            self.set_start_time(start_time)

    def is_initialized(self) -> bool:
        return self.start_time is not None

    # Time

    def set_start_time(self, start_time: datetime) -> None:
        """Set the track start. Should only be called once, on start."""

        self.start_time = start_time
        self.set_stop_time(start_time)

    @property
    def stop_time(self) -> Optional[datetime]:
        return self._stop_time

    @stop_time.setter
    def stop_time(self, value: datetime) -> None:
        self.set_stop_time(value)

    def set_stop_time(self, stop_time: datetime) -> None:
        # Samples from different sensors (GPS and BLE) may share a timestamp.
        if self.start_time is not None and stop_time < self.start_time:
            raise InvariantViolation(
                f"stop_time cannot be less than start_time: {self.start_time} {stop_time}"
            )
        self._stop_time = stop_time

    def add_moving_time(self, duration: timedelta) -> None:
        if duration < timedelta(0):
            raise InvariantViolation(f"moving time cannot be negative: {duration}")
        self.moving_time += duration

    def add_moving_time_between(self, point: TrackPoint, last_point: TrackPoint) -> None:
        self.add_moving_time(point.timestamp - last_point.timestamp)

    def stopped_time(self) -> timedelta:
        return self.total_time - self.moving_time

    # Distance and speed

    def add_total_distance(self, distance_m: float) -> None:
        self.total_distance_m += distance_m

    def average_speed(self) -> float:
        """Average speed over the total time, up to the last aggregated sample."""

        seconds = self.total_time // ONE_SECOND
        if seconds == 0:
            return 0.0
        return self.total_distance_m / seconds

    def average_moving_speed(self) -> float:
        seconds = self.moving_time.total_seconds()
        if seconds == 0:
            return 0.0
        return self.total_distance_m / seconds

    def max_speed(self) -> float:
        return max(self.recorded_max_speed_mps, self.average_moving_speed())

    # Altitude

    def update_altitude_extremities(self, altitude: Optional[float]) -> None:
        if altitude is not None:
            self.altitude_extremities.update(altitude)

    def has_altitude_min(self) -> bool:
        return not math.isinf(self.min_altitude())

    def has_altitude_max(self) -> bool:
        return not math.isinf(self.max_altitude())

    def min_altitude(self) -> float:
        return self.altitude_extremities.min

    def max_altitude(self) -> float:
        """Highest altitude seen.

        Computed from the smoothed altitude, so it can be below the current
        raw reading.
        """

        return self.altitude_extremities.max

    def set_min_altitude(self, altitude_m: float) -> None:
        self.altitude_extremities.set_min(altitude_m)

    def set_max_altitude(self, altitude_m: float) -> None:
        self.altitude_extremities.set_max(altitude_m)

    def has_total_altitude_gain(self) -> bool:
        return self.total_altitude_gain_m is not None

    def add_total_altitude_gain(self, gain_m: float) -> None:
        if self.total_altitude_gain_m is None:
            self.total_altitude_gain_m = 0.0
        self.total_altitude_gain_m += gain_m

    def has_total_altitude_loss(self) -> bool:
        return self.total_altitude_loss_m is not None

    def add_total_altitude_loss(self, loss_m: float) -> None:
        if self.total_altitude_loss_m is None:
            self.total_altitude_loss_m = 0.0
        self.total_altitude_loss_m += loss_m

    # Heart rate

    def has_average_heart_rate(self) -> bool:
        return self.average_heart_rate_bpm is not None

    def set_average_heart_rate(self, heart_rate_bpm: Optional[float]) -> None:
        if heart_rate_bpm is not None:
            self.average_heart_rate_bpm = heart_rate_bpm

    # Chairlift

    @property
    def in_chairlift(self) -> bool:
        return self.lift_ride.in_chairlift

    @property
    def chairlift_start_point(self) -> Optional[TrackPoint]:
        return self.lift_ride.start_point

    def update_chairlift_time(self, point: TrackPoint) -> None:
        self.lift_ride.update(point)

    def chairlift_time(self) -> timedelta:
        return self.lift_ride.duration

    def start_chairlift_activity(self, time: datetime, elevation: float) -> None:
        self.lift_queue.start_activity(time, elevation)

    def set_user_location(self, latitude: float, longitude: float) -> None:
        self.lift_queue.set_user_position(latitude, longitude)

    def update_chairlift_location(
        self, latitude: float, longitude: float, elevation: float, time: datetime
    ) -> None:
        """Feed the queue detector with the lift coordinate and current sample."""

        self.lift_queue.update_location(latitude, longitude, elevation, time)

    def is_end_of_run(self, elevation: float, time: datetime) -> bool:
        return self.lift_queue.is_end_of_run(elevation, time)

    def total_wait_time(self) -> timedelta:
        return self.lift_queue.total_wait_time

    def total_chairlift_time(self) -> timedelta:
        """Time riding lifts plus time waiting for them."""

        return self.chairlift_time() + self.total_wait_time()

    # Combining

    def merge(self, other: "TrackStatistics") -> None:
        """Combine ``other`` into this aggregate.

        Both aggregates are assumed to cover non-intersecting time windows.
        """

        if self.start_time is None:
            self.start_time = other.start_time
        elif other.start_time is not None:
            self.start_time = min(self.start_time, other.start_time)
        if self._stop_time is None:
            self._stop_time = other._stop_time
        elif other._stop_time is not None:
            self._stop_time = max(self._stop_time, other._stop_time)

        # Weights are the pre-merge total times, so this runs before they are summed.
        if self.average_heart_rate_bpm is None:
            self.average_heart_rate_bpm = other.average_heart_rate_bpm
        elif other.average_heart_rate_bpm is not None:
            weight = self.total_time // ONE_SECOND
            other_weight = other.total_time // ONE_SECOND
            if weight + other_weight == 0:
                self.average_heart_rate_bpm = (
                    self.average_heart_rate_bpm + other.average_heart_rate_bpm
                ) / 2
            else:
                self.average_heart_rate_bpm = (
                    weight * self.average_heart_rate_bpm
                    + other_weight * other.average_heart_rate_bpm
                ) / (weight + other_weight)

        self.total_distance_m += other.total_distance_m
        self.total_time += other.total_time
        self.moving_time += other.moving_time
        self.recorded_max_speed_mps = max(
            self.recorded_max_speed_mps, other.recorded_max_speed_mps
        )
        if other.altitude_extremities.has_data():
            self.altitude_extremities.update(other.altitude_extremities.min)
            self.altitude_extremities.update(other.altitude_extremities.max)
        self.total_altitude_gain_m = _add_optional(
            self.total_altitude_gain_m, other.total_altitude_gain_m
        )
        self.total_altitude_loss_m = _add_optional(
            self.total_altitude_loss_m, other.total_altitude_loss_m
        )
        self.lift_ride.merge(other.lift_ride)
        self.lift_queue.merge(other.lift_queue)

    def _comparison_key(self) -> tuple:
        return (
            self.start_time,
            self._stop_time,
            self.total_distance_m,
            self.total_time,
            self.moving_time,
            self.recorded_max_speed_mps,
            self.altitude_extremities,
            self.total_altitude_gain_m,
            self.total_altitude_loss_m,
            self.average_heart_rate_bpm,
            self.is_idle,
            self.lift_ride,
            self.lift_queue,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrackStatistics):
            return NotImplemented
        return self._comparison_key() == other._comparison_key()

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return format_statistics(self)


def merged(first: TrackStatistics, second: TrackStatistics) -> TrackStatistics:
    """Return a new aggregate combining ``first`` and ``second``.

    Neither operand is modified.
    """

    result = first.copy()
    result.merge(second)
    return result


def merge_all(parts: Iterable[TrackStatistics]) -> TrackStatistics:
    """Fold ``parts`` left to right into one aggregate."""

    result = TrackStatistics()
    for part in parts:
        result.merge(part)
    return result
