"""Chairlift detection.

Two independent heuristics live here and feed separate counters:

* :class:`LiftRideDetector` watches per-sample speed and altitude change and
  accumulates time spent riding a lift (``duration``).
* :class:`LiftQueueDetector` watches proximity to a known lift location and
  accumulates time spent waiting at it (``total_wait_time``).

The two counters are only combined by
:meth:`track_stats.statistics.TrackStatistics.total_chairlift_time`.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Tuple

from .config import ChairliftThresholds
from .geodistance import haversine_distance_km
from .points import TrackPoint

logger = logging.getLogger(__name__)

ONE_SECOND = timedelta(seconds=1)


class LiftState(enum.Enum):
    NOT_ON_LIFT = "not_on_lift"
    ON_LIFT = "on_lift"


def _is_valid_speed(speed: float) -> bool:
    return not math.isnan(speed)


def _add_optional(
    left: Optional[timedelta], right: Optional[timedelta]
) -> Optional[timedelta]:
    if left is None:
        return right
    if right is None:
        return left
    return left + right


@dataclass
class LiftRideDetector:
    """Speed/altitude-gain state machine for lift rides.

    ``duration`` stays unset until the first lift entry so that merging can
    tell "no lift seen" apart from a ride of zero length.
    """

    thresholds: ChairliftThresholds = field(default_factory=ChairliftThresholds)
    state: LiftState = LiftState.NOT_ON_LIFT
    start_point: Optional[TrackPoint] = None
    _duration: Optional[timedelta] = None

    @property
    def in_chairlift(self) -> bool:
        return self.state is LiftState.ON_LIFT

    @property
    def duration(self) -> timedelta:
        return self._duration if self._duration is not None else timedelta(0)

    def has_duration(self) -> bool:
        return self._duration is not None

    def update(self, point: TrackPoint) -> None:
        speed = point.speed if point.has_speed() else 0.0
        altitude_gain = point.altitude_gain if point.has_altitude_gain() else 0.0
        altitude_loss = point.altitude_loss if point.has_altitude_loss() else 0.0

        max_speed = self.thresholds.max_speed_mps
        if (
            self.state is LiftState.NOT_ON_LIFT
            and _is_valid_speed(speed)
            and speed <= max_speed
            and altitude_gain >= self.thresholds.altitude_gain_threshold_m
        ):
            self.state = LiftState.ON_LIFT
            self.start_point = point
            logger.debug("Entered lift at %s (speed %.2f m/s)", point.timestamp, speed)
        elif self.state is LiftState.ON_LIFT and (
            speed > max_speed or altitude_loss > self.thresholds.altitude_loss_threshold_m
        ):
            self.state = LiftState.NOT_ON_LIFT
            logger.debug("Left lift at %s", point.timestamp)

        if self.state is LiftState.ON_LIFT:
            # Adds the elapsed time since entry on every sample, not a delta.
            elapsed = point.timestamp - self.start_point.timestamp
            self._duration = _add_optional(self._duration, elapsed)

    def merge(self, other: "LiftRideDetector") -> None:
        self._duration = _add_optional(self._duration, other._duration)
        if self.start_point is None:
            self.start_point = other.start_point
        elif (
            other.start_point is not None
            and self.start_point.timestamp > other.start_point.timestamp
        ):
            self.start_point = other.start_point

    def reset(self) -> None:
        self.state = LiftState.NOT_ON_LIFT
        self.start_point = None
        self._duration = None


@dataclass
class LiftQueueDetector:
    """Proximity detector for time spent waiting at a lift.

    An activity has to be started with :meth:`start_activity` before positions
    are evaluated. The user's own position is supplied separately through
    :meth:`set_user_position`; until it is known the user is never considered
    near the lift.
    """

    thresholds: ChairliftThresholds = field(default_factory=ChairliftThresholds)
    _total_wait_time: Optional[timedelta] = None
    arrival_time: Optional[datetime] = field(default=None, compare=False)
    activity_start_time: Optional[datetime] = field(default=None, compare=False)
    last_elevation: Optional[float] = field(default=None, compare=False)
    user_position: Optional[Tuple[float, float]] = field(default=None, compare=False)

    @property
    def total_wait_time(self) -> timedelta:
        return self._total_wait_time if self._total_wait_time is not None else timedelta(0)

    def has_total_wait_time(self) -> bool:
        return self._total_wait_time is not None

    def is_active(self) -> bool:
        return self.activity_start_time is not None

    def start_activity(self, time: datetime, elevation: float) -> None:
        self.activity_start_time = time
        self.last_elevation = elevation

    def set_user_position(self, latitude: float, longitude: float) -> None:
        self.user_position = (latitude, longitude)

    def is_near(self, lift_latitude: float, lift_longitude: float) -> bool:
        if self.user_position is None:
            return False
        user_latitude, user_longitude = self.user_position
        distance_km = haversine_distance_km(
            user_latitude, user_longitude, lift_latitude, lift_longitude
        )
        return distance_km <= self.thresholds.chairlift_radius_km

    def update_location(
        self,
        lift_latitude: float,
        lift_longitude: float,
        elevation: float,
        time: datetime,
    ) -> None:
        if self.activity_start_time is None:
            self.last_elevation = elevation
            return

        if self.is_near(lift_latitude, lift_longitude):
            if self.arrival_time is None:
                self.arrival_time = time
                logger.debug("Arrived at lift at %s", time)
        else:
            if self.arrival_time is not None:
                wait = time - self.arrival_time
                self._total_wait_time = _add_optional(self._total_wait_time, wait)
                self.arrival_time = None
                logger.debug("Left lift queue at %s after %s", time, wait)

            if self.is_end_of_run(elevation, time):
                self.activity_start_time = None
                logger.debug("End of run detected at %s", time)

        self.last_elevation = elevation

    def is_end_of_run(self, elevation: float, time: datetime) -> bool:
        if self.activity_start_time is None or self.last_elevation is None:
            return False

        climb = elevation - self.last_elevation
        if climb <= self.thresholds.end_of_run_elevation_threshold_m:
            return False

        elapsed_s = (time - self.activity_start_time) // ONE_SECOND
        if elapsed_s <= 0:
            # A climb in no time is an unbounded vertical speed.
            return True
        return climb / elapsed_s >= self.thresholds.end_of_run_speed_threshold_mps

    def merge(self, other: "LiftQueueDetector") -> None:
        self._total_wait_time = _add_optional(self._total_wait_time, other._total_wait_time)

    def reset(self) -> None:
        self._total_wait_time = None
        self.arrival_time = None
        self.activity_start_time = None
        self.last_elevation = None
        self.user_position = None
