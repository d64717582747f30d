"""Feed ordered track samples into :class:`TrackStatistics`.

:class:`TrackStatisticsUpdater` applies every per-sample operation of the
aggregate in one place: time bounds, distance, moving time, speed, altitude,
heart rate and both lift detectors.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

from .config import TrackStatisticsConfig
from .geodistance import haversine_distance
from .points import TrackPoint
from .statistics import TrackStatistics

logger = logging.getLogger(__name__)


class TrackStatisticsUpdater:
    """Accumulate statistics one :class:`TrackPoint` at a time.

    Samples must arrive in time order. A sample older than the previous one
    is reported with a warning and skipped.
    """

    def __init__(self, config: Optional[TrackStatisticsConfig] = None) -> None:
        self.config = config or TrackStatisticsConfig()
        self._statistics = TrackStatistics(self.config.chairlift)
        self._last_point: Optional[TrackPoint] = None
        self._heart_rate_seconds = 0.0
        self._heart_rate_weighted_sum = 0.0

    @property
    def statistics(self) -> TrackStatistics:
        """A copy of the statistics aggregated so far."""

        return self._statistics.copy()

    def reset(self) -> None:
        self._statistics.reset()
        self._last_point = None
        self._heart_rate_seconds = 0.0
        self._heart_rate_weighted_sum = 0.0

    def add_points(self, points: Iterable[TrackPoint]) -> None:
        for point in points:
            self.add_point(point)

    def add_point(self, point: TrackPoint) -> None:
        if point.timestamp is None:
            logger.debug("Skipping track point without timestamp")
            return

        stats = self._statistics
        last = self._last_point
        if last is not None and point.timestamp < last.timestamp:
            logger.warning(
                "Skipping track point at %s older than previous sample at %s",
                point.timestamp,
                last.timestamp,
            )
            return

        if not stats.is_initialized():
            stats.reset(point.timestamp)
        else:
            stats.set_stop_time(point.timestamp)
            stats.total_time = stats.stop_time - stats.start_time

        if last is not None:
            distance_m = self._distance(last, point)
            if distance_m is not None:
                stats.add_total_distance(distance_m)
            if self._is_moving(last, point, distance_m):
                stats.add_moving_time_between(point, last)
            self._update_heart_rate(last, point)

        if point.speed is not None and not math.isnan(point.speed):
            stats.recorded_max_speed_mps = max(stats.recorded_max_speed_mps, point.speed)

        stats.update_altitude_extremities(point.altitude)
        if point.altitude_gain is not None:
            stats.add_total_altitude_gain(point.altitude_gain)
        if point.altitude_loss is not None:
            stats.add_total_altitude_loss(point.altitude_loss)

        stats.update_chairlift_time(point)
        self._update_queue(point)

        self._last_point = point

    def _update_queue(self, point: TrackPoint) -> None:
        if self.config.lift_location is None or point.altitude is None:
            return
        stats = self._statistics
        if not stats.lift_queue.is_active():
            # Starts on the first sample with an altitude and again after each end of run.
            stats.start_chairlift_activity(point.timestamp, point.altitude)
        if point.position is not None:
            stats.set_user_location(*point.position)
        lift_latitude, lift_longitude = self.config.lift_location
        stats.update_chairlift_location(
            lift_latitude, lift_longitude, point.altitude, point.timestamp
        )

    @staticmethod
    def _distance(last: TrackPoint, point: TrackPoint) -> Optional[float]:
        if last.position is None or point.position is None:
            return None
        return haversine_distance(*last.position, *point.position)

    def _is_moving(
        self, last: TrackPoint, point: TrackPoint, distance_m: Optional[float]
    ) -> bool:
        threshold = self.config.moving_speed_threshold_mps
        if point.speed is not None and not math.isnan(point.speed):
            return point.speed >= threshold

        elapsed_s = (point.timestamp - last.timestamp).total_seconds()
        if distance_m is None or elapsed_s <= 0:
            return False
        return distance_m / elapsed_s >= threshold

    def _update_heart_rate(self, last: TrackPoint, point: TrackPoint) -> None:
        if point.heart_rate is None:
            return
        elapsed_s = (point.timestamp - last.timestamp).total_seconds()
        if elapsed_s <= 0:
            return
        self._heart_rate_seconds += elapsed_s
        self._heart_rate_weighted_sum += point.heart_rate * elapsed_s
        self._statistics.set_average_heart_rate(
            self._heart_rate_weighted_sum / self._heart_rate_seconds
        )


def compute_track_statistics(
    points: Iterable[TrackPoint], config: Optional[TrackStatisticsConfig] = None
) -> TrackStatistics:
    """Aggregate a whole track."""

    updater = TrackStatisticsUpdater(config)
    updater.add_points(points)
    return updater.statistics


def split_segments(points: Sequence[TrackPoint], segments: int) -> List[Sequence[TrackPoint]]:
    """Split ``points`` into ``segments`` contiguous, non-empty windows.

    Fewer windows are returned when there are fewer points than segments.
    """

    if segments <= 0:
        raise ValueError("segments must be positive")
    if not points:
        return []

    count = min(segments, len(points))
    size, remainder = divmod(len(points), count)
    windows: List[Sequence[TrackPoint]] = []
    start = 0
    for index in range(count):
        stop = start + size + (1 if index < remainder else 0)
        windows.append(points[start:stop])
        start = stop
    return windows


def compute_segment_statistics(
    points: Sequence[TrackPoint],
    segments: int,
    config: Optional[TrackStatisticsConfig] = None,
) -> List[TrackStatistics]:
    """Aggregate each of ``segments`` disjoint time windows independently.

    The partial aggregates can be combined with
    :func:`track_stats.statistics.merge_all`.
    """

    parts = [
        compute_track_statistics(window, config)
        for window in split_segments(points, segments)
    ]
    logger.debug("Aggregated %d segment(s)", len(parts))
    return parts
