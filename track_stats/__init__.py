"""Incremental statistics for GPS tracks.

The package aggregates distance, time, speed, altitude and heart rate
statistics sample by sample, detects chairlift rides and queues, and merges
statistics computed over disjoint parts of the same track. FIT loading lives
in :mod:`track_stats.fit_parser` and is imported on demand.
"""

from .chairlift import LiftQueueDetector, LiftRideDetector, LiftState
from .config import ChairliftThresholds, TrackStatisticsConfig
from .extremity import ExtremityTracker
from .formatting import format_statistics
from .geodistance import (
    EARTH_RADIUS_M,
    average_speed_from_points,
    haversine_distance,
    haversine_distance_km,
    path_length_m,
)
from .points import TrackPoint
from .statistics import InvariantViolation, TrackStatistics, merge_all, merged
from .updater import (
    TrackStatisticsUpdater,
    compute_segment_statistics,
    compute_track_statistics,
    split_segments,
)

__all__ = [
    "ChairliftThresholds",
    "EARTH_RADIUS_M",
    "ExtremityTracker",
    "InvariantViolation",
    "LiftQueueDetector",
    "LiftRideDetector",
    "LiftState",
    "TrackPoint",
    "TrackStatistics",
    "TrackStatisticsConfig",
    "TrackStatisticsUpdater",
    "average_speed_from_points",
    "compute_segment_statistics",
    "compute_track_statistics",
    "format_statistics",
    "haversine_distance",
    "haversine_distance_km",
    "merge_all",
    "merged",
    "path_length_m",
    "split_segments",
]
