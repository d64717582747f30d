"""Threshold configuration for statistics aggregation and lift detection.

Defaults reproduce the values the detectors have always used; the CLI maps its
flags onto these structures through
:func:`track_stats.arguments.config_from_args`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

# Lift ride state machine.
LIFT_MAX_SPEED_MPS = 2.0
LIFT_ALTITUDE_GAIN_THRESHOLD_M = 10.0
LIFT_ALTITUDE_LOSS_THRESHOLD_M = 10.0

# Lift queue proximity detector. The radius is in kilometers.
CHAIRLIFT_RADIUS_KM = 0.01
END_OF_RUN_ELEVATION_THRESHOLD_M = 10.0
END_OF_RUN_SPEED_THRESHOLD_MPS = 0.1

# Samples at or above this speed count towards moving time.
MOVING_SPEED_THRESHOLD_MPS = 0.5


@dataclass(frozen=True)
class ChairliftThresholds:
    """Thresholds shared by the two lift detectors."""

    max_speed_mps: float = LIFT_MAX_SPEED_MPS
    altitude_gain_threshold_m: float = LIFT_ALTITUDE_GAIN_THRESHOLD_M
    altitude_loss_threshold_m: float = LIFT_ALTITUDE_LOSS_THRESHOLD_M
    chairlift_radius_km: float = CHAIRLIFT_RADIUS_KM
    end_of_run_elevation_threshold_m: float = END_OF_RUN_ELEVATION_THRESHOLD_M
    end_of_run_speed_threshold_mps: float = END_OF_RUN_SPEED_THRESHOLD_MPS

    def __post_init__(self) -> None:
        for name in (
            "max_speed_mps",
            "altitude_gain_threshold_m",
            "altitude_loss_threshold_m",
            "chairlift_radius_km",
            "end_of_run_elevation_threshold_m",
            "end_of_run_speed_threshold_mps",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True)
class TrackStatisticsConfig:
    """Settings used by :class:`track_stats.updater.TrackStatisticsUpdater`.

    ``lift_location`` is the ``(latitude, longitude)`` of a known lift base
    station. When it is ``None`` the proximity-based queue detector stays idle
    and only the speed/altitude lift detector runs.
    """

    chairlift: ChairliftThresholds = field(default_factory=ChairliftThresholds)
    moving_speed_threshold_mps: float = MOVING_SPEED_THRESHOLD_MPS
    lift_location: Optional[Tuple[float, float]] = None

    def __post_init__(self) -> None:
        if self.moving_speed_threshold_mps < 0:
            raise ValueError("moving_speed_threshold_mps must be non-negative")
        if self.lift_location is not None and len(self.lift_location) != 2:
            raise ValueError("lift_location must be a (latitude, longitude) pair")
