from __future__ import annotations

import pytest

from track_stats.config import ChairliftThresholds, TrackStatisticsConfig


def test_default_thresholds() -> None:
    thresholds = ChairliftThresholds()
    assert thresholds.max_speed_mps == 2.0
    assert thresholds.altitude_gain_threshold_m == 10.0
    assert thresholds.altitude_loss_threshold_m == 10.0
    assert thresholds.chairlift_radius_km == 0.01
    assert thresholds.end_of_run_elevation_threshold_m == 10.0
    assert thresholds.end_of_run_speed_threshold_mps == 0.1


def test_config_validation() -> None:
    assert TrackStatisticsConfig().lift_location is None
    with pytest.raises(ValueError):
        TrackStatisticsConfig(moving_speed_threshold_mps=-0.5)
    with pytest.raises(ValueError):
        TrackStatisticsConfig(lift_location=(45.0,))
