from __future__ import annotations

import logging
from datetime import timedelta

import pytest

from track_stats.config import TrackStatisticsConfig
from track_stats.points import TrackPoint
from track_stats.geodistance import haversine_distance
from track_stats.statistics import merge_all
from track_stats.updater import (
    TrackStatisticsUpdater,
    compute_segment_statistics,
    compute_track_statistics,
    split_segments,
)

STEP_M = haversine_distance(45.0, 6.0, 45.001, 6.0)


@pytest.fixture
def short_track(make_point):
    return [
        make_point(0, position=(45.0, 6.0), altitude=1000.0, speed=0.0, heart_rate=100.0),
        make_point(
            10, position=(45.001, 6.0), altitude=1005.0, gain=5.0, loss=0.0, speed=10.0, heart_rate=120.0
        ),
        make_point(
            20, position=(45.002, 6.0), altitude=1002.0, gain=0.0, loss=3.0, speed=0.2, heart_rate=140.0
        ),
    ]


def test_updater_accumulates_totals(short_track, t0) -> None:
    stats = compute_track_statistics(short_track)

    assert stats.start_time == t0
    assert stats.stop_time == t0 + timedelta(seconds=20)
    assert stats.total_time == timedelta(seconds=20)
    assert stats.total_distance_m == pytest.approx(STEP_M * 2)
    assert stats.moving_time == timedelta(seconds=10)
    assert stats.recorded_max_speed_mps == 10.0
    assert stats.max_speed() == pytest.approx(STEP_M * 2 / 10)
    assert stats.total_altitude_gain_m == 5.0
    assert stats.total_altitude_loss_m == 3.0
    assert stats.min_altitude() == 1000.0
    assert stats.max_altitude() == 1005.0
    assert stats.average_heart_rate_bpm == pytest.approx(130.0)
    assert stats.chairlift_time() == timedelta(0)


def test_moving_time_from_derived_speed(make_point) -> None:
    points = [
        make_point(0, position=(45.0, 6.0)),
        make_point(10, position=(45.001, 6.0)),
        make_point(20, position=(45.001, 6.0)),
    ]
    stats = compute_track_statistics(points)
    assert stats.moving_time == timedelta(seconds=10)
    assert not stats.has_total_altitude_gain()
    assert not stats.has_average_heart_rate()


def test_moving_threshold_is_configurable(short_track) -> None:
    stats = compute_track_statistics(
        short_track, TrackStatisticsConfig(moving_speed_threshold_mps=0.1)
    )
    assert stats.moving_time == timedelta(seconds=20)


def test_out_of_order_points_are_skipped(make_point, t0, caplog) -> None:
    updater = TrackStatisticsUpdater()
    updater.add_point(make_point(0, position=(45.0, 6.0)))
    updater.add_point(make_point(10, position=(45.001, 6.0)))
    with caplog.at_level(logging.WARNING, logger="track_stats.updater"):
        updater.add_point(make_point(5, position=(45.002, 6.0)))

    stats = updater.statistics
    assert stats.stop_time == t0 + timedelta(seconds=10)
    assert stats.total_distance_m == pytest.approx(STEP_M)
    assert "older than previous sample" in caplog.text


def test_points_without_timestamp_are_ignored(make_point) -> None:
    updater = TrackStatisticsUpdater()
    updater.add_point(TrackPoint(timestamp=None, altitude=500.0))
    assert not updater.statistics.is_initialized()
    updater.add_point(make_point(0, altitude=500.0))
    assert updater.statistics.is_initialized()


def test_statistics_property_returns_copy(short_track) -> None:
    updater = TrackStatisticsUpdater()
    updater.add_points(short_track[:2])
    snapshot = updater.statistics
    updater.add_point(short_track[2])
    assert snapshot.total_time == timedelta(seconds=10)
    assert updater.statistics.total_time == timedelta(seconds=20)

    updater.reset()
    assert not updater.statistics.is_initialized()


def test_lift_ride_detected_from_stream(make_point) -> None:
    points = [
        make_point(0, altitude=1500.0, speed=4.0),
        make_point(30, altitude=1515.0, gain=15.0, loss=0.0, speed=1.8),
        make_point(60, altitude=1530.0, gain=15.0, loss=0.0, speed=1.9),
        make_point(90, altitude=1520.0, gain=0.0, loss=10.0, speed=6.0),
    ]
    stats = compute_track_statistics(points)
    assert not stats.in_chairlift
    assert stats.chairlift_start_point == points[1]
    assert stats.chairlift_time() == timedelta(seconds=30)


def test_lift_queue_detected_with_lift_location(make_point) -> None:
    config = TrackStatisticsConfig(lift_location=(45.0, 6.0))
    points = [
        make_point(0, position=(45.0, 6.01), altitude=1000.0, speed=0.0),
        make_point(30, position=(45.0, 6.0), altitude=1000.0, speed=0.0),
        make_point(90, position=(45.0, 6.0), altitude=1000.0, speed=0.0),
        make_point(120, position=(45.0, 6.01), altitude=1000.0, speed=0.0),
    ]
    stats = compute_track_statistics(points, config)
    assert stats.total_wait_time() == timedelta(seconds=90)
    assert stats.total_chairlift_time() == timedelta(seconds=90)


def test_lift_queue_restarts_after_end_of_run(make_point) -> None:
    config = TrackStatisticsConfig(lift_location=(45.0, 6.0))
    away, at_lift = (45.0, 6.01), (45.0, 6.0)
    points = [
        make_point(0, position=away, altitude=1000.0, speed=0.0),
        make_point(30, position=at_lift, altitude=1000.0, speed=0.0),
        make_point(90, position=away, altitude=1000.0, speed=0.0),
        # 300 m in two minutes ends the run.
        make_point(120, position=away, altitude=1300.0, speed=0.0),
        make_point(150, position=away, altitude=1300.0, speed=0.0),
        make_point(180, position=at_lift, altitude=1000.0, speed=0.0),
        make_point(280, position=away, altitude=1000.0, speed=0.0),
    ]
    stats = compute_track_statistics(points, config)
    assert stats.total_wait_time() == timedelta(seconds=160)


def test_lift_queue_starts_on_first_sample_with_altitude(make_point) -> None:
    config = TrackStatisticsConfig(lift_location=(45.0, 6.0))
    points = [
        make_point(0, position=(45.0, 6.01), speed=0.0),
        make_point(30, position=(45.0, 6.0), altitude=1000.0, speed=0.0),
        make_point(60, position=(45.0, 6.0), altitude=1000.0, speed=0.0),
        make_point(90, position=(45.0, 6.01), altitude=1000.0, speed=0.0),
    ]
    stats = compute_track_statistics(points, config)
    assert stats.total_wait_time() == timedelta(seconds=60)


def test_lift_queue_idle_without_lift_location(make_point) -> None:
    points = [
        make_point(0, position=(45.0, 6.0), altitude=1000.0, speed=0.0),
        make_point(60, position=(45.0, 6.01), altitude=1000.0, speed=0.0),
    ]
    stats = compute_track_statistics(points)
    assert stats.total_wait_time() == timedelta(0)
    assert not stats.lift_queue.is_active()


def test_split_segments_sizes(make_point) -> None:
    points = [make_point(i * 10) for i in range(7)]
    windows = split_segments(points, 3)
    assert [len(window) for window in windows] == [3, 2, 2]
    assert [p for window in windows for p in window] == points
    assert len(split_segments(points[:2], 5)) == 2
    assert split_segments([], 3) == []
    with pytest.raises(ValueError):
        split_segments(points, 0)


def test_segment_statistics_merge_back(make_point, t0) -> None:
    points = [
        make_point(i * 10, position=(45.0 + i * 0.001, 6.0), altitude=1000.0 + i, speed=5.0)
        for i in range(6)
    ]
    parts = compute_segment_statistics(points, 3)
    assert len(parts) == 3

    total = merge_all(parts)
    assert total.start_time == t0
    assert total.stop_time == t0 + timedelta(seconds=50)
    # Each window only measures its own two points.
    assert total.total_time == timedelta(seconds=30)
    assert total.moving_time == timedelta(seconds=30)
    assert total.total_distance_m == pytest.approx(sum(p.total_distance_m for p in parts))
    assert total.min_altitude() == 1000.0
    assert total.max_altitude() == 1005.0
