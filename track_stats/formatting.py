"""Debug representation of track statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .statistics import TrackStatistics


def _optional(value: Optional[float], fmt: str = "{:.2f}") -> str:
    return "unset" if value is None else fmt.format(value)


def format_statistics(stats: "TrackStatistics") -> str:
    """Return a single line listing every reported statistic."""

    start = stats.start_time.isoformat() if stats.start_time else "unset"
    stop = stats.stop_time.isoformat() if stats.stop_time else "unset"
    return (
        "TrackStatistics { "
        f"Start Time: {start}; Stop Time: {stop}; "
        f"Total Distance: {stats.total_distance_m:.2f} m; "
        f"Total Time: {stats.total_time}; Moving Time: {stats.moving_time}; "
        f"Max Speed: {stats.max_speed():.2f} m/s; "
        f"Min Altitude: {stats.min_altitude()}; Max Altitude: {stats.max_altitude()}; "
        f"Altitude Gain: {_optional(stats.total_altitude_gain_m)}; "
        f"Altitude Loss: {_optional(stats.total_altitude_loss_m)}; "
        f"Average Heart Rate: {_optional(stats.average_heart_rate_bpm, '{:.1f}')}; "
        f"Time in Chairlift: {stats.chairlift_time()}; "
        f"Waiting Time at Chairlift: {stats.total_wait_time()}; "
        f"Total time at Chairlift (including waiting time): {stats.total_chairlift_time()}"
        " }"
    )
