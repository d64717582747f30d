"""Command-line argument definitions for track analysis.

The helpers centralize argument construction so flags stay consistent with
:mod:`track_stats.config` and can be documented in one place.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from .config import (
    CHAIRLIFT_RADIUS_KM,
    END_OF_RUN_ELEVATION_THRESHOLD_M,
    END_OF_RUN_SPEED_THRESHOLD_MPS,
    LIFT_ALTITUDE_GAIN_THRESHOLD_M,
    LIFT_ALTITUDE_LOSS_THRESHOLD_M,
    LIFT_MAX_SPEED_MPS,
    MOVING_SPEED_THRESHOLD_MPS,
    ChairliftThresholds,
    TrackStatisticsConfig,
)


def build_argument_parser() -> argparse.ArgumentParser:
    """Construct the argument parser used by ``analyze_track.py``.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser ready for ``parse_args``.
    """

    parser = argparse.ArgumentParser(
        description=(
            "Aggregate distance, time, speed, altitude, heart rate and chairlift "
            "statistics from a Garmin FIT file."
        ),
    )

    parser.add_argument(
        "--fit_file",
        type=Path,
        required=True,
        help="Path to the .fit file to analyze.",
    )
    parser.add_argument(
        "--segments",
        type=int,
        default=1,
        help=(
            "Split the track into this many contiguous windows, aggregate each "
            "one independently and merge the results (default: 1)."
        ),
    )
    parser.add_argument(
        "--smoothing_window",
        type=int,
        default=1,
        help=(
            "Window size for moving-average smoothing applied to the altitude "
            "stream before gain and loss are derived. A value of 1 disables smoothing."
        ),
    )
    parser.add_argument(
        "--lift-lat",
        type=float,
        help="Latitude (degrees) of a known lift base station for wait-time detection.",
    )
    parser.add_argument(
        "--lift-lon",
        type=float,
        help="Longitude (degrees) of a known lift base station for wait-time detection.",
    )
    parser.add_argument(
        "--lift-max-speed",
        type=float,
        default=LIFT_MAX_SPEED_MPS,
        help="Highest speed (m/s) still compatible with riding a lift.",
    )
    parser.add_argument(
        "--lift-gain-threshold",
        type=float,
        default=LIFT_ALTITUDE_GAIN_THRESHOLD_M,
        help="Per-sample altitude gain (m) required to enter a lift.",
    )
    parser.add_argument(
        "--lift-loss-threshold",
        type=float,
        default=LIFT_ALTITUDE_LOSS_THRESHOLD_M,
        help="Per-sample altitude loss (m) above which a lift ride ends.",
    )
    parser.add_argument(
        "--chairlift-radius",
        type=float,
        default=CHAIRLIFT_RADIUS_KM,
        help="Distance (km) from the lift location counted as queueing.",
    )
    parser.add_argument(
        "--end-of-run-elevation",
        type=float,
        default=END_OF_RUN_ELEVATION_THRESHOLD_M,
        help="Elevation change (m) between samples that can signal the end of a run.",
    )
    parser.add_argument(
        "--end-of-run-speed",
        type=float,
        default=END_OF_RUN_SPEED_THRESHOLD_MPS,
        help="Vertical speed (m/s) confirming the end of a run.",
    )
    parser.add_argument(
        "--moving-speed-threshold",
        type=float,
        default=MOVING_SPEED_THRESHOLD_MPS,
        help="Speed (m/s) at or above which a sample counts as moving.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Optional path to also write log output to.",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> TrackStatisticsConfig:
    """Translate parsed arguments into a :class:`TrackStatisticsConfig`."""

    if (args.lift_lat is None) != (args.lift_lon is None):
        raise ValueError("--lift-lat and --lift-lon must be given together")

    lift_location = None
    if args.lift_lat is not None:
        lift_location = (args.lift_lat, args.lift_lon)

    thresholds = ChairliftThresholds(
        max_speed_mps=args.lift_max_speed,
        altitude_gain_threshold_m=args.lift_gain_threshold,
        altitude_loss_threshold_m=args.lift_loss_threshold,
        chairlift_radius_km=args.chairlift_radius,
        end_of_run_elevation_threshold_m=args.end_of_run_elevation,
        end_of_run_speed_threshold_mps=args.end_of_run_speed,
    )
    return TrackStatisticsConfig(
        chairlift=thresholds,
        moving_speed_threshold_mps=args.moving_speed_threshold,
        lift_location=lift_location,
    )
