"""FIT file loading for track statistics.

The loader turns the ``record`` messages of a Garmin FIT activity into
:class:`TrackPoint` samples, the per-sample input consumed by
:mod:`track_stats.updater`. Altitude is gap-filled and optionally smoothed
before per-sample gain and loss are derived from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
from fitparse import FitFile

from .points import TrackPoint

logger = logging.getLogger(__name__)

Semicircle = Optional[int]
Degrees = Optional[float]


def _semicircles_to_degrees(value: Semicircle) -> Degrees:
    if value is None:
        return None
    return value * 180 / 2**31


@dataclass(frozen=True)
class TrackFitData:
    """Track samples loaded from a FIT activity."""

    source: Path
    points: Sequence[TrackPoint]


def _safe_get(record, key):
    field = record.get(key)
    if field:
        return field.value
    return None


def _first_present(fields, *keys):
    for key in keys:
        value = _safe_get(fields, key)
        if value is not None:
            return value
    return None


def _as_utc(timestamp: Optional[datetime]) -> Optional[datetime]:
    # fitparse yields naive datetimes that are already in UTC.
    if timestamp is None or timestamp.tzinfo is not None:
        return timestamp
    return timestamp.replace(tzinfo=timezone.utc)


def _parse_records(fit: FitFile) -> List[TrackPoint]:
    points: List[TrackPoint] = []
    for message in fit.get_messages("record"):
        fields = {field.name: field for field in message}
        lat = _safe_get(fields, "position_lat")
        lon = _safe_get(fields, "position_long")
        altitude = _first_present(fields, "enhanced_altitude", "altitude")
        speed = _first_present(fields, "enhanced_speed", "speed")
        heart_rate = _safe_get(fields, "heart_rate")
        points.append(
            TrackPoint(
                timestamp=_as_utc(_safe_get(fields, "timestamp")),
                position=(
                    _semicircles_to_degrees(lat),
                    _semicircles_to_degrees(lon),
                )
                if lat is not None and lon is not None
                else None,
                altitude=float(altitude) if altitude is not None else None,
                speed=float(speed) if speed is not None else None,
                heart_rate=float(heart_rate) if heart_rate is not None else None,
            )
        )
    return points


def _fill_altitude_gaps(points: Sequence[TrackPoint]) -> np.ndarray:
    """Interpolate missing altitudes over the sample index.

    Edge values are held constant. When no sample carries an altitude the
    returned array is all ``NaN``.
    """

    altitudes = np.asarray(
        [np.nan if point.altitude is None else point.altitude for point in points],
        dtype=float,
    )
    known = np.isfinite(altitudes)
    if not np.any(known):
        return altitudes

    indices = np.arange(altitudes.size)
    return np.interp(
        indices,
        indices[known],
        altitudes[known],
        left=altitudes[known][0],
        right=altitudes[known][-1],
    )


def _moving_average(values: np.ndarray, window: int) -> np.ndarray:
    """Return a centered moving average with edge-value padding."""

    if window <= 1 or values.size == 0:
        return values

    pad_left = window // 2
    pad_right = window - 1 - pad_left
    padded = np.pad(values, (pad_left, pad_right), mode="edge")
    kernel = np.full(window, 1 / window, dtype=float)
    return np.convolve(padded, kernel, mode="valid")


def with_altitude_changes(
    points: Sequence[TrackPoint], *, smoothing_window: int = 1
) -> list[TrackPoint]:
    """Attach per-sample altitude gain and loss to ``points``.

    The first sample (and every sample when no altitude is known) keeps
    ``None`` for both fields.
    """

    if smoothing_window <= 0:
        raise ValueError("smoothing_window must be positive")
    if not points:
        return []

    altitudes = _fill_altitude_gaps(points)
    if not np.any(np.isfinite(altitudes)):
        return list(points)

    smoothed = _moving_average(altitudes, smoothing_window)
    deltas = np.diff(smoothed)

    updated = [
        TrackPoint(
            timestamp=points[0].timestamp,
            position=points[0].position,
            altitude=float(smoothed[0]),
            speed=points[0].speed,
            heart_rate=points[0].heart_rate,
        )
    ]
    for point, altitude, delta in zip(points[1:], smoothed[1:], deltas):
        updated.append(
            TrackPoint(
                timestamp=point.timestamp,
                position=point.position,
                altitude=float(altitude),
                altitude_gain=float(max(delta, 0.0)),
                altitude_loss=float(max(-delta, 0.0)),
                speed=point.speed,
                heart_rate=point.heart_rate,
            )
        )
    return updated


def parse_track_fit(path: Path | str, *, smoothing_window: int = 1) -> TrackFitData:
    """Load a FIT activity into time-ordered track samples.

    Records without a timestamp are dropped. Altitude gaps are filled by
    linear interpolation and the altitude stream is smoothed with a centered
    moving average of ``smoothing_window`` samples before gain and loss are
    derived.
    """

    if smoothing_window <= 0:
        raise ValueError("smoothing_window must be positive")

    fit_file = FitFile(str(path))
    fit_file.parse()

    records = _parse_records(fit_file)
    timed = [point for point in records if point.timestamp is not None]
    if len(timed) != len(records):
        logger.debug("Dropped %d record(s) without timestamp", len(records) - len(timed))
    timed.sort(key=lambda point: point.timestamp)

    logger.info("Loaded %d track point(s) from %s", len(timed), path)
    return TrackFitData(
        source=Path(path),
        points=with_altitude_changes(timed, smoothing_window=smoothing_window),
    )
