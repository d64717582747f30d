"""Track sample model shared by the loader, the detectors and the aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class TrackPoint:
    """A single track sample.

    ``altitude_gain`` and ``altitude_loss`` are the non-negative altitude
    changes since the previous sample. ``speed`` is in m/s; ``None`` or NaN
    marks an invalid reading.
    """

    timestamp: Optional[datetime]
    position: Optional[Tuple[float, float]] = None
    altitude: Optional[float] = None
    altitude_gain: Optional[float] = None
    altitude_loss: Optional[float] = None
    speed: Optional[float] = None
    heart_rate: Optional[float] = None

    def has_speed(self) -> bool:
        return self.speed is not None

    def has_altitude_gain(self) -> bool:
        return self.altitude_gain is not None

    def has_altitude_loss(self) -> bool:
        return self.altitude_loss is not None
