import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Tuple

import pytest

# Ensure project root is importable for tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from track_stats.points import TrackPoint  # noqa: E402

T0 = datetime(2024, 1, 20, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def make_point():
    def _make(
        seconds: float,
        *,
        position: Optional[Tuple[float, float]] = None,
        altitude: Optional[float] = None,
        gain: Optional[float] = None,
        loss: Optional[float] = None,
        speed: Optional[float] = None,
        heart_rate: Optional[float] = None,
    ) -> TrackPoint:
        return TrackPoint(
            timestamp=T0 + timedelta(seconds=seconds),
            position=position,
            altitude=altitude,
            altitude_gain=gain,
            altitude_loss=loss,
            speed=speed,
            heart_rate=heart_rate,
        )

    return _make
