from __future__ import annotations

import math
import subprocess
import sys
from pathlib import Path

from track_stats.points import TrackPoint

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_optional_fields(t0) -> None:
    point = TrackPoint(timestamp=t0, speed=math.nan, altitude_gain=0.0)
    assert point.has_speed()
    assert point.has_altitude_gain()
    assert not point.has_altitude_loss()
    assert not TrackPoint(timestamp=t0).has_speed()


def test_core_modules_do_not_load_fit_decoder() -> None:
    code = (
        "import sys\n"
        "import track_stats\n"
        "import track_stats.updater\n"
        "assert 'fitparse' not in sys.modules, 'fitparse imported'\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", code],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr
