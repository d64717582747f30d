"""Running minimum/maximum of a scalar stream."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class ExtremityTracker:
    """Track the smallest and largest value seen so far.

    An empty tracker reports ``min = +inf`` and ``max = -inf``; use
    :meth:`has_data` before treating the values as meaningful.
    """

    min: float = math.inf
    max: float = -math.inf

    def update(self, value: float) -> None:
        value = float(value)
        # NaN would poison both bounds.
        if math.isnan(value):
            return
        if value < self.min:
            self.min = value
        if value > self.max:
            self.max = value

    def has_data(self) -> bool:
        return self.min != math.inf and self.max != -math.inf

    def set(self, minimum: float, maximum: float) -> None:
        self.min = float(minimum)
        self.max = float(maximum)

    def set_min(self, minimum: float) -> None:
        self.min = float(minimum)

    def set_max(self, maximum: float) -> None:
        self.max = float(maximum)

    def reset(self) -> None:
        self.min = math.inf
        self.max = -math.inf

    def copy(self) -> "ExtremityTracker":
        return ExtremityTracker(min=self.min, max=self.max)
