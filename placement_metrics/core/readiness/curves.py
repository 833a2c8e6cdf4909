"""Saturating curves that turn a raw signal into points.

Every curve is called as ``curve(value, cap)`` and rises quickly for the
first few units of signal, then flattens towards ``cap``. Non-positive
signals score nothing (``Piecewise`` excepted, which follows its table).
"""

import math
from dataclasses import dataclass
from typing import Protocol


class Curve(Protocol):
    def __call__(self, value: float, cap: float) -> float: ...


@dataclass(frozen=True)
class Exponential:
    """``cap * (1 - e^(-value/scale))``: ~63% of cap at ``value == scale``."""

    scale: float

    def __call__(self, value: float, cap: float) -> float:
        if value <= 0 or self.scale <= 0:
            return 0.0
        return cap * (1 - math.exp(-value / self.scale))


@dataclass(frozen=True)
class Linear:
    """Fixed points per unit until the cap."""

    per_unit: float

    def __call__(self, value: float, cap: float) -> float:
        if value <= 0:
            return 0.0
        return min(cap, value * self.per_unit)


@dataclass(frozen=True)
class Proportion:
    """Share of ``full`` (e.g. a 0-100 percentage) mapped onto the cap."""

    full: float = 100

    def __call__(self, value: float, cap: float) -> float:
        if value <= 0 or self.full <= 0:
            return 0.0
        return cap * min(1.0, value / self.full)


@dataclass(frozen=True)
class Piecewise:
    """Linear interpolation through ``(signal, points)`` breakpoints.

    Breakpoints must be sorted by signal. Values beyond the last breakpoint
    keep its points, so the final breakpoint is where the curve saturates.
    """

    points: tuple[tuple[float, float], ...]

    def __call__(self, value: float, cap: float) -> float:
        if not self.points:
            return 0.0
        first_x, first_y = self.points[0]
        if value <= first_x:
            return min(cap, first_y)
        for (x0, y0), (x1, y1) in zip(self.points, self.points[1:]):
            if value <= x1:
                if x1 == x0:
                    return min(cap, y1)
                return min(cap, y0 + (y1 - y0) * (value - x0) / (x1 - x0))
        return min(cap, self.points[-1][1])
