"""
projection.py — Naive linear projection of a metric series.

Fits an ordinary least-squares line of value against elapsed time and reads
it at 4, 8 and 12 weeks after the last observation. No confidence intervals,
no outlier handling; this is a first-order trend line, not a forecast.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Sequence

import numpy as np

from core.timeseries import SeriesPoint

EPOCH = datetime(1970, 1, 1)
WEEK_SECONDS = timedelta(weeks=1).total_seconds()
HORIZON_WEEKS = (4, 8, 12)


@dataclass(frozen=True)
class Projection:
    weeks_4: float
    weeks_8: float
    weeks_12: float

    @classmethod
    def flat(cls, value: float) -> "Projection":
        return cls(value, value, value)

    def to_dict(self) -> Dict[str, float]:
        return {
            "projection_4_weeks": self.weeks_4,
            "projection_8_weeks": self.weeks_8,
            "projection_12_weeks": self.weeks_12,
        }


def _seconds(ts: datetime) -> float:
    return (ts - EPOCH).total_seconds()


def project_series(points: Sequence[SeriesPoint]) -> Projection:
    """
    Project an ascending series to the 4/8/12-week horizons.

    Fewer than two points, or points that all share one timestamp, leave the
    regression undefined; the last value (0 for an empty series) is returned
    for every horizon instead.
    """
    if not points:
        return Projection.flat(0.0)
    last_value = float(points[-1].value)
    if len(points) < 2:
        return Projection.flat(last_value)

    # Offsets from the first point keep the fit well conditioned.
    origin = _seconds(points[0].timestamp)
    x = np.array([_seconds(p.timestamp) - origin for p in points], dtype=float)
    y = np.array([p.value for p in points], dtype=float)

    if np.ptp(x) == 0:
        return Projection.flat(last_value)

    slope, intercept = np.polyfit(x, y, 1)
    at = [float(slope * (x[-1] + weeks * WEEK_SECONDS) + intercept) for weeks in HORIZON_WEEKS]
    return Projection(*at)
