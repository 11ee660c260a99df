"""
analyzer.py — Per-metric progress analysis.

For every tracked metric: build the series, compare the current value with
the immediately preceding point, classify the trend and project it forward.
BMI is derived from weight and a single height rather than read from a field.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from core.metrics import METRIC_POLICIES, TRACKED_METRICS, Direction, Metric, Trend
from core.models import Assessment, AssessmentHistoryRecord, Student
from core.projection import Projection, project_series
from core.timeseries import (
    SeriesPoint,
    build_bmi_series,
    build_time_series,
    compute_bmi,
    reference_time_for,
    resolve_height,
)
from core.trends import classify_trend


@dataclass
class MetricTrend:
    metric: Metric
    values: List[SeriesPoint] = field(default_factory=list)
    current_value: float = 0.0
    previous_value: Optional[float] = None
    delta: float = 0.0
    delta_percentage: float = 0.0
    trend: Trend = Trend.UNKNOWN
    projection: Projection = field(default_factory=lambda: Projection.flat(0.0))

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "metric": self.metric.value,
            "values": [p.to_dict() for p in self.values],
            "current_value": self.current_value,
            "previous_value": self.previous_value,
            "delta": self.delta,
            "delta_percentage": self.delta_percentage,
            "trend": self.trend.value,
        }
        out.update(self.projection.to_dict())
        return out


def _summarize(
    metric: Metric,
    points: List[SeriesPoint],
    has_current: bool,
    goal: Optional[str],
) -> MetricTrend:
    """Delta, trend and projection for a finished series."""
    projection = project_series(points)
    if not has_current:
        # Nothing measured today: no comparison to make.
        return MetricTrend(metric=metric, values=points, trend=Trend.UNKNOWN, projection=projection)

    current_value = points[-1].value
    previous_value = points[-2].value if len(points) > 1 else None

    delta = current_value - previous_value if previous_value else 0.0
    delta_percentage = (delta / previous_value) * 100 if previous_value else 0.0

    return MetricTrend(
        metric=metric,
        values=points,
        current_value=current_value,
        previous_value=previous_value,
        delta=delta,
        delta_percentage=delta_percentage,
        trend=classify_trend(metric, delta, goal=goal, current_value=current_value),
        projection=projection,
    )


def analyze_metric(
    metric: Metric,
    current: Assessment,
    history: Iterable[AssessmentHistoryRecord],
    goal: Optional[str] = None,
    reference_time: Optional[datetime] = None,
) -> MetricTrend:
    """Analyze one stored (non-derived) metric."""
    policy = METRIC_POLICIES[metric]
    if policy.field is None:
        raise ValueError(f"{metric.value} is derived and has no stored field.")

    points = build_time_series(policy.field, current, history, reference_time)
    has_current = getattr(current, policy.field) is not None
    return _summarize(metric, points, has_current, goal)


def analyze_bmi(
    current: Assessment,
    student: Student,
    history: Iterable[AssessmentHistoryRecord],
    reference_time: Optional[datetime] = None,
) -> MetricTrend:
    """
    BMI trend from weights under one height.

    A missing height on both the assessment and the profile yields a BMI of
    0 and no series, rather than an error.
    """
    points = build_bmi_series(current, student, history, reference_time)
    has_current = compute_bmi(current.current_weight, resolve_height(current, student)) > 0
    return _summarize(Metric.BMI, points, has_current, None)


def analyze_metrics(
    current: Assessment,
    student: Student,
    history: Iterable[AssessmentHistoryRecord],
    goal: Optional[str] = None,
    reference_time: Optional[datetime] = None,
) -> Dict[Metric, MetricTrend]:
    """Analyze every tracked metric, in ``TRACKED_METRICS`` order."""
    history = list(history)
    reference_time = current.assessment_date or reference_time or reference_time_for(current, history)

    results: Dict[Metric, MetricTrend] = {}
    for metric in TRACKED_METRICS:
        if METRIC_POLICIES[metric].direction is Direction.DERIVED:
            results[metric] = analyze_bmi(current, student, history, reference_time)
        else:
            results[metric] = analyze_metric(metric, current, history, goal, reference_time)
    return results
