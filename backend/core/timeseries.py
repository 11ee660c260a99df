"""
timeseries.py — Value-over-time series for one metric.

Historical points come from archived assessment versions; the current
assessment always closes the series. Historical values that are missing,
zero or non-numeric are skipped. The current value is kept even when it is
zero, and only left out when it is missing altogether.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from core.models import Assessment, AssessmentHistoryRecord, Student

# Anchor for records when neither the assessment nor any version is dated.
UNDATED = datetime(1970, 1, 1)


def reference_time_for(
    current: Assessment,
    history: Iterable[AssessmentHistoryRecord],
) -> datetime:
    """
    Date an analysis is anchored to: the current assessment's date, else the
    latest dated history version, else ``UNDATED``.

    Never the wall clock, so analysing the same records twice gives the same
    series, projections and day gap.
    """
    if current.assessment_date is not None:
        return current.assessment_date
    dated = [h.assessment_date for h in history if h.assessment_date is not None]
    return max(dated) if dated else UNDATED


@dataclass(frozen=True)
class SeriesPoint:
    timestamp: datetime
    value: float

    def to_dict(self):
        return {"date": self.timestamp.isoformat(), "value": self.value}


def _ordered_history(
    history: Iterable[AssessmentHistoryRecord],
    current_date: datetime,
) -> List[AssessmentHistoryRecord]:
    """History ascending by date (undated records take ``current_date``)."""
    dated = [h for h in history if (h.assessment_date or current_date) <= current_date]
    return sorted(dated, key=lambda h: (h.assessment_date or current_date, h.version))


def build_time_series(
    field: str,
    current: Assessment,
    history: Iterable[AssessmentHistoryRecord],
    reference_time: Optional[datetime] = None,
) -> List[SeriesPoint]:
    """
    Build the ascending series of ``field`` across history plus the current
    assessment.

    ``reference_time`` stands in for any missing assessment date; it defaults
    to ``reference_time_for(current, history)``.
    """
    history = list(history)
    current_date = current.assessment_date or reference_time or reference_time_for(current, history)
    points: List[SeriesPoint] = []

    for record in _ordered_history(history, current_date):
        value = getattr(record, field, None)
        if value:
            points.append(SeriesPoint(record.assessment_date or current_date, float(value)))

    current_value = getattr(current, field, None)
    if current_value is not None:
        points.append(SeriesPoint(current_date, float(current_value)))
    return points


def resolve_height(current: Assessment, student: Student) -> float:
    """Height (cm) used for every BMI point: assessment first, then profile."""
    return current.current_height or student.height or 0.0


def compute_bmi(weight_kg: Optional[float], height_cm: float) -> float:
    if not weight_kg or height_cm <= 0:
        return 0.0
    return weight_kg / (height_cm / 100.0) ** 2


def build_bmi_series(
    current: Assessment,
    student: Student,
    history: Iterable[AssessmentHistoryRecord],
    reference_time: Optional[datetime] = None,
) -> List[SeriesPoint]:
    """
    BMI series recomputed from weights under a single height.

    Historical BMI is never read from storage: each archived weight is
    divided by the *current* height, so a student whose height changed
    between assessments gets a skewed history.
    """
    history = list(history)
    current_date = current.assessment_date or reference_time or reference_time_for(current, history)
    height = resolve_height(current, student)
    points: List[SeriesPoint] = []

    for record in _ordered_history(history, current_date):
        weight = record.current_weight or 0.0
        if weight > 0 and height > 0:
            points.append(SeriesPoint(record.assessment_date or current_date, compute_bmi(weight, height)))

    current_bmi = compute_bmi(current.current_weight, height)
    if current_bmi > 0:
        points.append(SeriesPoint(current_date, current_bmi))
    return points
