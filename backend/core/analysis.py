"""
analysis.py — Progress analysis entry point.

``analyze`` takes the current assessment, the student and the archived
versions of the assessment, and returns everything a progress report needs:
per-metric trends and projections, insight sentences and chart images.
The computation is pure and synchronous; only chart rendering touches the
outside world, and each chart degrades to a placeholder on failure.
"""

import base64
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from core.analyzer import MetricTrend, analyze_metrics
from core.charts import ChartRenderer, MatplotlibChartRenderer, render_charts
from core.goals import DEFAULT_GOAL
from core.insights import Insights, generate_insights
from core.metrics import Metric, Trend
from core.models import Assessment, AssessmentHistoryRecord, Student
from core.timeseries import reference_time_for

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


@dataclass
class AnalysisResult:
    student_name: str
    goal: str
    current: Assessment
    assessment_date: str
    previous: Optional[AssessmentHistoryRecord] = None
    days_since_previous: Optional[int] = None
    metrics: Dict[Metric, MetricTrend] = field(default_factory=dict)
    insights: Insights = field(default_factory=Insights)
    charts: Dict[str, bytes] = field(default_factory=dict)

    def count(self, trend: Trend) -> int:
        return sum(1 for m in self.metrics.values() if m.trend is trend)

    def to_dict(self, include_charts: bool = True) -> Dict[str, Any]:
        out = {
            "student_info": {"name": self.student_name, "goal": self.goal},
            "assessment_info": {
                "current": self.current.to_dict(),
                "previous": self.previous.to_dict() if self.previous else None,
                "assessment_date": self.assessment_date,
                "days_since_previous": self.days_since_previous,
            },
            "metrics": {m.value: t.to_dict() for m, t in self.metrics.items()},
            "insights": self.insights.to_dict(),
        }
        if include_charts:
            out["charts"] = {
                name: base64.b64encode(image).decode("ascii")
                for name, image in self.charts.items()
            }
        return out


def _days_between(later: datetime, earlier: datetime) -> int:
    return math.floor((later - earlier).total_seconds() / SECONDS_PER_DAY)


def analyze(
    current: Assessment,
    student: Student,
    history: Iterable[AssessmentHistoryRecord],
    renderer: Optional[ChartRenderer] = None,
) -> AnalysisResult:
    """
    Analyze a student's progress.

    ``history`` may arrive in any order. Records and assessments without a
    date are treated as taken at ``reference_time_for(current, history)``:
    the current assessment's date, else the latest dated version.
    """
    history: List[AssessmentHistoryRecord] = list(history)
    reference_time = reference_time_for(current, history)
    goal = student.goal or DEFAULT_GOAL

    # Versions dated after the current assessment never count as "previous".
    sorted_history = sorted(
        (h for h in history if (h.assessment_date or reference_time) <= reference_time),
        key=lambda h: (h.assessment_date or reference_time, h.version),
        reverse=True,
    )
    previous = sorted_history[0] if sorted_history else None
    days_since_previous = (
        _days_between(reference_time, previous.assessment_date or reference_time)
        if previous else None
    )

    metrics = analyze_metrics(current, student, history, goal, reference_time)
    insights = generate_insights(metrics, goal)
    charts = render_charts(metrics, renderer or MatplotlibChartRenderer())

    result = AnalysisResult(
        student_name=student.name,
        goal=goal,
        current=current,
        assessment_date=reference_time.strftime("%d/%m/%Y"),
        previous=previous,
        days_since_previous=days_since_previous,
        metrics=metrics,
        insights=insights,
        charts=charts,
    )
    logger.debug(
        "Analyzed assessment %s: %d history record(s), %d improving, %d worsening",
        current.id, len(history), result.count(Trend.IMPROVING), result.count(Trend.WORSENING),
    )
    return result
