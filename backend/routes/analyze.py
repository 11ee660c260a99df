"""
Analyze routes — physical assessment progress analysis endpoints.
"""

from fastapi import APIRouter, HTTPException

from core.ai_insights import generate_progress_summary
from core.analysis import AnalysisResult, analyze
from core.charts import MatplotlibChartRenderer
from core.models import parse_analysis_payload
from routes.assessments import store

router = APIRouter()

chart_renderer = MatplotlibChartRenderer()


def analysis_from_payload(payload: dict) -> AnalysisResult:
    """Run the analysis on an inline ``{assessment, student, history}`` payload."""
    try:
        current, student, history = parse_analysis_payload(payload)
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return analyze(current, student, history, renderer=chart_renderer)


@router.post("")
async def analyze_inline(payload: dict):
    """Trends, projections, insights and charts for the given records."""
    return analysis_from_payload(payload).to_dict()


@router.post("/assessments/{assessment_id}")
async def analyze_stored(assessment_id: str, include_charts: bool = True):
    """Analyze a stored assessment against its archived versions."""
    current = store.get_assessment(assessment_id)
    if current is None:
        raise HTTPException(404, f"Assessment '{assessment_id}' not found.")
    student = store.get_student(current.student_id) if current.student_id else None
    if student is None:
        raise HTTPException(404, f"Student '{current.student_id}' not found.")

    result = analyze(current, student, store.get_history(assessment_id), renderer=chart_renderer)
    return result.to_dict(include_charts=include_charts)


@router.post("/ai/summary")
async def ai_summary(payload: dict):
    """
    Plain-language progress summary.
    Uses deterministic fallback by default unless AI is enabled by env vars.
    """
    return generate_progress_summary(analysis_from_payload(payload))
