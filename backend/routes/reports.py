"""
Report routes — progress PDF and Excel generation endpoints.
"""

import logging
import os
import re
import uuid
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from core.report_builder import generate_progress_excel, generate_progress_report_pdf
from routes.analyze import analysis_from_payload

logger = logging.getLogger(__name__)

router = APIRouter()

STUDIO_NAME = os.getenv("STUDIO_NAME", "Personal Trainer")
REPORTS_DIR = Path(__file__).resolve().parent.parent / "reports"
REPORTS_DIR.mkdir(parents=True, exist_ok=True)


def _safe_token(value: str, fallback: str = "item") -> str:
    """Create filesystem-safe token for filenames."""
    token = re.sub(r"[^A-Za-z0-9._-]+", "_", str(value)).strip("._-")
    return token or fallback


def _safe_unlink(path: str):
    """Best-effort file deletion after response is sent."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove report file %s: %s", path, exc)


@router.post("/progress-pdf")
async def progress_report_pdf(payload: dict):
    """Generate a student's progress report PDF."""
    result = analysis_from_payload(payload)
    report_id = str(uuid.uuid4())[:8]
    student_token = _safe_token(result.student_name, fallback="aluno")
    output_path = REPORTS_DIR / f"progress_{student_token}_{report_id}.pdf"

    generate_progress_report_pdf(
        output_path=str(output_path),
        studio_name=STUDIO_NAME,
        result=result,
    )

    return FileResponse(
        str(output_path),
        media_type="application/pdf",
        filename=f"Evolucao_{student_token}_{report_id}.pdf",
        background=BackgroundTask(_safe_unlink, str(output_path)),
    )


@router.post("/excel")
async def progress_excel(payload: dict):
    """Export the analysis (summary, series, insights) as an Excel workbook."""
    result = analysis_from_payload(payload)
    report_id = str(uuid.uuid4())[:8]
    student_token = _safe_token(result.student_name, fallback="aluno")
    output_path = REPORTS_DIR / f"progress_{student_token}_{report_id}.xlsx"

    generate_progress_excel(
        output_path=str(output_path),
        result=result,
        studio_name=STUDIO_NAME,
    )

    return FileResponse(
        str(output_path),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=f"Evolucao_{student_token}_{report_id}.xlsx",
        background=BackgroundTask(_safe_unlink, str(output_path)),
    )
