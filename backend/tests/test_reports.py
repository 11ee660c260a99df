"""
Tests for core/report_builder.py — PDF/Excel generation completes without errors.
"""

import os
import sys
import tempfile
from datetime import datetime

import pytest
from openpyxl import load_workbook

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.analysis import analyze
from core.charts import MatplotlibChartRenderer
from core.models import Assessment, AssessmentHistoryRecord, Student
from core.report_builder import (
    generate_progress_excel,
    generate_progress_report_pdf,
    metrics_frame,
    series_frame,
)

STUDIO_NAME = "Studio Teste"


class FailingRenderer:
    def render_line_chart(self, series, title, color):
        raise RuntimeError("offline")

    def render_doughnut(self, labels, values):
        raise RuntimeError("offline")

    def render_bar_comparison(self, labels, current_values, previous_values):
        raise RuntimeError("offline")


def _inputs():
    current = Assessment(
        id="a1", assessment_date=datetime(2024, 3, 1),
        current_weight=78.0, current_height=175.0, body_fat_percentage=22.0,
        lean_mass=31.0, waist_circ=86.0, resting_heart_rate=64.0,
    )
    history = [
        AssessmentHistoryRecord(
            assessment_id="a1", version=1, assessment_date=datetime(2024, 1, 1),
            current_weight=82.0, body_fat_percentage=25.0, lean_mass=30.0, waist_circ=90.0,
        ),
        AssessmentHistoryRecord(
            assessment_id="a1", version=2, assessment_date=datetime(2024, 2, 1),
            current_weight=80.0, body_fat_percentage=23.5, lean_mass=30.5, waist_circ=88.0,
        ),
    ]
    return current, Student(name="João Lima", goal="perder peso"), history


@pytest.fixture(scope="module")
def result():
    current, student, history = _inputs()
    return analyze(current, student, history, renderer=MatplotlibChartRenderer())


@pytest.fixture
def placeholder_result():
    current, student, history = _inputs()
    return analyze(current, student, history, renderer=FailingRenderer())


class TestProgressReportPdf:
    """Test progress report PDF generation."""

    def test_creates_pdf_file(self, result):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "progress.pdf")
            generate_progress_report_pdf(output_path=path, studio_name=STUDIO_NAME, result=result)
            assert os.path.exists(path)
            with open(path, "rb") as f:
                assert f.read(5) == b"%PDF-"

    def test_placeholder_charts_are_skipped(self, placeholder_result):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "progress.pdf")
            generate_progress_report_pdf(output_path=path, studio_name=STUDIO_NAME, result=placeholder_result)
            assert os.path.getsize(path) > 0


class TestProgressExcel:
    """Test Excel export."""

    def test_creates_workbook(self, result):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "progress.xlsx")
            generate_progress_excel(output_path=path, result=result, studio_name=STUDIO_NAME)
            wb = load_workbook(path)
            assert wb.sheetnames == ["Resumo", "Series", "Insights"]
            header = [c.value for c in wb["Resumo"][1]]
            assert header[0] == "metric"
            assert "trend" in header
            assert wb["Resumo"].max_row == 1 + len(result.metrics)

    def test_metrics_frame_has_no_nan(self, result):
        df = metrics_frame(result)
        hip = df[df["metric"] == "hip_circ"].iloc[0]
        assert hip["previous_value"] is None
        assert hip["trend"] == "unknown"

    def test_series_frame_long_format(self, result):
        df = series_frame(result)
        assert list(df.columns) == ["metric", "date", "value"]
        assert len(df[df["metric"] == "weight"]) == 3
