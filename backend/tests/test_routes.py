"""
Tests for the HTTP layer — assessment CRUD, analysis and report endpoints.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import main
from routes import analyze as analyze_routes

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake"


class StubRenderer:
    def render_line_chart(self, series, title, color):
        return FAKE_PNG

    def render_doughnut(self, labels, values):
        return FAKE_PNG

    def render_bar_comparison(self, labels, current_values, previous_values):
        return FAKE_PNG


class FailingRenderer:
    def render_line_chart(self, series, title, color):
        raise RuntimeError("offline")

    def render_doughnut(self, labels, values):
        raise RuntimeError("offline")

    def render_bar_comparison(self, labels, current_values, previous_values):
        raise RuntimeError("offline")


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(analyze_routes, "chart_renderer", StubRenderer())
    return TestClient(main.app)


@pytest.fixture
def inline_payload():
    return {
        "assessment": {
            "assessmentDate": "2024-03-01T10:00:00",
            "currentWeight": 90.0,
            "currentHeight": 180.0,
            "bodyFatPercentage": 30.0,
            "leanMass": 28.0,
        },
        "student": {"name": "Pedro", "goal": "Emagrecer"},
        "history": [
            {"version": 1, "assessmentDate": "2024-02-01T10:00:00",
             "currentWeight": 93.0, "bodyFatPercentage": 31.0, "leanMass": 28.5},
        ],
    }


class TestMeta:

    def test_health(self, client):
        res = client.get("/api/health")
        assert res.status_code == 200
        assert res.json()["status"] == "ok"

    def test_config(self, client):
        body = client.get("/api/config").json()
        assert body["tracked_metrics"][0] == "weight"
        assert "bmi" in body["tracked_metrics"]


class TestAssessmentRoutes:
    """Create → update → history → analyze → delete."""

    def test_full_lifecycle(self, client):
        student = client.post("/api/students", json={"name": "Lia", "goal": "ganhar massa muscular", "height": 165})
        assert student.status_code == 200
        student_id = student.json()["id"]

        created = client.post("/api/assessments", json={
            "studentId": student_id,
            "assessmentDate": "2024-01-10T08:00:00",
            "currentWeight": 58.0,
            "leanMass": 30.0,
        })
        assert created.status_code == 200
        assessment_id = created.json()["id"]

        updated = client.put(f"/api/assessments/{assessment_id}", json={
            "assessmentDate": "2024-02-10T08:00:00",
            "currentWeight": 59.0,
            "leanMass": 28.0,
        })
        assert updated.json()["lean_mass"] == 28.0

        history = client.get(f"/api/assessments/{assessment_id}/history").json()
        assert [h["version"] for h in history] == [1]
        assert history[0]["lean_mass"] == 30.0

        analysis = client.post(f"/api/analysis/assessments/{assessment_id}?include_charts=false").json()
        assert "charts" not in analysis
        assert analysis["assessment_info"]["days_since_previous"] == 31
        assert analysis["metrics"]["muscle_mass"]["trend"] == "worsening"
        assert analysis["metrics"]["weight"]["trend"] == "improving"

        assert client.delete(f"/api/assessments/{assessment_id}").status_code == 204
        assert client.get(f"/api/assessments/{assessment_id}").status_code == 404
        assert client.get(f"/api/assessments/{assessment_id}/history").status_code == 404

    def test_student_requires_name(self, client):
        assert client.post("/api/students", json={"goal": "x"}).status_code == 400

    def test_assessment_requires_known_student(self, client):
        res = client.post("/api/assessments", json={"studentId": "nobody", "currentWeight": 70})
        assert res.status_code == 400

    def test_unknown_assessment(self, client):
        assert client.get("/api/assessments/missing").status_code == 404
        assert client.put("/api/assessments/missing", json={"currentWeight": 1}).status_code == 404
        assert client.post("/api/analysis/assessments/missing").status_code == 404


class TestAnalysisRoutes:

    def test_inline_analysis(self, client, inline_payload):
        res = client.post("/api/analysis", json=inline_payload)
        assert res.status_code == 200
        body = res.json()
        assert body["metrics"]["weight"]["trend"] == "improving"
        assert body["metrics"]["body_fat"]["trend"] == "improving"
        assert len(body["charts"]) == 4

    def test_inline_analysis_rejects_bad_payload(self, client):
        res = client.post("/api/analysis", json={"student": {"name": "x"}})
        assert res.status_code == 400

    def test_ai_summary(self, client, inline_payload, monkeypatch):
        monkeypatch.setenv("AI_ENABLED", "false")
        body = client.post("/api/analysis/ai/summary", json=inline_payload).json()
        assert body["mode"] == "deterministic"


class TestReportRoutes:

    def test_progress_pdf(self, client, inline_payload, monkeypatch):
        # Placeholder charts are left out of the PDF.
        monkeypatch.setattr(analyze_routes, "chart_renderer", FailingRenderer())
        res = client.post("/api/reports/progress-pdf", json=inline_payload)
        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert res.content[:5] == b"%PDF-"

    def test_excel(self, client, inline_payload):
        res = client.post("/api/reports/excel", json=inline_payload)
        assert res.status_code == 200
        assert res.content[:2] == b"PK"
