"""
models.py — Assessment, history and student records.

Records arrive as JSON from the store or the HTTP layer, either with the
camelCase keys the trainer app uses (``currentWeight``, ``assessmentDate``)
or with snake_case keys. Numeric fields are coerced permissively: strings,
NaN, inf and garbage all end up as either a float or ``None``.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd


# Metric fields carried by both assessments and history records.
METRIC_FIELDS = (
    "current_weight",
    "current_height",
    "body_fat_percentage",
    "lean_mass",
    "waist_circ",
    "hip_circ",
    "resting_heart_rate",
)

FIELD_ALIASES = {
    "id": ["id"],
    "student_id": ["student_id", "studentId"],
    "personal_trainer_id": ["personal_trainer_id", "personalTrainerId"],
    "assessment_id": ["assessment_id", "assessmentId"],
    "assessment_date": ["assessment_date", "assessmentDate", "date"],
    "created_at": ["created_at", "createdAt"],
    "version": ["version", "versionNumber"],
    "current_weight": ["current_weight", "currentWeight", "weight"],
    "current_height": ["current_height", "currentHeight", "height"],
    "body_fat_percentage": ["body_fat_percentage", "bodyFatPercentage", "body_fat"],
    "lean_mass": ["lean_mass", "leanMass", "muscle_mass"],
    "waist_circ": ["waist_circ", "waistCirc"],
    "hip_circ": ["hip_circ", "hipCirc"],
    "resting_heart_rate": ["resting_heart_rate", "restingHeartRate", "resting_hr"],
    "name": ["name"],
    "goal": ["goal"],
}


# ── Helpers ─────────────────────────────────────────────────────────

def _safe_float(val: Any) -> Optional[float]:
    if val is None or isinstance(val, bool):
        return None
    try:
        v = float(val)
    except (TypeError, ValueError):
        return None
    if np.isnan(v) or np.isinf(v):
        return None
    return v


def _parse_datetime(val: Any) -> Optional[datetime]:
    """Parse ISO strings / datetimes into naive UTC datetimes."""
    if val is None or val == "":
        return None
    try:
        ts = pd.Timestamp(val)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def _pick(data: Dict[str, Any], name: str) -> Any:
    for alias in FIELD_ALIASES.get(name, [name]):
        if alias in data:
            return data[alias]
    return None


def _metric_values(data: Dict[str, Any]) -> Dict[str, Optional[float]]:
    return {name: _safe_float(_pick(data, name)) for name in METRIC_FIELDS}


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


# ── Records ─────────────────────────────────────────────────────────

@dataclass
class Assessment:
    """A point-in-time physical evaluation of a student."""

    id: Optional[str] = None
    student_id: Optional[str] = None
    personal_trainer_id: Optional[str] = None
    assessment_date: Optional[datetime] = None

    current_weight: Optional[float] = None  # kg
    current_height: Optional[float] = None  # cm
    body_fat_percentage: Optional[float] = None
    lean_mass: Optional[float] = None
    waist_circ: Optional[float] = None  # cm
    hip_circ: Optional[float] = None  # cm
    resting_heart_rate: Optional[float] = None  # bpm

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assessment":
        def _opt_str(v):
            return None if v is None else str(v)

        return cls(
            id=_opt_str(_pick(data, "id")),
            student_id=_opt_str(_pick(data, "student_id")),
            personal_trainer_id=_opt_str(_pick(data, "personal_trainer_id")),
            assessment_date=_parse_datetime(_pick(data, "assessment_date")),
            **_metric_values(data),
        )

    def metric_snapshot(self) -> Dict[str, Optional[float]]:
        return {name: getattr(self, name) for name in METRIC_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}


@dataclass
class AssessmentHistoryRecord:
    """Archived state of an assessment, written before each update."""

    assessment_id: Optional[str] = None
    version: int = 1
    assessment_date: Optional[datetime] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    current_weight: Optional[float] = None
    current_height: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    lean_mass: Optional[float] = None
    waist_circ: Optional[float] = None
    hip_circ: Optional[float] = None
    resting_heart_rate: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssessmentHistoryRecord":
        version = _safe_float(_pick(data, "version"))
        record_id = _pick(data, "id")
        assessment_id = _pick(data, "assessment_id")
        return cls(
            id=None if record_id is None else str(record_id),
            assessment_id=None if assessment_id is None else str(assessment_id),
            version=int(version) if version is not None else 1,
            assessment_date=_parse_datetime(_pick(data, "assessment_date")),
            created_at=_parse_datetime(_pick(data, "created_at")),
            **_metric_values(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}


@dataclass
class Student:
    name: str = ""
    goal: Optional[str] = None
    height: Optional[float] = None  # cm, profile value
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Student":
        goal = _pick(data, "goal")
        student_id = _pick(data, "id")
        return cls(
            id=None if student_id is None else str(student_id),
            name=str(_pick(data, "name") or ""),
            goal=None if goal is None else str(goal),
            height=_safe_float(data.get("height")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "goal": self.goal, "height": self.height}


def parse_analysis_payload(
    payload: Dict[str, Any],
) -> Tuple[Assessment, Student, List[AssessmentHistoryRecord]]:
    """
    Split an analysis request body into typed records.

    Expected shape: ``{"assessment": {...}, "student": {...}, "history": [...]}``.
    Raises ValueError when the required parts are missing or mistyped.
    """
    if not isinstance(payload, dict):
        raise ValueError("Payload must be a JSON object.")

    assessment_data = payload.get("assessment")
    student_data = payload.get("student")
    history_data = payload.get("history") or []

    if not isinstance(assessment_data, dict):
        raise ValueError("Provide 'assessment' as an object.")
    if not isinstance(student_data, dict):
        raise ValueError("Provide 'student' as an object.")
    if not isinstance(history_data, list) or not all(isinstance(h, dict) for h in history_data):
        raise ValueError("'history' must be a list of objects.")

    return (
        Assessment.from_dict(assessment_data),
        Student.from_dict(student_data),
        [AssessmentHistoryRecord.from_dict(h) for h in history_data],
    )
