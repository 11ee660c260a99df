"""
store.py — Assessment storage.

``AssessmentStore`` is the contract the analysis side relies on. The
in-memory implementation also covers the write path: every update archives
the assessment's previous state as a new history version before applying the
change, and deleting an assessment removes its history with it.
"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from core.models import METRIC_FIELDS, Assessment, AssessmentHistoryRecord, Student


class AssessmentStore(Protocol):
    def get_assessment(self, assessment_id: str) -> Optional[Assessment]: ...

    def get_history(self, assessment_id: str) -> List[AssessmentHistoryRecord]: ...


class InMemoryAssessmentStore:
    """Process-local store: assessment_id → assessment / history versions."""

    def __init__(self):
        self.students: Dict[str, Student] = {}
        self.assessments: Dict[str, Assessment] = {}
        self.history: Dict[str, List[AssessmentHistoryRecord]] = {}

    # ── Students ────────────────────────────────────────────────────

    def add_student(self, student: Student) -> Student:
        if not student.id:
            student = replace(student, id=str(uuid.uuid4()))
        self.students[student.id] = student
        return student

    def get_student(self, student_id: str) -> Optional[Student]:
        return self.students.get(student_id)

    # ── Assessments ─────────────────────────────────────────────────

    def create_assessment(self, assessment: Assessment) -> Assessment:
        if not assessment.id:
            assessment = replace(assessment, id=str(uuid.uuid4()))
        if assessment.assessment_date is None:
            assessment = replace(assessment, assessment_date=datetime.now())
        self.assessments[assessment.id] = assessment
        self.history.setdefault(assessment.id, [])
        return assessment

    def get_assessment(self, assessment_id: str) -> Optional[Assessment]:
        return self.assessments.get(assessment_id)

    def update_assessment(self, assessment_id: str, changes: Dict[str, Any]) -> Optional[Assessment]:
        """
        Apply ``changes`` (camelCase or snake_case keys) to an assessment.

        The state before the update is archived first, with the next version
        number and the assessment date it was valid for.
        """
        existing = self.assessments.get(assessment_id)
        if existing is None:
            return None

        versions = self.history.setdefault(assessment_id, [])
        versions.append(AssessmentHistoryRecord(
            id=str(uuid.uuid4()),
            assessment_id=assessment_id,
            version=len(versions) + 1,
            assessment_date=existing.assessment_date,
            created_at=datetime.now(),
            **existing.metric_snapshot(),
        ))

        parsed = Assessment.from_dict(changes)
        updates: Dict[str, Any] = {
            name: getattr(parsed, name)
            for name in METRIC_FIELDS
            if getattr(parsed, name) is not None
        }
        # An update is a new measurement; it is dated now unless told otherwise.
        updates["assessment_date"] = parsed.assessment_date or datetime.now()

        updated = replace(existing, **updates)
        self.assessments[assessment_id] = updated
        return updated

    def delete_assessment(self, assessment_id: str) -> bool:
        if assessment_id not in self.assessments:
            return False
        del self.assessments[assessment_id]
        self.history.pop(assessment_id, None)
        return True

    def get_history(self, assessment_id: str) -> List[AssessmentHistoryRecord]:
        return list(self.history.get(assessment_id, []))
