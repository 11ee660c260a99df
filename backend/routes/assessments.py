"""
Assessment routes — students, assessments and their version history.
"""

from fastapi import APIRouter, HTTPException

from core.models import Assessment, Student
from core.store import InMemoryAssessmentStore

router = APIRouter()

# In-memory store: assessment_id → assessment + archived versions
store = InMemoryAssessmentStore()


def _require_object(payload) -> dict:
    if not isinstance(payload, dict) or not payload:
        raise HTTPException(400, "No data provided.")
    return payload


@router.post("/students")
async def create_student(payload: dict):
    """Register a student (name, goal, profile height/weight)."""
    data = _require_object(payload)
    if not data.get("name"):
        raise HTTPException(400, "Provide 'name'.")
    return store.add_student(Student.from_dict(data)).to_dict()


@router.get("/students/{student_id}")
async def get_student(student_id: str):
    student = store.get_student(student_id)
    if student is None:
        raise HTTPException(404, f"Student '{student_id}' not found.")
    return student.to_dict()


@router.post("/assessments")
async def create_assessment(payload: dict):
    """Create a physical assessment for a registered student."""
    data = _require_object(payload)
    assessment = Assessment.from_dict(data)
    if not assessment.student_id or store.get_student(assessment.student_id) is None:
        raise HTTPException(400, "Provide the 'student_id' of a registered student.")
    return store.create_assessment(assessment).to_dict()


@router.get("/assessments/{assessment_id}")
async def get_assessment(assessment_id: str):
    assessment = store.get_assessment(assessment_id)
    if assessment is None:
        raise HTTPException(404, f"Assessment '{assessment_id}' not found.")
    return assessment.to_dict()


@router.put("/assessments/{assessment_id}")
async def update_assessment(assessment_id: str, payload: dict):
    """Update an assessment; the previous state is archived as a new version."""
    data = _require_object(payload)
    updated = store.update_assessment(assessment_id, data)
    if updated is None:
        raise HTTPException(404, f"Assessment '{assessment_id}' not found.")
    return updated.to_dict()


@router.delete("/assessments/{assessment_id}", status_code=204)
async def delete_assessment(assessment_id: str):
    """Delete an assessment together with its history."""
    if not store.delete_assessment(assessment_id):
        raise HTTPException(404, f"Assessment '{assessment_id}' not found.")


@router.get("/assessments/{assessment_id}/history")
async def assessment_history(assessment_id: str):
    """Archived versions of an assessment, oldest first."""
    if store.get_assessment(assessment_id) is None:
        raise HTTPException(404, f"Assessment '{assessment_id}' not found.")
    return [h.to_dict() for h in store.get_history(assessment_id)]
