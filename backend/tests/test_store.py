"""
Tests for core/store.py — versioned history on update, cascade on delete.
"""

import os
import sys
from datetime import datetime

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.models import Assessment, Student
from core.store import InMemoryAssessmentStore


@pytest.fixture
def store():
    return InMemoryAssessmentStore()


@pytest.fixture
def assessment(store):
    student = store.add_student(Student(name="Ana", goal="Emagrecer"))
    return store.create_assessment(Assessment(
        student_id=student.id,
        assessment_date=datetime(2024, 1, 1),
        current_weight=80.0,
        body_fat_percentage=25.0,
    ))


class TestStore:

    def test_ids_assigned(self, store, assessment):
        assert assessment.id
        assert store.get_student(assessment.student_id).name == "Ana"

    def test_create_without_date_is_dated_now(self, store):
        created = store.create_assessment(Assessment(current_weight=70.0))
        assert created.assessment_date is not None

    def test_update_archives_previous_state(self, store, assessment):
        store.update_assessment(assessment.id, {"currentWeight": 78.0, "assessmentDate": "2024-02-01"})
        history = store.get_history(assessment.id)
        assert len(history) == 1
        assert history[0].version == 1
        assert history[0].current_weight == 80.0
        assert history[0].assessment_date == datetime(2024, 1, 1)

        updated = store.get_assessment(assessment.id)
        assert updated.current_weight == 78.0
        assert updated.body_fat_percentage == 25.0
        assert updated.assessment_date == datetime(2024, 2, 1)

    def test_versions_increment(self, store, assessment):
        store.update_assessment(assessment.id, {"current_weight": 79.0, "assessment_date": "2024-02-01"})
        store.update_assessment(assessment.id, {"current_weight": 78.0, "assessment_date": "2024-03-01"})
        history = store.get_history(assessment.id)
        assert [h.version for h in history] == [1, 2]
        assert [h.current_weight for h in history] == [80.0, 79.0]

    def test_update_unknown_assessment(self, store):
        assert store.update_assessment("missing", {"currentWeight": 1}) is None

    def test_history_is_a_copy(self, store, assessment):
        store.get_history(assessment.id).append("junk")
        assert store.get_history(assessment.id) == []

    def test_delete_cascades(self, store, assessment):
        store.update_assessment(assessment.id, {"currentWeight": 78.0})
        assert store.delete_assessment(assessment.id) is True
        assert store.get_assessment(assessment.id) is None
        assert store.get_history(assessment.id) == []
        assert store.delete_assessment(assessment.id) is False
