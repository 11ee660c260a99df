"""
Tests for core/timeseries.py — series building, ordering and BMI recomputation.
"""

import os
import sys
from datetime import datetime

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.models import Assessment, AssessmentHistoryRecord, Student
from core.timeseries import (
    UNDATED,
    build_bmi_series,
    build_time_series,
    compute_bmi,
    reference_time_for,
    resolve_height,
)


def _history(date, version=1, **metrics):
    return AssessmentHistoryRecord(assessment_id="a1", version=version, assessment_date=date, **metrics)


@pytest.fixture
def current():
    return Assessment(
        id="a1",
        assessment_date=datetime(2024, 3, 1),
        current_weight=80.0,
        current_height=180.0,
        body_fat_percentage=20.0,
    )


class TestBuildTimeSeries:
    """Series of one stored field across history and the current assessment."""

    def test_history_sorted_ascending_and_current_last(self, current):
        history = [
            _history(datetime(2024, 2, 1), version=2, current_weight=82.0),
            _history(datetime(2024, 1, 1), version=1, current_weight=85.0),
        ]
        series = build_time_series("current_weight", current, history)
        assert [p.value for p in series] == [85.0, 82.0, 80.0]
        assert [p.timestamp for p in series] == [
            datetime(2024, 1, 1), datetime(2024, 2, 1), datetime(2024, 3, 1),
        ]

    def test_same_date_ordered_by_version(self, current):
        history = [
            _history(datetime(2024, 2, 1), version=3, current_weight=81.0),
            _history(datetime(2024, 2, 1), version=2, current_weight=83.0),
        ]
        series = build_time_series("current_weight", current, history)
        assert [p.value for p in series] == [83.0, 81.0, 80.0]

    def test_zero_and_missing_history_values_skipped(self, current):
        history = [
            _history(datetime(2024, 1, 1), current_weight=0.0),
            _history(datetime(2024, 1, 15), current_weight=None),
            _history(datetime(2024, 2, 1), current_weight=84.0),
        ]
        series = build_time_series("current_weight", current, history)
        assert [p.value for p in series] == [84.0, 80.0]

    def test_non_numeric_history_values_skipped(self, current):
        record = AssessmentHistoryRecord.from_dict({
            "assessmentDate": "2024-02-01T00:00:00",
            "currentWeight": "abc",
        })
        series = build_time_series("current_weight", current, [record])
        assert [p.value for p in series] == [80.0]

    def test_current_zero_is_kept(self, current):
        current.waist_circ = 0.0
        series = build_time_series("waist_circ", current, [_history(datetime(2024, 1, 1), waist_circ=90.0)])
        assert [p.value for p in series] == [90.0, 0.0]

    def test_missing_current_value_not_appended(self, current):
        series = build_time_series("hip_circ", current, [_history(datetime(2024, 1, 1), hip_circ=100.0)])
        assert [p.value for p in series] == [100.0]

    def test_history_after_current_date_excluded(self, current):
        history = [
            _history(datetime(2024, 2, 1), current_weight=82.0),
            _history(datetime(2024, 4, 1), current_weight=78.0),
        ]
        series = build_time_series("current_weight", current, history)
        assert [p.value for p in series] == [82.0, 80.0]

    def test_undated_records_take_reference_time(self):
        current = Assessment(current_weight=70.0)
        ref = datetime(2024, 5, 5)
        series = build_time_series("current_weight", current, [_history(None, current_weight=72.0)], ref)
        assert [p.timestamp for p in series] == [ref, ref]

    def test_only_current(self, current):
        series = build_time_series("body_fat_percentage", current, [])
        assert len(series) == 1
        assert series[0].value == 20.0
        assert series[0].to_dict() == {"date": "2024-03-01T00:00:00", "value": 20.0}


class TestBmi:
    """BMI recomputed from weights under a single height."""

    def test_compute_bmi(self):
        assert compute_bmi(81.0, 180.0) == pytest.approx(25.0)
        assert compute_bmi(None, 180.0) == 0.0
        assert compute_bmi(80.0, 0.0) == 0.0

    def test_height_prefers_assessment(self, current):
        assert resolve_height(current, Student(height=170.0)) == 180.0
        current.current_height = None
        assert resolve_height(current, Student(height=170.0)) == 170.0
        assert resolve_height(current, Student()) == 0.0

    def test_history_uses_current_height(self, current):
        # Archived heights are ignored; every point uses 180 cm.
        history = [_history(datetime(2024, 1, 1), current_weight=90.0, current_height=170.0)]
        series = build_bmi_series(current, Student(), history)
        assert [round(p.value, 2) for p in series] == [
            round(90.0 / 1.8 ** 2, 2), round(80.0 / 1.8 ** 2, 2),
        ]

    def test_profile_height_fallback(self, current):
        current.current_height = None
        series = build_bmi_series(current, Student(height=160.0), [])
        assert series[0].value == pytest.approx(80.0 / 1.6 ** 2)

    def test_missing_height_gives_empty_series(self, current):
        current.current_height = None
        history = [_history(datetime(2024, 1, 1), current_weight=90.0)]
        assert build_bmi_series(current, Student(), history) == []


class TestReferenceTime:
    """Anchor date for undated records."""

    def test_current_date_wins(self, current):
        history = [_history(datetime(2024, 5, 1), current_weight=70.0)]
        assert reference_time_for(current, history) == datetime(2024, 3, 1)

    def test_latest_history_date_when_current_undated(self):
        history = [
            _history(datetime(2024, 1, 1), current_weight=82.0),
            _history(None, current_weight=81.0),
            _history(datetime(2024, 2, 1), current_weight=81.0),
        ]
        assert reference_time_for(Assessment(current_weight=80.0), history) == datetime(2024, 2, 1)

    def test_fixed_anchor_when_nothing_dated(self):
        current = Assessment(current_weight=80.0)
        assert reference_time_for(current, [_history(None, current_weight=82.0)]) == UNDATED
        series = build_time_series("current_weight", current, [])
        assert series[0].timestamp == UNDATED
