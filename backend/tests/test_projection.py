"""
Tests for core/projection.py — linear projection at 4/8/12 weeks.
"""

import os
import sys
from datetime import datetime, timedelta

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.projection import Projection, project_series
from core.timeseries import SeriesPoint

START = datetime(2024, 1, 1)


def _points(*pairs):
    """(days after START, value) pairs → series points."""
    return [SeriesPoint(START + timedelta(days=d), v) for d, v in pairs]


class TestProjectSeries:
    """Regression, degenerate series and output shape."""

    def test_empty_series_projects_zero(self):
        assert project_series([]) == Projection(0.0, 0.0, 0.0)

    def test_single_point_is_flat(self):
        assert project_series(_points((0, 70.0))) == Projection(70.0, 70.0, 70.0)

    def test_two_points_one_week_apart(self):
        # +1 per week, projected from the last observation.
        proj = project_series(_points((0, 70.0), (7, 71.0)))
        assert proj.weeks_4 == pytest.approx(75.0)
        assert proj.weeks_8 == pytest.approx(79.0)
        assert proj.weeks_12 == pytest.approx(83.0)

    def test_decreasing_collinear_series(self):
        proj = project_series(_points((0, 30.0), (14, 29.0), (28, 28.0)))
        assert proj.weeks_4 == pytest.approx(26.0)
        assert proj.weeks_8 == pytest.approx(24.0)
        assert proj.weeks_12 == pytest.approx(22.0)

    def test_identical_timestamps_fall_back_to_last_value(self):
        proj = project_series(_points((0, 70.0), (0, 72.0), (0, 74.0)))
        assert proj == Projection.flat(74.0)

    def test_constant_series_stays_constant(self):
        proj = project_series(_points((0, 90.0), (30, 90.0), (60, 90.0)))
        assert proj.weeks_12 == pytest.approx(90.0)

    def test_to_dict_keys(self):
        assert project_series(_points((0, 70.0))).to_dict() == {
            "projection_4_weeks": 70.0,
            "projection_8_weeks": 70.0,
            "projection_12_weeks": 70.0,
        }
