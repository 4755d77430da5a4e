"""
Unit tests for the Performance Recorder.

Part of HYG-17: Session metrics and archive record
"""
from datetime import date

import pytest
from pydantic import ValidationError

from backend.core.performance_recorder import (
    PerformanceRecorder,
    build_completed_session,
    compute_streaks,
)
from domain.models import CompletedSession, Exercise, PerformanceMetric, PlannedSession, WorkoutPlan
from tests.fakes import create_profile

pytestmark = pytest.mark.unit


def three_set_recorder() -> PerformanceRecorder:
    recorder = PerformanceRecorder()
    for weight, reps in [(60, 5), (62.5, 5), (65, 4)]:
        recorder = recorder.record_set("Squat", weight, reps, 30, 90)
    return recorder


class TestRecordSet:
    """Tests for per-set recording."""

    def test_record_set_returns_new_recorder(self):
        empty = PerformanceRecorder()
        recorder = empty.record_set("Squat", 60, 5, 30, 90)
        assert empty.set_count == 0
        assert recorder.set_count == 1
        metric = recorder.last_metric
        assert metric.exercise_name == "Squat"
        assert metric.volume == 300
        assert metric.effort_seconds == 30
        assert metric.rest_seconds == 90

    def test_three_sets_give_three_metrics(self):
        recorder = three_set_recorder()
        assert recorder.set_count == 3
        assert len(recorder.metrics_for("Squat")) == 3
        assert recorder.metrics_for("Bench Press") == []

    def test_tonnage_matches_sum_of_volumes(self):
        recorder = three_set_recorder()
        expected = 60 * 5 + 62.5 * 5 + 65 * 4
        assert recorder.session_tonnage() == pytest.approx(expected)
        assert recorder.session_tonnage() == recorder.recomputed_tonnage()

    def test_negative_effort_clamped(self):
        recorder = PerformanceRecorder().record_set("Squat", 60, 5, -3, 90)
        assert recorder.last_metric.effort_seconds == 0

    def test_total_effort(self):
        assert three_set_recorder().total_effort_seconds() == 90

    def test_best_sets_by_volume(self):
        best = three_set_recorder().best_sets()
        assert best["Squat"].weight == 62.5

    def test_empty_recorder(self):
        recorder = PerformanceRecorder()
        assert recorder.last_metric is None
        assert recorder.session_tonnage() == 0
        assert recorder.best_sets() == {}


class TestPerformanceMetric:
    """Tests for the metric value object."""

    def test_volume_derived(self):
        metric = PerformanceMetric(exercise_name="Row", weight=40, reps=10)
        assert metric.volume == 400

    def test_inconsistent_volume_rejected(self):
        with pytest.raises(ValidationError):
            PerformanceMetric(exercise_name="Row", weight=40, reps=10, volume=100)

    def test_metric_is_frozen(self):
        metric = PerformanceMetric(exercise_name="Row", weight=40, reps=10)
        with pytest.raises(ValidationError):
            metric.reps = 12


class TestBuildCompletedSession:
    """Tests for folding metrics into a history record."""

    def test_completed_session_fields(self):
        plan = WorkoutPlan(exercises=[
            Exercise(name="Squat", sets=3, reps="5"),
            Exercise(name="Plank", sets=2, reps="Max"),
        ])
        session = build_completed_session(
            three_set_recorder(),
            plan,
            date="2024-05-01T10:00:00+00:00",
            mood="On track",
            debrief="Good\nMore sets",
            focus="legs",
            goal_value_at_session=42.5,
        )
        assert session.kind == "completed"
        assert session.set_count == 3
        assert session.tonnage == pytest.approx(872.5)
        assert session.effort_seconds == 90
        assert len(session.metrics) == 3
        assert session.mood == "On track"
        assert session.goal_value_at_session == 42.5

        squat, plank = session.exercises
        assert (squat.performed_weight, squat.performed_reps) == (62.5, 5)
        assert plank.performed_weight is None

    def test_without_plan(self):
        session = build_completed_session(PerformanceRecorder(), None, date="2024-05-01")
        assert session.exercises == []
        assert session.tonnage == 0


class TestComputeStreaks:
    """Tests for the day streak counters updated on archive."""

    TODAY = date(2024, 5, 10)

    def profile_with_last(self, record, current=0, longest=0):
        return create_profile(session_records=[record], current_streak=current, longest_streak=longest)

    def test_first_session_starts_streak(self):
        assert compute_streaks(create_profile(), self.TODAY) == (1, 1)

    @pytest.mark.parametrize("last_date", ["2024-05-09T18:30:00+00:00", "2024-05-10"])
    def test_continues_after_yesterday_or_today(self, last_date):
        profile = self.profile_with_last(CompletedSession(date=last_date), current=2, longest=2)
        assert compute_streaks(profile, self.TODAY) == (3, 3)

    def test_gap_resets_and_keeps_longest(self):
        profile = self.profile_with_last(CompletedSession(date="2024-05-07"), current=6, longest=8)
        assert compute_streaks(profile, self.TODAY) == (1, 8)

    def test_planned_record_counts_as_last_session(self):
        profile = self.profile_with_last(PlannedSession(id="p1", date="2024-05-09"), current=1, longest=1)
        assert compute_streaks(profile, self.TODAY) == (2, 2)

    def test_unreadable_date_breaks_streak(self):
        profile = self.profile_with_last(CompletedSession(date="09/05/2024"), current=4, longest=4)
        assert compute_streaks(profile, self.TODAY) == (1, 4)
