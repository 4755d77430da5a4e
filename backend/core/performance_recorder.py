"""
Performance Recorder for guided sessions.

Part of HYG-17: Session metrics and archive record

Accumulates per-set results into session totals. The recorder is an
immutable value: `record_set` returns a new recorder, so it can live inside
the session state handled by the reducer.
"""
import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from domain.models import (
    AthleteProfile,
    CompletedSession,
    ExerciseResult,
    PerformanceMetric,
    WorkoutPlan,
)


@dataclass(frozen=True)
class PerformanceRecorder:
    """
    In-memory metric list of the running session.

    `tonnage` is the running sum of set volumes, added in recording order so
    it always equals `recomputed_tonnage()`.
    """

    metrics: Tuple[PerformanceMetric, ...] = field(default_factory=tuple)
    tonnage: float = 0.0

    def record_set(
        self,
        exercise_name: str,
        weight: float,
        reps: int,
        effort_seconds: int,
        rest_seconds: int,
    ) -> "PerformanceRecorder":
        """
        Record one completed set.

        Args:
            exercise_name: Exercise performed
            weight: Weight used
            reps: Reps performed
            effort_seconds: Time under effort
            rest_seconds: Rest prescribed after the set

        Returns:
            A new recorder including the set
        """
        metric = PerformanceMetric(
            exercise_name=exercise_name,
            volume=weight * reps,
            effort_seconds=max(0, int(effort_seconds)),
            rest_seconds=max(0, int(rest_seconds)),
            weight=weight,
            reps=reps,
        )
        return PerformanceRecorder(
            metrics=(*self.metrics, metric),
            tonnage=self.tonnage + metric.volume,
        )

    def session_tonnage(self) -> float:
        return self.tonnage

    def recomputed_tonnage(self) -> float:
        """Tonnage summed again from the metric list."""
        return sum(m.volume for m in self.metrics)

    @property
    def set_count(self) -> int:
        return len(self.metrics)

    @property
    def last_metric(self) -> Optional[PerformanceMetric]:
        return self.metrics[-1] if self.metrics else None

    def total_effort_seconds(self) -> int:
        return sum(m.effort_seconds for m in self.metrics)

    def metrics_for(self, exercise_name: str) -> List[PerformanceMetric]:
        return [m for m in self.metrics if m.exercise_name == exercise_name]

    def best_sets(self) -> Dict[str, PerformanceMetric]:
        """Highest-volume set per exercise name (first one wins on ties)."""
        best: Dict[str, PerformanceMetric] = {}
        for metric in self.metrics:
            current = best.get(metric.exercise_name)
            if current is None or metric.volume > current.volume:
                best[metric.exercise_name] = metric
        return best


def build_completed_session(
    recorder: PerformanceRecorder,
    plan: Optional[WorkoutPlan],
    *,
    date: str,
    mood: str = "",
    debrief: str = "",
    focus: Optional[str] = None,
    goal_value_at_session: Optional[float] = None,
) -> CompletedSession:
    """
    Fold the session metrics into a permanent history record.

    Each plan exercise is stored with its best performed set so later
    sessions can find it when looking up reference performances.
    """
    best = recorder.best_sets()
    results = []
    for exercise in plan.exercises if plan else []:
        top_set = best.get(exercise.name)
        results.append(ExerciseResult(
            name=exercise.name,
            sets=exercise.sets,
            reps=exercise.reps,
            performed_weight=top_set.weight if top_set else None,
            performed_reps=top_set.reps if top_set else None,
        ))

    return CompletedSession(
        date=date,
        exercises=results,
        metrics=list(recorder.metrics),
        tonnage=recorder.session_tonnage(),
        set_count=recorder.set_count,
        effort_seconds=recorder.total_effort_seconds(),
        mood=mood,
        debrief=debrief,
        focus=focus,
        goal_value_at_session=goal_value_at_session,
    )


def _record_day(record_date: str) -> Optional[datetime.date]:
    try:
        return datetime.date.fromisoformat(record_date[:10])
    except (TypeError, ValueError):
        return None


def compute_streaks(profile: AthleteProfile, today: datetime.date) -> Tuple[int, int]:
    """
    Streak counters after a session archived on `today`.

    The streak continues when the last history record is from today or
    yesterday, otherwise it restarts at 1. A record whose date cannot be
    read counts as a break.

    Returns:
        (current_streak, longest_streak)
    """
    last_day = _record_day(profile.session_records[-1].date) if profile.session_records else None

    if last_day is not None and (today - last_day).days in (0, 1):
        current = profile.current_streak + 1
    else:
        current = 1

    return current, max(profile.longest_streak, current)
