"""
Domain models for the guided session engine.

This package contains pure domain models that are independent of
infrastructure concerns (storage, plan providers, UI).

These models represent the core business concepts:
- WorkoutPlan: warm-up, main exercises and cool-down of one session
- Exercise / PhaseExercise: main-set and time-boxed items
- PerformanceMetric: the result of one completed set
- PersonalRecord: best known weight/reps pair for an exercise
- AthleteProfile: what the engine reads and writes back on archive
- SessionRecord: tagged union of PlannedSession | CompletedSession

Part of HYG-14: Guided session engine domain model

Usage:
    >>> from domain.models import WorkoutPlan, Exercise, PhaseExercise

    >>> plan = WorkoutPlan(
    ...     warmup=[PhaseExercise(name="Jog", duration_seconds=60)],
    ...     exercises=[Exercise(name="Squat", sets=3, reps="8-10", rest_seconds=90)],
    ...     cooldown=[PhaseExercise(name="Hamstring stretch", duration_seconds=30)],
    ... )

    >>> json_str = plan.model_dump_json(indent=2)
    >>> plan = WorkoutPlan.model_validate_json(json_str)
"""

from domain.models.performance import PerformanceMetric, PersonalRecord
from domain.models.plan import Exercise, PhaseExercise, PlanStructure, WorkoutPlan
from domain.models.profile import (
    ActiveGoal,
    AthleteProfile,
    ExperienceLevel,
    GoalProgressAnalysis,
    GoalProgressEntry,
    VolumePoint,
    parse_experience,
)
from domain.models.session_record import (
    CompletedSession,
    ExerciseResult,
    PlannedSession,
    SessionRecord,
)

__all__ = [
    # Plan
    "WorkoutPlan",
    "Exercise",
    "PhaseExercise",
    "PlanStructure",
    # Performance
    "PerformanceMetric",
    "PersonalRecord",
    # Profile
    "AthleteProfile",
    "ExperienceLevel",
    "ActiveGoal",
    "GoalProgressEntry",
    "GoalProgressAnalysis",
    "VolumePoint",
    "parse_experience",
    # History
    "SessionRecord",
    "PlannedSession",
    "CompletedSession",
    "ExerciseResult",
]
