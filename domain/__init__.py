"""
Domain layer for the guided session engine.

This package contains pure domain models that are independent of
infrastructure concerns (storage, plan providers, UI).

Part of HYG-14: Guided session engine domain model
"""

from domain.models import (
    AthleteProfile,
    CompletedSession,
    Exercise,
    PerformanceMetric,
    PersonalRecord,
    PhaseExercise,
    PlannedSession,
    WorkoutPlan,
)

__all__ = [
    "AthleteProfile",
    "CompletedSession",
    "Exercise",
    "PerformanceMetric",
    "PersonalRecord",
    "PhaseExercise",
    "PlannedSession",
    "WorkoutPlan",
]
