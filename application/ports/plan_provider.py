"""
Plan Provider Interface (Port).

Part of HYG-15: Session engine ports

The plan provider supplies exercise content and qualitative analysis to the
session engine. Every method is asynchronous and may fail; the engine never
calls it directly but through GuardedPlanProvider
(backend/core/plan_fallbacks.py), which applies one documented fallback per
method:

- generate_plan             -> built-in default plan
- substitute_exercise       -> None (caller keeps the current exercise)
- generate_session_feedback -> fixed offline debrief text
- analyze_goal_progress     -> +1 point, on track, fixed advisory message
"""
from typing import List, Protocol

from domain.models import (
    AthleteProfile,
    Exercise,
    GoalProgressAnalysis,
    PerformanceMetric,
    WorkoutPlan,
)


class PlanProvider(Protocol):
    """Capability interface for plan generation and session analysis."""

    async def generate_plan(
        self,
        profile: AthleteProfile,
        duration_minutes: int,
        focus_hint: str,
    ) -> WorkoutPlan:
        """Generate the plan for a new session."""
        ...

    async def substitute_exercise(
        self,
        profile: AthleteProfile,
        current_exercise: Exercise,
    ) -> Exercise:
        """Propose a replacement for an exercise (pain, missing equipment)."""
        ...

    async def generate_session_feedback(
        self,
        profile: AthleteProfile,
        metrics: List[PerformanceMetric],
    ) -> str:
        """Write a short technical debrief of the session."""
        ...

    async def analyze_goal_progress(
        self,
        profile: AthleteProfile,
        metrics: List[PerformanceMetric],
    ) -> GoalProgressAnalysis:
        """Estimate how much the session moved the athlete toward the active goal."""
        ...
