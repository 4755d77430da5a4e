"""
Guarded plan provider: one documented fallback per PlanProvider method.

Part of HYG-19: Degraded mode for plan generation and analysis

The session must keep working when the AI provider is down, slow or not
configured. GuardedPlanProvider wraps any PlanProvider, bounds every call
with a timeout, and replaces a failure with a deterministic result:

- generate_plan             -> default_plan()
- substitute_exercise       -> None
- generate_session_feedback -> FALLBACK_FEEDBACK
- analyze_goal_progress     -> fallback_goal_progress()
"""
import asyncio
import logging
from typing import Awaitable, List, Optional, TypeVar

from application.ports import PlanProvider
from domain.models import (
    AthleteProfile,
    Exercise,
    GoalProgressAnalysis,
    PerformanceMetric,
    PhaseExercise,
    PlanStructure,
    WorkoutPlan,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_FEEDBACK = "Session complete. AI analysis unavailable (offline mode)."
FALLBACK_PROGRESS_ADVICE = "Session recorded (degraded mode, AI analysis unavailable)."
FALLBACK_PROGRESS_INCREMENT = 1.0


# =============================================================================
# Deterministic fallbacks
# =============================================================================


def default_plan(duration_minutes: int, focus_hint: Optional[str] = None) -> WorkoutPlan:
    """
    Built-in full-body plan used when no plan can be generated.

    Dumbbell and body-weight movements only, so it runs with minimal
    equipment. The result only depends on the arguments.
    """
    focus = focus_hint or "full body"
    return WorkoutPlan(
        launch_phrase=f"Offline session: {focus}. Move with control and breathe.",
        structure=PlanStructure.SERIES,
        warmup=[
            PhaseExercise(name="Jumping Jacks", instructions="Light and rhythmic.", duration_seconds=45),
            PhaseExercise(name="Arm Circles", instructions="Forward then backward.", duration_seconds=30),
        ],
        stretch_prep=[
            PhaseExercise(name="Leg Swings", instructions="Front to back, each leg.", duration_seconds=30),
        ],
        exercises=[
            Exercise(
                name="Goblet Squat",
                sets=3,
                reps="10-12",
                rest_seconds=90,
                description="Hold one dumbbell at chest height and squat to depth.",
                coach_tip="Knees track over the toes.",
            ),
            Exercise(
                name="Push-ups",
                sets=3,
                reps="8-10",
                rest_seconds=60,
                description="Hands under shoulders, body in one line.",
                coach_tip="Elevate the hands if form breaks down.",
            ),
            Exercise(
                name="Dumbbell Row",
                sets=3,
                reps="10",
                rest_seconds=60,
                description="One hand on a bench, pull the dumbbell to the hip.",
                coach_tip="Keep the back flat.",
            ),
            Exercise(
                name="Glute Bridge",
                sets=3,
                reps="12",
                rest_seconds=60,
                description="Drive through the heels and squeeze at the top.",
            ),
        ],
        cooldown=[
            PhaseExercise(name="Hamstring Stretch", instructions="Hold, no bouncing.", duration_seconds=30),
            PhaseExercise(name="Chest Opener", instructions="Hands behind the back.", duration_seconds=30),
            PhaseExercise(name="Child's Pose", instructions="Slow nasal breathing.", duration_seconds=45),
        ],
        estimated_minutes=duration_minutes,
    )


def fallback_goal_progress(profile: AthleteProfile) -> GoalProgressAnalysis:
    """One point of progress, capped at 100, with a fixed advisory message."""
    current = profile.active_goal.current_value if profile.active_goal else 0.0
    return GoalProgressAnalysis(
        progress_increment=FALLBACK_PROGRESS_INCREMENT,
        is_on_track=True,
        adjustment_advice=FALLBACK_PROGRESS_ADVICE,
        current_estimated_completion=min(current + FALLBACK_PROGRESS_INCREMENT, 100.0),
    )


# =============================================================================
# Guarded provider
# =============================================================================


class GuardedPlanProvider:
    """
    PlanProvider decorator that never raises.

    Args:
        provider: Wrapped provider, or None when no provider is configured
                  (every call then returns its fallback directly)
        timeout_seconds: Upper bound for each call; None disables it
    """

    def __init__(
        self,
        provider: Optional[PlanProvider],
        *,
        timeout_seconds: Optional[float] = None,
    ):
        self._provider = provider
        self._timeout = timeout_seconds

    @property
    def provider(self) -> Optional[PlanProvider]:
        return self._provider

    async def _call(self, operation: str, call: Awaitable[T]) -> T:
        if self._timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f"{operation} timed out after {self._timeout}s") from None

    async def generate_plan(
        self,
        profile: AthleteProfile,
        duration_minutes: int,
        focus_hint: str,
    ) -> WorkoutPlan:
        if self._provider is None:
            logger.info("No plan provider configured, using the default plan")
            return default_plan(duration_minutes, focus_hint)
        try:
            plan = await self._call(
                "generate_plan",
                self._provider.generate_plan(profile, duration_minutes, focus_hint),
            )
        except Exception as e:
            logger.warning(f"Plan generation failed, using the default plan: {e}")
            return default_plan(duration_minutes, focus_hint)
        logger.info(
            "Generated plan: %d warm-up, %d exercises, %d cool-down items",
            len(plan.warmup_sequence), plan.exercise_count, len(plan.cooldown),
        )
        return plan

    async def substitute_exercise(
        self,
        profile: AthleteProfile,
        current_exercise: Exercise,
    ) -> Optional[Exercise]:
        """Replacement exercise, or None when none could be obtained."""
        if self._provider is None:
            return None
        try:
            return await self._call(
                "substitute_exercise",
                self._provider.substitute_exercise(profile, current_exercise),
            )
        except Exception as e:
            logger.warning(f"Substitution for {current_exercise.name} failed: {e}")
            return None

    async def generate_session_feedback(
        self,
        profile: AthleteProfile,
        metrics: List[PerformanceMetric],
    ) -> str:
        if self._provider is None:
            return FALLBACK_FEEDBACK
        try:
            text = await self._call(
                "generate_session_feedback",
                self._provider.generate_session_feedback(profile, metrics),
            )
        except Exception as e:
            logger.warning(f"Session feedback failed, using offline text: {e}")
            return FALLBACK_FEEDBACK
        if not text or not text.strip():
            logger.warning("Session feedback was empty, using offline text")
            return FALLBACK_FEEDBACK
        return text

    async def analyze_goal_progress(
        self,
        profile: AthleteProfile,
        metrics: List[PerformanceMetric],
    ) -> GoalProgressAnalysis:
        if self._provider is None:
            return fallback_goal_progress(profile)
        try:
            return await self._call(
                "analyze_goal_progress",
                self._provider.analyze_goal_progress(profile, metrics),
            )
        except Exception as e:
            logger.warning(f"Goal progress analysis failed, using fallback: {e}")
            return fallback_goal_progress(profile)
