"""
Session Controller: orchestrates a guided workout session.

Part of HYG-20: Guided session controller

The controller is the only stateful object of the engine. It owns:
- the current SessionState (changed only through `reduce`)
- the tick source, restarted whenever the clock segment changes
- the ProfileStore and the (guarded) PlanProvider

Usage:
    controller = SessionController(profile_store, plan_provider)
    controller.load_profile("athlete-1")
    await controller.start(duration_minutes=45, focus_hint="legs")
    ...
    await controller.validate_set()
    ...
    profile = await controller.archive()
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import sentry_sdk

from application.exceptions import (
    InvalidTransitionError,
    ProfileStoreError,
    SessionEngineError,
    SessionPersistenceError,
)
from application.ports import PlanProvider, ProfileStore
from backend.core.clock import AsyncioTickSource, TickSource
from backend.core.performance_recorder import build_completed_session, compute_streaks
from backend.core.plan_fallbacks import GuardedPlanProvider
from backend.core.session_machine import (
    AbandonSession,
    AdjustLoad,
    ClockMode,
    CloseStats,
    FeedbackReady,
    LoadProfile,
    OpenStats,
    ReplaceExercise,
    ResetSession,
    SessionArchived,
    SessionEvent,
    SessionPhase,
    SessionState,
    SkipPhaseItem,
    SkipRest,
    StartSession,
    Tick,
    ValidateSet,
    reduce,
)
from domain.models import (
    ActiveGoal,
    AthleteProfile,
    Exercise,
    GoalProgressEntry,
    VolumePoint,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MINUTES = 45
DEFAULT_FOCUS_HINT = "full body"

MOOD_ON_TRACK = "On track"
MOOD_ADJUSTMENT_NEEDED = "Adjustment needed"

# Profile fields written back on archive
ARCHIVE_FIELDS = {
    "id",
    "personal_records",
    "trend_history",
    "session_records",
    "active_goal",
    "volume_history",
    "last_ai_feedback",
    "current_streak",
    "longest_streak",
}


@dataclass
class SubstitutionOutcome:
    """
    Result of an exercise substitution request.

    Attributes:
        success: Whether the current exercise was replaced
        exercise: The new exercise when successful
        error: Why nothing changed, when unsuccessful
    """

    success: bool
    exercise: Optional[Exercise] = None
    error: Optional[str] = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionController:
    """
    Async orchestrator of one guided session at a time.

    Args:
        profile_store: Where the profile is loaded from and archived to
        plan_provider: Plan source; wrapped in GuardedPlanProvider unless it
                       already is one. None runs fully on fallbacks.
        tick_source: Clock; defaults to a one-second AsyncioTickSource
        provider_timeout_seconds: Upper bound per provider call
        default_session_minutes: Duration used when `start` gets none
        default_focus_hint: Focus used when `start` gets none
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        plan_provider: Optional[PlanProvider],
        *,
        tick_source: Optional[TickSource] = None,
        provider_timeout_seconds: Optional[float] = None,
        default_session_minutes: int = DEFAULT_SESSION_MINUTES,
        default_focus_hint: str = DEFAULT_FOCUS_HINT,
    ):
        self._store = profile_store
        if isinstance(plan_provider, GuardedPlanProvider):
            self._provider = plan_provider
        else:
            self._provider = GuardedPlanProvider(plan_provider, timeout_seconds=provider_timeout_seconds)
        self._clock = tick_source or AsyncioTickSource()
        self._default_minutes = default_session_minutes
        self._default_focus = default_focus_hint
        self._state = SessionState()
        self._busy = False

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def profile(self) -> Optional[AthleteProfile]:
        return self._state.profile

    @property
    def is_busy(self) -> bool:
        """True while a provider call that will change the session is pending."""
        return self._busy

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def dispatch(self, event: SessionEvent) -> SessionState:
        """
        Apply an event, keep the clock in step, and request debrief feedback
        when the session just reached DEBRIEF.

        Raises:
            InvalidTransitionError: If the event is not valid in the current phase
        """
        previous = self._state
        current = reduce(previous, event)
        self._state = current

        if current.phase != previous.phase:
            logger.info("Session phase %s -> %s", previous.phase.value, current.phase.value)
        self._sync_clock(previous, current)

        if current.phase == SessionPhase.DEBRIEF and previous.phase != SessionPhase.DEBRIEF:
            await self._request_feedback()

        return self._state

    def _sync_clock(self, previous: SessionState, current: SessionState) -> None:
        if current.clock_mode == ClockMode.STOPPED:
            if self._clock.is_running:
                self._clock.stop()
            return
        if current.segment != previous.segment or not self._clock.is_running:
            logger.debug("Clock restarted for %s (%s)", current.segment, current.clock_mode.value)
            self._clock.start(self.tick)

    async def _request_feedback(self) -> None:
        state = self._state
        self._busy = True
        try:
            text = await self._provider.generate_session_feedback(
                state.profile, list(state.recorder.metrics)
            )
        finally:
            self._busy = False
        if self._state is not state:
            logger.info("Session changed while feedback was pending, discarding it")
            return
        await self.dispatch(FeedbackReady(text=text))

    # =========================================================================
    # Operations
    # =========================================================================

    def load_profile(self, profile_id: str) -> AthleteProfile:
        """
        Load the athlete profile for the next session.

        Raises:
            ProfileNotFoundError: If the store has no such profile
            InvalidTransitionError: If a session is already running
        """
        if self._state.phase != SessionPhase.PRE_SESSION:
            raise InvalidTransitionError("LoadProfile", self._state.phase.value)
        profile = self._store.load(profile_id)
        self._state = reduce(self._state, LoadProfile(profile=profile))
        logger.info(f"Loaded profile {profile_id}")
        return profile

    async def start(
        self,
        duration_minutes: Optional[int] = None,
        focus_hint: Optional[str] = None,
    ) -> SessionState:
        """
        Generate the plan and start the warm-up.

        Falls back to the built-in plan when generation fails.

        Raises:
            InvalidTransitionError: If not in PRE_SESSION or no profile is loaded
        """
        state = self._state
        if state.phase != SessionPhase.PRE_SESSION or state.profile is None:
            raise InvalidTransitionError("StartSession", state.phase.value)
        if self._busy:
            raise SessionEngineError("A plan request is already pending")

        minutes = duration_minutes or self._default_minutes
        focus = focus_hint or self._default_focus

        self._busy = True
        try:
            plan = await self._provider.generate_plan(state.profile, minutes, focus)
        finally:
            self._busy = False

        return await self.dispatch(StartSession(plan=plan, started_at=_now_iso(), focus=focus))

    async def tick(self) -> None:
        """Clock callback. Dropped while a provider call is pending."""
        if self._busy:
            logger.debug("Tick dropped, provider call pending")
            return
        await self.dispatch(Tick())

    async def skip_phase_item(self) -> SessionState:
        return await self.dispatch(SkipPhaseItem())

    async def validate_set(
        self,
        effort_seconds: Optional[int] = None,
        reps: Optional[int] = None,
        weight: Optional[float] = None,
    ) -> SessionState:
        """
        Validate the current set.

        Args:
            effort_seconds: Time under effort, defaults to the stopwatch
            reps: Reps performed, defaults to the prescribed reps
            weight: Weight used, defaults to the current working load
        """
        return await self.dispatch(ValidateSet(
            effort_seconds=effort_seconds,
            reps=reps,
            weight=weight,
            date=_now_iso(),
        ))

    async def skip_rest(self) -> SessionState:
        return await self.dispatch(SkipRest())

    async def adjust_load(self, weight: float) -> SessionState:
        return await self.dispatch(AdjustLoad(weight=weight))

    async def abandon(self) -> SessionState:
        """Drop the running session; nothing is persisted."""
        logger.info("Session abandoned in %s", self._state.phase.value)
        return await self.dispatch(AbandonSession())

    async def reset(self) -> SessionState:
        """Return to PRE_SESSION after an archived session."""
        return await self.dispatch(ResetSession())

    async def open_stats(self) -> SessionState:
        return await self.dispatch(OpenStats())

    async def close_stats(self) -> SessionState:
        return await self.dispatch(CloseStats())

    async def substitute_exercise(self) -> SubstitutionOutcome:
        """
        Ask the provider for a replacement of the current exercise.

        Ticks are dropped while the request is pending. The replacement is
        applied only if the session is still on the same exercise.

        Returns:
            SubstitutionOutcome; on failure the session is unchanged
        """
        state = self._state
        if state.phase not in (SessionPhase.ACTIVE_SET, SessionPhase.REST):
            raise InvalidTransitionError("ReplaceExercise", state.phase.value)
        current = state.current_exercise
        if current is None:
            raise InvalidTransitionError("ReplaceExercise", state.phase.value)
        if self._busy:
            return SubstitutionOutcome(success=False, error="Another request is pending")

        self._busy = True
        try:
            replacement = await self._provider.substitute_exercise(state.profile, current)
        finally:
            self._busy = False

        if replacement is None:
            return SubstitutionOutcome(success=False, error="No replacement available")

        latest = self._state
        if (
            latest.phase not in (SessionPhase.ACTIVE_SET, SessionPhase.REST)
            or latest.exercise_index != state.exercise_index
            or latest.current_exercise != current
        ):
            logger.info("Session moved on while substitution was pending, discarding it")
            return SubstitutionOutcome(success=False, error="Session moved on")

        await self.dispatch(ReplaceExercise(exercise=replacement))
        logger.info(f"Replaced {current.name} with {replacement.name}")
        return SubstitutionOutcome(success=True, exercise=replacement)

    async def archive(self) -> AthleteProfile:
        """
        Persist the finished session and move to ARCHIVED.

        Appends a completed-session record, a goal-history point and a volume
        point, stores the progress advice as `last_ai_feedback`, updates the
        day streak counters, then upserts the profile.

        Returns:
            The updated profile

        Raises:
            InvalidTransitionError: If not in DEBRIEF
            SessionPersistenceError: If the ProfileStore write fails; the
                session stays in DEBRIEF and archive() can be retried
        """
        state = self._state
        if state.phase != SessionPhase.DEBRIEF:
            raise InvalidTransitionError("SessionArchived", state.phase.value)
        if self._busy:
            raise SessionEngineError("A provider request is already pending")

        metrics = list(state.recorder.metrics)
        self._busy = True
        try:
            analysis = await self._provider.analyze_goal_progress(state.profile, metrics)
        finally:
            self._busy = False

        date = _now_iso()
        profile = state.profile
        mood = MOOD_ON_TRACK if analysis.is_on_track else MOOD_ADJUSTMENT_NEEDED
        debrief = "\n".join(part for part in (state.feedback, analysis.adjustment_advice) if part)
        estimate = analysis.current_estimated_completion

        record = build_completed_session(
            state.recorder,
            state.plan,
            date=date,
            mood=mood,
            debrief=debrief,
            focus=state.focus,
            goal_value_at_session=estimate,
        )

        goal = profile.active_goal or ActiveGoal(label=profile.main_objective)
        goal = goal.model_copy(update={
            "current_value": estimate,
            "history": [*goal.history, GoalProgressEntry(date=date, value=estimate)],
        })

        current_streak, longest_streak = compute_streaks(
            profile, datetime.fromisoformat(date).date()
        )

        updated = profile.model_copy(update={
            "session_records": [*profile.session_records, record],
            "active_goal": goal,
            "volume_history": [
                *profile.volume_history,
                VolumePoint(date=date, tonnage=state.recorder.session_tonnage()),
            ],
            "last_ai_feedback": analysis.adjustment_advice,
            "current_streak": current_streak,
            "longest_streak": longest_streak,
        })

        try:
            stored = self._store.upsert(updated.model_dump(mode="json", include=ARCHIVE_FIELDS))
            if not any(p.id == profile.id for p in stored):
                raise ProfileStoreError(f"Profile {profile.id} missing after write")
        except Exception as e:
            logger.exception(f"Failed to archive session for profile {profile.id}")
            sentry_sdk.capture_exception(e)
            raise SessionPersistenceError(f"Failed to archive session: {e}") from e

        await self.dispatch(SessionArchived(profile=updated))
        logger.info(
            "Archived session for %s: %d sets, tonnage %.1f",
            profile.id, record.set_count, record.tonnage,
        )
        return updated

    def close(self) -> None:
        """Stop the clock."""
        self._clock.stop()
