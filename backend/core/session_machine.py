"""
Guided session state machine.

Part of HYG-18: Session phase state machine

The whole session lives in one immutable SessionState. Every change goes
through `reduce(state, event)`, a pure function: no clock, no I/O, no
collaborator calls. The SessionController owns the clock and the
collaborators and feeds events in.

Phases:
    PRE_SESSION -> WARMUP -> ACTIVE_SET <-> REST -> COOLDOWN -> DEBRIEF -> ARCHIVED
    BROWSE_STATS is reachable from PRE_SESSION, DEBRIEF and ARCHIVED and
    always returns to PRE_SESSION.

Clock regimes:
    COUNTDOWN in WARMUP, COOLDOWN and REST: a tick decrements the countdown
    and reaching zero fires exactly one transition, which reloads the
    countdown for the next segment (or leaves REST).
    STOPWATCH in ACTIVE_SET: a tick increments the elapsed effort time and
    never expires; the athlete validates the set explicitly.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from application.exceptions import InvalidTransitionError
from backend.core.load_prescription import extract_reps, prescribe_load, update_personal_record
from backend.core.performance_recorder import PerformanceRecorder
from domain.models import AthleteProfile, Exercise, PhaseExercise, WorkoutPlan

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    PRE_SESSION = "PRE_SESSION"
    WARMUP = "WARMUP"
    ACTIVE_SET = "ACTIVE_SET"
    REST = "REST"
    COOLDOWN = "COOLDOWN"
    DEBRIEF = "DEBRIEF"
    ARCHIVED = "ARCHIVED"
    BROWSE_STATS = "BROWSE_STATS"


class ClockMode(str, Enum):
    STOPPED = "STOPPED"
    COUNTDOWN = "COUNTDOWN"
    STOPWATCH = "STOPWATCH"


COUNTDOWN_PHASES = frozenset({SessionPhase.WARMUP, SessionPhase.COOLDOWN, SessionPhase.REST})
LIVE_PHASES = frozenset({
    SessionPhase.WARMUP,
    SessionPhase.ACTIVE_SET,
    SessionPhase.REST,
    SessionPhase.COOLDOWN,
    SessionPhase.DEBRIEF,
})
STATS_ENTRY_PHASES = frozenset({
    SessionPhase.PRE_SESSION,
    SessionPhase.DEBRIEF,
    SessionPhase.ARCHIVED,
})


# =============================================================================
# State
# =============================================================================


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a guided session."""

    profile: Optional[AthleteProfile] = None
    phase: SessionPhase = SessionPhase.PRE_SESSION
    plan: Optional[WorkoutPlan] = None
    phase_item_index: int = 0
    exercise_index: int = 0
    current_set: int = 1
    countdown: int = 0
    elapsed: int = 0
    current_load: float = 0.0
    recorder: PerformanceRecorder = field(default_factory=PerformanceRecorder)
    feedback: Optional[str] = None
    started_at: Optional[str] = None
    focus: Optional[str] = None
    # Profile as it was before the session, restored on abandon
    baseline_profile: Optional[AthleteProfile] = None

    @property
    def clock_mode(self) -> ClockMode:
        if self.phase in COUNTDOWN_PHASES:
            return ClockMode.COUNTDOWN
        if self.phase == SessionPhase.ACTIVE_SET:
            return ClockMode.STOPWATCH
        return ClockMode.STOPPED

    @property
    def is_resting(self) -> bool:
        return self.phase == SessionPhase.REST

    @property
    def current_exercise(self) -> Optional[Exercise]:
        if self.plan is None:
            return None
        return self.plan.exercise_at(self.exercise_index)

    @property
    def current_phase_item(self) -> Optional[PhaseExercise]:
        """Warm-up or cool-down item being run, if any."""
        if self.plan is None:
            return None
        if self.phase == SessionPhase.WARMUP:
            items = self.plan.warmup_sequence
        elif self.phase == SessionPhase.COOLDOWN:
            items = self.plan.cooldown
        else:
            return None
        if 0 <= self.phase_item_index < len(items):
            return items[self.phase_item_index]
        return None

    @property
    def segment(self) -> tuple:
        """Identifies the clock segment; the clock restarts when it changes."""
        return (self.phase, self.phase_item_index, self.exercise_index, self.current_set)


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class LoadProfile:
    profile: AthleteProfile


@dataclass(frozen=True)
class StartSession:
    plan: WorkoutPlan
    started_at: Optional[str] = None
    focus: Optional[str] = None


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class SkipPhaseItem:
    pass


@dataclass(frozen=True)
class ValidateSet:
    """The athlete finished a set. Missing values fall back to the state."""

    effort_seconds: Optional[int] = None
    reps: Optional[int] = None
    weight: Optional[float] = None
    date: Optional[str] = None


@dataclass(frozen=True)
class SkipRest:
    pass


@dataclass(frozen=True)
class AdjustLoad:
    weight: float


@dataclass(frozen=True)
class ReplaceExercise:
    exercise: Exercise


@dataclass(frozen=True)
class FeedbackReady:
    text: str


@dataclass(frozen=True)
class SessionArchived:
    profile: AthleteProfile


@dataclass(frozen=True)
class AbandonSession:
    pass


@dataclass(frozen=True)
class ResetSession:
    pass


@dataclass(frozen=True)
class OpenStats:
    pass


@dataclass(frozen=True)
class CloseStats:
    pass


SessionEvent = Union[
    LoadProfile,
    StartSession,
    Tick,
    SkipPhaseItem,
    ValidateSet,
    SkipRest,
    AdjustLoad,
    ReplaceExercise,
    FeedbackReady,
    SessionArchived,
    AbandonSession,
    ResetSession,
    OpenStats,
    CloseStats,
]


# =============================================================================
# Phase entry helpers
# =============================================================================


def _enter_warmup(state: SessionState) -> SessionState:
    items = state.plan.warmup_sequence
    if not items:
        return _enter_main_sets(state)
    return replace(
        state,
        phase=SessionPhase.WARMUP,
        phase_item_index=0,
        countdown=items[0].duration_seconds,
        elapsed=0,
    )


def _advance_warmup(state: SessionState) -> SessionState:
    items = state.plan.warmup_sequence
    next_index = state.phase_item_index + 1
    if next_index < len(items):
        return replace(state, phase_item_index=next_index, countdown=items[next_index].duration_seconds)
    return _enter_main_sets(state)


def _enter_main_sets(state: SessionState) -> SessionState:
    first = state.plan.exercise_at(0)
    if first is None:
        return _enter_cooldown(state)
    return replace(
        state,
        phase=SessionPhase.ACTIVE_SET,
        phase_item_index=0,
        exercise_index=0,
        current_set=1,
        countdown=0,
        elapsed=0,
        current_load=prescribe_load(state.profile, first),
    )


def _enter_cooldown(state: SessionState) -> SessionState:
    items = state.plan.cooldown
    if not items:
        return _enter_debrief(state)
    return replace(
        state,
        phase=SessionPhase.COOLDOWN,
        phase_item_index=0,
        countdown=items[0].duration_seconds,
        elapsed=0,
    )


def _advance_cooldown(state: SessionState) -> SessionState:
    items = state.plan.cooldown
    next_index = state.phase_item_index + 1
    if next_index < len(items):
        return replace(state, phase_item_index=next_index, countdown=items[next_index].duration_seconds)
    return _enter_debrief(state)


def _enter_debrief(state: SessionState) -> SessionState:
    return replace(
        state,
        phase=SessionPhase.DEBRIEF,
        phase_item_index=0,
        countdown=0,
        elapsed=0,
        feedback=None,
    )


def _enter_rest(state: SessionState, rest_seconds: int) -> SessionState:
    return replace(state, phase=SessionPhase.REST, countdown=max(0, rest_seconds), elapsed=0)


def _exit_rest(state: SessionState) -> SessionState:
    return replace(state, phase=SessionPhase.ACTIVE_SET, countdown=0, elapsed=0)


def _expire_countdown(state: SessionState) -> SessionState:
    if state.phase == SessionPhase.WARMUP:
        return _advance_warmup(state)
    if state.phase == SessionPhase.COOLDOWN:
        return _advance_cooldown(state)
    return _exit_rest(state)


def _fresh_state(state: SessionState) -> SessionState:
    return SessionState(profile=state.profile)


# =============================================================================
# Event handlers
# =============================================================================


def _invalid(event: SessionEvent, state: SessionState) -> InvalidTransitionError:
    return InvalidTransitionError(type(event).__name__, state.phase.value)


def _on_tick(state: SessionState) -> SessionState:
    mode = state.clock_mode
    if mode == ClockMode.STOPWATCH:
        return replace(state, elapsed=state.elapsed + 1)
    if mode == ClockMode.COUNTDOWN:
        remaining = state.countdown - 1
        if remaining <= 0:
            return _expire_countdown(replace(state, countdown=0))
        return replace(state, countdown=remaining)
    return state


def _on_validate_set(state: SessionState, event: ValidateSet) -> SessionState:
    exercise = state.current_exercise
    if exercise is None:
        raise _invalid(event, state)

    effort = state.elapsed if event.effort_seconds is None else event.effort_seconds
    reps = extract_reps(exercise.reps) if event.reps is None else event.reps
    weight = state.current_load if event.weight is None else event.weight

    recorder = state.recorder.record_set(
        exercise.name,
        weight,
        reps,
        effort,
        exercise.rest_seconds,
    )
    profile = update_personal_record(state.profile, exercise.name, weight, reps, date=event.date)
    state = replace(state, recorder=recorder, profile=profile)

    if state.current_set < exercise.sets:
        return _enter_rest(replace(state, current_set=state.current_set + 1), exercise.rest_seconds)

    next_index = state.exercise_index + 1
    next_exercise = state.plan.exercise_at(next_index)
    if next_exercise is not None:
        state = replace(
            state,
            exercise_index=next_index,
            current_set=1,
            current_load=prescribe_load(profile, next_exercise),
        )
        return _enter_rest(state, next_exercise.rest_seconds)

    return _enter_cooldown(state)


def _on_replace_exercise(state: SessionState, event: ReplaceExercise) -> SessionState:
    plan = state.plan.with_exercise(state.exercise_index, event.exercise)
    return replace(
        state,
        plan=plan,
        current_set=min(state.current_set, event.exercise.sets),
        current_load=prescribe_load(state.profile, event.exercise),
    )


def reduce(state: SessionState, event: SessionEvent) -> SessionState:
    """
    Apply one event to the session state.

    Args:
        state: Current state
        event: Event to apply

    Returns:
        The next state (the same object when the event changes nothing)

    Raises:
        InvalidTransitionError: If the event is not accepted in the current phase
        ValueError: If the event carries an invalid value
    """
    phase = state.phase

    if isinstance(event, Tick):
        return _on_tick(state)

    if isinstance(event, LoadProfile):
        if phase != SessionPhase.PRE_SESSION:
            raise _invalid(event, state)
        return replace(state, profile=event.profile)

    if isinstance(event, StartSession):
        if phase != SessionPhase.PRE_SESSION or state.profile is None:
            raise _invalid(event, state)
        started = replace(
            _fresh_state(state),
            plan=event.plan,
            started_at=event.started_at,
            focus=event.focus,
            baseline_profile=state.profile,
        )
        return _enter_warmup(started)

    if isinstance(event, SkipPhaseItem):
        if phase == SessionPhase.WARMUP:
            return _advance_warmup(state)
        if phase == SessionPhase.COOLDOWN:
            return _advance_cooldown(state)
        raise _invalid(event, state)

    if isinstance(event, ValidateSet):
        if phase != SessionPhase.ACTIVE_SET:
            raise _invalid(event, state)
        return _on_validate_set(state, event)

    if isinstance(event, SkipRest):
        if phase != SessionPhase.REST:
            raise _invalid(event, state)
        return _exit_rest(state)

    if isinstance(event, AdjustLoad):
        if phase not in (SessionPhase.ACTIVE_SET, SessionPhase.REST):
            raise _invalid(event, state)
        if event.weight < 0:
            raise ValueError(f"Load cannot be negative: {event.weight}")
        return replace(state, current_load=float(event.weight))

    if isinstance(event, ReplaceExercise):
        if phase not in (SessionPhase.ACTIVE_SET, SessionPhase.REST) or state.current_exercise is None:
            raise _invalid(event, state)
        return _on_replace_exercise(state, event)

    if isinstance(event, FeedbackReady):
        if phase != SessionPhase.DEBRIEF:
            raise _invalid(event, state)
        return replace(state, feedback=event.text)

    if isinstance(event, SessionArchived):
        if phase != SessionPhase.DEBRIEF:
            raise _invalid(event, state)
        return replace(
            state,
            phase=SessionPhase.ARCHIVED,
            profile=event.profile,
            baseline_profile=event.profile,
        )

    if isinstance(event, AbandonSession):
        if phase not in LIVE_PHASES:
            raise _invalid(event, state)
        return SessionState(profile=state.baseline_profile or state.profile)

    if isinstance(event, ResetSession):
        if phase != SessionPhase.ARCHIVED:
            raise _invalid(event, state)
        return _fresh_state(state)

    if isinstance(event, OpenStats):
        if phase not in STATS_ENTRY_PHASES:
            raise _invalid(event, state)
        return replace(state, phase=SessionPhase.BROWSE_STATS)

    if isinstance(event, CloseStats):
        if phase != SessionPhase.BROWSE_STATS:
            raise _invalid(event, state)
        # Leaving stats from DEBRIEF drops the unarchived session, PRs included
        return SessionState(profile=state.baseline_profile or state.profile)

    raise TypeError(f"Unknown session event: {event!r}")
