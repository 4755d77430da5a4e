"""
Load Prescription for guided sessions.

Part of HYG-16: Set-by-set load prescription

This module provides the pure functions the session engine uses to decide
how much resistance the athlete should use:
- Parsing of prescribed rep / load text
- Personal record (PR) lookup across records, trends and session history
- Suggested weight from an Epley 1RM estimate and rep-based percentages
- Monotonic personal record updates
"""
import logging
import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from domain.models import (
    AthleteProfile,
    Exercise,
    ExperienceLevel,
    PersonalRecord,
)

logger = logging.getLogger(__name__)


# Loads are prescribed on a 2.5 kg plate grid
LOAD_INCREMENT = 2.5

# Used when the profile has no usable body weight
DEFAULT_BODY_WEIGHT = 70.0

TREND_HISTORY_LIMIT = 10

# Share of body weight used as a first load when no record exists
EXPERIENCE_LOAD_FACTORS: Dict[ExperienceLevel, float] = {
    ExperienceLevel.BEGINNER: 0.2,
    ExperienceLevel.INTERMEDIATE: 0.4,
    ExperienceLevel.ADVANCED: 0.6,
}
DEFAULT_EXPERIENCE_FACTOR = 0.3

BEGINNER_SAFETY_FACTOR = 0.85

# Target reps -> percentage of 1RM. The smallest breakpoint >= target applies.
REP_PERCENTAGE_BREAKPOINTS = (
    (1, 100),
    (2, 95),
    (3, 93),
    (4, 90),
    (5, 87),
    (6, 85),
    (8, 80),
    (10, 75),
    (12, 70),
    (15, 65),
    (20, 60),
)
HIGH_REP_PERCENTAGE = 55

_FIRST_INTEGER = re.compile(r"\d+")
_FIRST_DECIMAL = re.compile(r"(\d+(?:[.,]\d+)?)")


# =============================================================================
# Parsing
# =============================================================================


def extract_reps(reps_text: Optional[str]) -> int:
    """
    Extract the target rep count from a prescription.

    Examples: "10-12" -> 10, "8" -> 8, "Echec" -> 1, "Max" -> 1, "" -> 1

    Args:
        reps_text: Free-text rep prescription

    Returns:
        First integer found, or 1 for failure/max sets and unparseable text
    """
    if not reps_text:
        return 1

    lowered = reps_text.lower()
    if "echec" in lowered or "max" in lowered:
        return 1

    match = _FIRST_INTEGER.search(reps_text)
    if match:
        return int(match.group(0))

    return 1


def extract_weight(weight_text: Optional[str]) -> float:
    """
    Extract a load from text such as "50kg", "50 kg" or "72,5 kg".

    Args:
        weight_text: Free-text load

    Returns:
        First decimal number found, or 0 when there is none
    """
    if not weight_text:
        return 0.0

    match = _FIRST_DECIMAL.search(weight_text)
    if match:
        return float(match.group(1).replace(",", "."))

    return 0.0


# =============================================================================
# Personal records
# =============================================================================


def _best_by_volume(entries: List[PersonalRecord]) -> PersonalRecord:
    best = entries[0]
    for entry in entries[1:]:
        if entry.volume > best.volume:
            best = entry
    return best


def find_personal_record(
    profile: AthleteProfile,
    exercise_name: str,
) -> Optional[PersonalRecord]:
    """
    Find the reference performance for an exercise.

    Resolution order:
    1. exact key in `personal_records`
    2. best weight x reps entry of `trend_history`
    3. best weight x reps among completed sessions' exercise results whose
       name matches case-insensitively and which recorded both weight and reps

    Steps 1 and 2 match the name case-sensitively while step 3 does not.
    Kept as-is pending product clarification (see DESIGN.md).

    Returns:
        The PersonalRecord found, or None
    """
    record = profile.personal_records.get(exercise_name)
    if record is not None:
        return record

    trend = profile.trend_history.get(exercise_name)
    if trend:
        return _best_by_volume(trend)

    target = exercise_name.lower()
    best: Optional[PersonalRecord] = None
    best_volume = 0.0
    for session in profile.completed_sessions:
        for result in session.exercises:
            if result.name.lower() != target:
                continue
            if not result.performed_weight or not result.performed_reps:
                continue
            volume = result.performed_weight * result.performed_reps
            if volume > best_volume:
                best_volume = volume
                best = PersonalRecord(
                    weight=result.performed_weight,
                    reps=result.performed_reps,
                    date=session.date,
                )

    return best


def update_personal_record(
    profile: AthleteProfile,
    exercise_name: str,
    weight: float,
    reps: int,
    *,
    date: Optional[str] = None,
) -> AthleteProfile:
    """
    Record a set as the new PR if it beats the current one.

    A set beats the record when its volume (weight x reps) is strictly
    greater, or equal with a strictly greater weight. The new record is also
    appended to the trend history, which keeps the last 10 entries.

    Args:
        profile: Current profile
        exercise_name: Exercise name (exact key)
        weight: Weight used
        reps: Reps performed
        date: ISO timestamp of the set (defaults to now, UTC)

    Returns:
        A new profile when the record improved, otherwise `profile` itself
    """
    current = profile.personal_records.get(exercise_name)
    current_volume = current.volume if current else 0.0
    new_volume = weight * reps

    improved = (
        current is None
        or new_volume > current_volume
        or (new_volume == current_volume and weight > current.weight)
    )
    if not improved:
        return profile

    record = PersonalRecord(
        weight=weight,
        reps=reps,
        date=date or datetime.now(timezone.utc).isoformat(),
    )
    trend = [*profile.trend_history.get(exercise_name, []), record][-TREND_HISTORY_LIMIT:]

    logger.debug(
        "New personal record for %s: %s x %s (previous volume %.1f)",
        exercise_name, weight, reps, current_volume,
    )
    return profile.model_copy(update={
        "personal_records": {**profile.personal_records, exercise_name: record},
        "trend_history": {**profile.trend_history, exercise_name: trend},
    })


# =============================================================================
# Load calculation
# =============================================================================


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """
    Estimate 1RM using the Epley formula.

    Formula: 1RM = weight * (1 + reps/30)
    """
    return weight * (1.0 + reps / 30.0)


def one_rm_percentage(target_reps: int) -> int:
    """Percentage of 1RM to use for `target_reps` reps."""
    for breakpoint, percentage in REP_PERCENTAGE_BREAKPOINTS:
        if target_reps <= breakpoint:
            return percentage
    return HIGH_REP_PERCENTAGE


def round_to_increment(weight: float, increment: float = LOAD_INCREMENT) -> float:
    """
    Round to the nearest plate increment, halves rounding up.

    Positive loads below one increment become one increment; the result is
    never negative.
    """
    rounded = math.floor(weight / increment + 0.5) * increment
    if 0 < rounded < increment:
        rounded = increment
    return max(0.0, rounded)


def _experience_factor(profile: AthleteProfile) -> float:
    level = profile.experience_level
    if level is None:
        return DEFAULT_EXPERIENCE_FACTOR
    return EXPERIENCE_LOAD_FACTORS.get(level, DEFAULT_EXPERIENCE_FACTOR)


def calculate_suggested_weight(
    profile: AthleteProfile,
    exercise: Exercise,
    target_reps: int,
) -> float:
    """
    Suggest the working weight for an exercise.

    Without a reference performance, the plan's suggested load is used when
    it parses to a positive number, otherwise a body-weight based estimate
    scaled by experience. With one, the load is a rep-dependent percentage of
    the Epley 1RM, lightened by 15% for beginners.

    Args:
        profile: Athlete profile
        exercise: Exercise as prescribed by the plan
        target_reps: Reps the athlete will aim for

    Returns:
        A non-negative multiple of 2.5
    """
    record = find_personal_record(profile, exercise.name)

    if record is None:
        planned_load = extract_weight(exercise.suggested_load)
        if planned_load > 0:
            return max(LOAD_INCREMENT, round_to_increment(planned_load))

        body_weight = profile.body_weight or DEFAULT_BODY_WEIGHT
        if body_weight <= 0:
            body_weight = DEFAULT_BODY_WEIGHT
        return round_to_increment(body_weight * _experience_factor(profile))

    one_rm = estimate_one_rep_max(record.weight, record.reps)
    suggested = one_rm * one_rm_percentage(target_reps) / 100.0

    if profile.experience_level == ExperienceLevel.BEGINNER:
        suggested *= BEGINNER_SAFETY_FACTOR

    return round_to_increment(suggested)


def prescribe_load(profile: AthleteProfile, exercise: Exercise) -> float:
    """Suggested weight for the exercise's own rep prescription."""
    return calculate_suggested_weight(profile, exercise, extract_reps(exercise.reps))
