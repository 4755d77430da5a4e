"""
LLM prompt templates for the session plan provider.

Part of HYG-22: OpenAI plan provider

System and user prompts for plan generation, exercise substitution, session
debriefs and goal progress analysis. Free-text profile fields are sanitized
before they reach a prompt.
"""
import json
import re
from typing import List, Optional

from domain.models import AthleteProfile, Exercise, PerformanceMetric

MAX_FREE_TEXT_LENGTH = 500


def sanitize_user_input(value: Optional[str], max_length: int = MAX_FREE_TEXT_LENGTH) -> str:
    """
    Remove control characters, collapse spaces and limit length.

    Args:
        value: Raw user-provided string
        max_length: Maximum allowed length

    Returns:
        Sanitized string safe for prompt inclusion
    """
    if not value:
        return ""
    sanitized = re.sub(r"[\n\r\t\x00-\x1f\x7f-\x9f]", " ", value)
    sanitized = re.sub(r" +", " ", sanitized)
    return sanitized.strip()[:max_length]


COACH_PERSONA = "You are HYGIE, an expert strength coach who adapts every session to the athlete's injuries."


# =============================================================================
# Plan generation
# =============================================================================

PLAN_SYSTEM_PROMPT = COACH_PERSONA + """

Design one guided training session and return it as a JSON object with this exact structure:
{
  "launch_phrase": "One motivating sentence",
  "structure": "SERIES",
  "warmup": [{"name": "Jumping Jacks", "instructions": "Stay light", "duration_seconds": 45}],
  "stretch_prep": [{"name": "Leg Swings", "instructions": "Each leg", "duration_seconds": 30}],
  "exercises": [
    {
      "name": "Goblet Squat",
      "sets": 3,
      "reps": "10-12",
      "rest_seconds": 90,
      "description": "How to perform it",
      "coach_tip": "One cue",
      "suggested_load": "16kg"
    }
  ],
  "cooldown": [{"name": "Hamstring Stretch", "instructions": "Hold", "duration_seconds": 30}],
  "estimated_minutes": 45
}

Rules:
- "structure" is either "CIRCUIT" or "SERIES"
- durations and rests are whole seconds
- "reps" is text: a number, a range ("8-10") or "Max"
- never program a movement that loads an injured area
"""

PLAN_USER_PROMPT = """Athlete: {name}, experience {experience}.
Body weight: {body_weight}
Injuries: {injuries}
Injury details: {injury_details}
Main objective: {objective}
Previous adjustment advice: {previous_advice}
Duration: {duration_minutes} min
Focus: {focus_hint}
"""


def _injuries(profile: AthleteProfile) -> str:
    injuries = [sanitize_user_input(i, 100) for i in profile.injuries if i]
    return ", ".join(injuries) if injuries else "None"


def build_plan_prompt(
    profile: AthleteProfile,
    duration_minutes: int,
    focus_hint: str,
) -> str:
    """Build the user prompt for plan generation."""
    return PLAN_USER_PROMPT.format(
        name=sanitize_user_input(profile.name, 100) or "Athlete",
        experience=profile.experience_level.value if profile.experience_level else sanitize_user_input(str(profile.experience), 50),
        body_weight=f"{profile.body_weight} kg" if profile.body_weight else "unknown",
        injuries=_injuries(profile),
        injury_details=sanitize_user_input(profile.injury_details) or "None",
        objective=sanitize_user_input(profile.main_objective) or "General fitness",
        previous_advice=sanitize_user_input(profile.last_ai_feedback) or "None",
        duration_minutes=duration_minutes,
        focus_hint=sanitize_user_input(focus_hint, 200),
    )


# =============================================================================
# Substitution
# =============================================================================

SUBSTITUTION_SYSTEM_PROMPT = COACH_PERSONA + """

Find a safe, pain-free alternative to the given exercise, usable with common gym equipment.
Return a JSON object with this exact structure:
{"name": "...", "sets": 3, "reps": "10", "rest_seconds": 60, "description": "...", "coach_tip": "...", "suggested_load": "..."}
"""


def build_substitution_prompt(profile: AthleteProfile, current_exercise: Exercise) -> str:
    """Build the user prompt for an exercise substitution."""
    return (
        f"Pain-free replacement for: {current_exercise.model_dump_json()}\n"
        f"Injuries: {_injuries(profile)}"
    )


# =============================================================================
# Session analysis
# =============================================================================

FEEDBACK_SYSTEM_PROMPT = COACH_PERSONA + """

Analyse the session below and give short technical advice, with particular attention to the reported injuries.
Answer in plain text, at most five sentences.
"""

GOAL_PROGRESS_SYSTEM_PROMPT = COACH_PERSONA + """

Decide whether this session brings the athlete closer to the objective.
Return a JSON object with this exact structure:
{
  "progress_increment": 2.5,
  "is_on_track": true,
  "adjustment_advice": "Technical advice if progress is slow",
  "current_estimated_completion": 42.5
}
"current_estimated_completion" is the new overall completion percentage, between 0 and 100.
"""


def _metrics_json(metrics: List[PerformanceMetric]) -> str:
    return json.dumps([m.model_dump(mode="json") for m in metrics])


def build_feedback_prompt(profile: AthleteProfile, metrics: List[PerformanceMetric]) -> str:
    """Build the user prompt for the session debrief."""
    return f"Injuries: {_injuries(profile)}\nSession sets: {_metrics_json(metrics)}"


def build_goal_progress_prompt(profile: AthleteProfile, metrics: List[PerformanceMetric]) -> str:
    """Build the user prompt for goal progress analysis."""
    goal = profile.active_goal
    current = goal.current_value if goal else 0.0
    deadline = goal.deadline if goal and goal.deadline else "none"
    return (
        f"Objective: {sanitize_user_input(profile.main_objective) or 'General fitness'}\n"
        f"Deadline: {deadline}\n"
        f"Current progress: {current}%\n"
        f"Last session: {_metrics_json(metrics)}"
    )
