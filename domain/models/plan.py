"""
Workout plan value objects.

Part of HYG-14: Guided session engine domain model

A WorkoutPlan is produced by the plan provider when a session starts and is
discarded when the session is archived or abandoned. It is immutable except
for single-exercise substitution, which returns a new plan.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PlanStructure(str, Enum):
    """How the main exercises are chained."""

    CIRCUIT = "CIRCUIT"
    SERIES = "SERIES"


class PhaseExercise(BaseModel):
    """
    A time-boxed item of the warm-up or cool-down.

    Examples:
        >>> PhaseExercise(name="Jumping Jacks", instructions="Stay light", duration_seconds=45)
    """

    name: str = Field(..., min_length=1)
    instructions: str = ""
    duration_seconds: int = Field(..., ge=0, description="Fixed countdown length")

    model_config = {"frozen": True}


class Exercise(BaseModel):
    """
    A main-set exercise as prescribed by the plan.

    `reps` is free text on purpose: the plan provider returns ranges ("10-12"),
    failure sets ("Echec") or AMRAP-style targets ("Max"). The session engine
    reads it through `extract_reps`.
    """

    name: str = Field(..., min_length=1)
    sets: int = Field(..., ge=1, description="Target set count")
    reps: str = Field(default="", description="Prescribed rep specification")
    rest_seconds: int = Field(default=0, ge=0, description="Rest after each set")
    description: str = ""
    coach_tip: Optional[str] = None
    suggested_load: Optional[str] = Field(
        default=None,
        description="Load suggested by the plan provider, e.g. '40kg'",
    )

    model_config = {"frozen": True}


class WorkoutPlan(BaseModel):
    """
    A full guided session: warm-up, main exercises, cool-down.

    The warm-up is run as `warmup` followed by `stretch_prep` (dynamic
    stretches), see `warmup_sequence`.
    """

    launch_phrase: str = ""
    structure: PlanStructure = PlanStructure.SERIES
    warmup: List[PhaseExercise] = Field(default_factory=list)
    stretch_prep: List[PhaseExercise] = Field(default_factory=list)
    exercises: List[Exercise] = Field(default_factory=list)
    cooldown: List[PhaseExercise] = Field(default_factory=list)
    estimated_minutes: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @property
    def warmup_sequence(self) -> List[PhaseExercise]:
        """Combined warm-up list: warm-up items then stretch prep."""
        return [*self.warmup, *self.stretch_prep]

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)

    def exercise_at(self, index: int) -> Optional[Exercise]:
        """Return the exercise at `index`, or None when out of range."""
        if 0 <= index < len(self.exercises):
            return self.exercises[index]
        return None

    def with_exercise(self, index: int, exercise: Exercise) -> "WorkoutPlan":
        """
        Return a copy of the plan with the exercise at `index` replaced.

        Raises:
            IndexError: If `index` is outside the exercise list
        """
        if not 0 <= index < len(self.exercises):
            raise IndexError(f"No exercise at index {index}")
        exercises = list(self.exercises)
        exercises[index] = exercise
        return self.model_copy(update={"exercises": exercises})
