"""
Session history records stored on the athlete profile.

Part of HYG-14: Guided session engine domain model

A profile's history mixes sessions planned on the calendar and sessions
actually performed. They are kept as a tagged union on `kind` so callers
can branch exhaustively instead of probing optional fields.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from domain.models.performance import PerformanceMetric


class ExerciseResult(BaseModel):
    """An exercise of a completed session with its best performed set."""

    name: str = Field(..., min_length=1)
    sets: int = Field(default=1, ge=1)
    reps: str = ""
    performed_weight: Optional[float] = Field(default=None, ge=0)
    performed_reps: Optional[int] = Field(default=None, ge=0)


class PlannedSession(BaseModel):
    """A session scheduled ahead of time, not yet performed."""

    kind: Literal["planned"] = "planned"
    id: str
    date: str
    notes: Optional[str] = None
    is_auto_generated: bool = False


class CompletedSession(BaseModel):
    """An archived guided session."""

    kind: Literal["completed"] = "completed"
    date: str
    exercises: List[ExerciseResult] = Field(default_factory=list)
    metrics: List[PerformanceMetric] = Field(default_factory=list)
    tonnage: float = Field(default=0.0, ge=0)
    set_count: int = Field(default=0, ge=0)
    effort_seconds: int = Field(default=0, ge=0)
    mood: str = ""
    debrief: str = ""
    focus: Optional[str] = None
    goal_value_at_session: Optional[float] = None


SessionRecord = Annotated[
    Union[PlannedSession, CompletedSession],
    Field(discriminator="kind"),
]
