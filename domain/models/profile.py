"""
Athlete profile: the subset the session engine reads and writes.

Part of HYG-14: Guided session engine domain model
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from domain.models.performance import PersonalRecord
from domain.models.session_record import CompletedSession, SessionRecord


class ExperienceLevel(str, Enum):
    """Training experience tier."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


# Profiles created by the French-language coaching screens
_EXPERIENCE_ALIASES = {
    "beginner": ExperienceLevel.BEGINNER,
    "débutant": ExperienceLevel.BEGINNER,
    "debutant": ExperienceLevel.BEGINNER,
    "intermediate": ExperienceLevel.INTERMEDIATE,
    "intermédiaire": ExperienceLevel.INTERMEDIATE,
    "intermediaire": ExperienceLevel.INTERMEDIATE,
    "advanced": ExperienceLevel.ADVANCED,
    "avancé": ExperienceLevel.ADVANCED,
    "avance": ExperienceLevel.ADVANCED,
}


def parse_experience(value: Optional[str]) -> Optional[ExperienceLevel]:
    """Map a stored experience label to an ExperienceLevel, or None if unknown."""
    if value is None:
        return None
    if isinstance(value, ExperienceLevel):
        return value
    return _EXPERIENCE_ALIASES.get(str(value).strip().lower())


class GoalProgressEntry(BaseModel):
    """One point of the goal completion chart."""

    date: str
    value: float = Field(..., ge=0, le=100)


class ActiveGoal(BaseModel):
    """The goal currently tracked for the athlete, as a completion percentage."""

    label: str = ""
    current_value: float = Field(default=0.0, ge=0, le=100)
    target_value: float = 100.0
    start_value: float = 0.0
    unit: str = "%"
    deadline: Optional[str] = None
    is_safe: bool = True
    history: List[GoalProgressEntry] = Field(default_factory=list)


class VolumePoint(BaseModel):
    """Tonnage of one archived session, for the volume chart."""

    date: str
    tonnage: float = Field(..., ge=0)


class GoalProgressAnalysis(BaseModel):
    """Post-session estimate of progress toward the active goal."""

    progress_increment: float = 0.0
    is_on_track: bool = True
    adjustment_advice: str = ""
    current_estimated_completion: float = Field(default=0.0, ge=0, le=100)


class AthleteProfile(BaseModel):
    """
    Athlete profile as loaded from the ProfileStore.

    Treated as immutable by the engine: every update returns a new instance
    through `model_copy(update=...)`.
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    body_weight: Optional[float] = Field(default=None, description="Body weight in kg")
    experience: Union[ExperienceLevel, str] = ExperienceLevel.BEGINNER
    main_objective: str = ""
    injuries: List[str] = Field(default_factory=list)
    injury_details: Optional[str] = None

    personal_records: Dict[str, PersonalRecord] = Field(default_factory=dict)
    trend_history: Dict[str, List[PersonalRecord]] = Field(default_factory=dict)
    session_records: List[SessionRecord] = Field(default_factory=list)
    active_goal: Optional[ActiveGoal] = None
    volume_history: List[VolumePoint] = Field(default_factory=list)
    last_ai_feedback: Optional[str] = None
    current_streak: int = Field(default=0, ge=0, description="Consecutive days with a session")
    longest_streak: int = Field(default=0, ge=0, description="Best streak so far")

    model_config = {"frozen": True}

    @field_validator("experience", mode="before")
    @classmethod
    def normalize_experience(cls, v):
        """Accept aliases; keep unknown labels verbatim."""
        level = parse_experience(v)
        return level if level is not None else v

    @field_validator("body_weight", mode="before")
    @classmethod
    def parse_body_weight(cls, v):
        """Body weight is entered as free text ("72", "72,5 kg") on some screens."""
        if v is None or isinstance(v, (int, float)):
            return v
        text = str(v).strip().replace(",", ".")
        digits = "".join(ch for ch in text if ch.isdigit() or ch == ".")
        try:
            return float(digits)
        except ValueError:
            return None

    @property
    def experience_level(self) -> Optional[ExperienceLevel]:
        return parse_experience(self.experience)

    @property
    def completed_sessions(self) -> List[CompletedSession]:
        return [r for r in self.session_records if isinstance(r, CompletedSession)]
