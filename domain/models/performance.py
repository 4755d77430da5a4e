"""
Per-set performance and personal record value objects.

Part of HYG-14: Guided session engine domain model
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class PerformanceMetric(BaseModel):
    """
    Result of one completed set. Created once, never modified.

    `volume` is always weight x reps; it is derived when omitted and checked
    when given.
    """

    exercise_name: str = Field(..., min_length=1)
    volume: float = Field(default=0.0, ge=0)
    effort_seconds: int = Field(default=0, ge=0)
    rest_seconds: int = Field(default=0, ge=0)
    weight: float = Field(default=0.0, ge=0)
    reps: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def derive_volume(cls, data):
        if isinstance(data, dict) and data.get("volume") is None:
            data = {**data, "volume": (data.get("weight") or 0) * (data.get("reps") or 0)}
        return data

    @model_validator(mode="after")
    def check_volume(self) -> "PerformanceMetric":
        expected = self.weight * self.reps
        if abs(self.volume - expected) > 1e-9:
            raise ValueError(
                f"volume {self.volume} does not match weight x reps ({expected})"
            )
        return self


class PersonalRecord(BaseModel):
    """Best known weight/reps pair for an exercise."""

    weight: float = Field(..., ge=0)
    reps: int = Field(..., ge=0)
    date: str = Field(..., description="ISO 8601 timestamp")
    effort_seconds: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @property
    def volume(self) -> float:
        return self.weight * self.reps
