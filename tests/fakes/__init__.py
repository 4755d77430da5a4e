"""
Fake Collaborator Implementations for Testing.

Part of HYG-15: Session engine ports

This package provides in-memory fake implementations of the session
engine's ports for fast, isolated testing. No file system or network
required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Factory functions for common test scenarios

Usage:
    from tests.fakes import FakeProfileStore, FakePlanProvider, create_profile

    store = FakeProfileStore([create_profile()])
    provider = FakePlanProvider()
"""
from typing import Optional

from domain.models import ActiveGoal, AthleteProfile, ExperienceLevel, PersonalRecord

from tests.fakes.plan_provider import FakePlanProvider, make_plan
from tests.fakes.profile_store import FakeProfileStore


# =============================================================================
# Factory Functions
# =============================================================================


def create_profile(
    *,
    profile_id: str = "athlete-1",
    experience: ExperienceLevel = ExperienceLevel.INTERMEDIATE,
    body_weight: Optional[float] = 80.0,
    goal_value: Optional[float] = 40.0,
    **overrides,
) -> AthleteProfile:
    """
    Create an AthleteProfile with sensible test defaults.

    Args:
        profile_id: Profile id
        experience: Experience level
        body_weight: Body weight in kg
        goal_value: Current value of the active goal, or None for no goal
        **overrides: Any other AthleteProfile field

    Returns:
        AthleteProfile
    """
    fields = {
        "id": profile_id,
        "name": "Test Athlete",
        "body_weight": body_weight,
        "experience": experience,
        "main_objective": "Squat 1.5x body weight",
        "injuries": ["left shoulder"],
    }
    if goal_value is not None:
        fields["active_goal"] = ActiveGoal(label="Squat 1.5x BW", current_value=goal_value)
    fields.update(overrides)
    return AthleteProfile(**fields)


def create_store(*profiles: AthleteProfile) -> FakeProfileStore:
    """FakeProfileStore seeded with `profiles`, or one default profile."""
    return FakeProfileStore(list(profiles) or [create_profile()])


def record(weight: float, reps: int, date: str = "2024-01-01T10:00:00+00:00") -> PersonalRecord:
    return PersonalRecord(weight=weight, reps=reps, date=date)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Fake implementations
    "FakeProfileStore",
    "FakePlanProvider",
    # Factory functions
    "make_plan",
    "create_profile",
    "create_store",
    "record",
]
