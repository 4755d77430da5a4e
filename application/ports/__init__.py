"""
Collaborator Interfaces (Ports) for the guided session engine.

Part of HYG-15: Session engine ports

This package defines abstract interfaces that decouple the session engine
from infrastructure (profile storage, AI plan generation). Implementations
are provided in infrastructure/ and backend/ai/, with in-memory fakes in
tests/fakes/.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the engine needs)
- Adapters: Concrete implementations (how it's provided)

Usage:
    from application.ports import ProfileStore, PlanProvider

    class SessionController:
        def __init__(self, profile_store: ProfileStore, plan_provider: PlanProvider):
            ...
"""

from application.ports.profile_store import ProfileStore
from application.ports.plan_provider import PlanProvider

__all__ = [
    "ProfileStore",
    "PlanProvider",
]
