"""
Infrastructure Layer for the guided session engine.

Part of HYG-23: Profile persistence

This package contains concrete implementations of the engine's ports:
- profile_store/: JSON file ProfileStore

The OpenAI PlanProvider lives in backend/ai/.
"""

from infrastructure.profile_store import JsonProfileStore

__all__ = [
    "JsonProfileStore",
]
