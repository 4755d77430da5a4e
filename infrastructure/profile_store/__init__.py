"""
Profile persistence adapters.

Part of HYG-23: Profile persistence
"""

from infrastructure.profile_store.json_profile_store import JsonProfileStore
from infrastructure.profile_store.merge import deep_merge, merge_into_profiles

__all__ = [
    "JsonProfileStore",
    "deep_merge",
    "merge_into_profiles",
]
