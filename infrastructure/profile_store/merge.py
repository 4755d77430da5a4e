"""
Partial profile merge shared by the ProfileStore implementations.

Part of HYG-23: Profile persistence
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from domain.models import AthleteProfile

logger = logging.getLogger(__name__)

# Keys a partial needs before it can create a new profile
REQUIRED_NEW_PROFILE_KEYS = ("id", "name")


def deep_merge(existing: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge `updates` into a copy of `existing`.

    - dict into dict: merged recursively with these same rules
    - non-empty list: replaces
    - empty list or None: ignored
    - anything else: replaces

    Neither argument is modified.
    """
    merged = dict(existing)
    for key, value in updates.items():
        current = merged.get(key)
        if isinstance(value, dict):
            if isinstance(current, dict):
                merged[key] = deep_merge(current, value)
            else:
                merged[key] = dict(value)
        elif isinstance(value, list):
            if value:
                merged[key] = list(value)
        elif value is not None:
            merged[key] = value
    return merged


def merge_into_profiles(
    profiles: List[Dict[str, Any]],
    partial: Dict[str, Any],
) -> Tuple[List[Dict[str, Any]], Optional[AthleteProfile]]:
    """
    Apply a partial profile to a list of stored profile dicts.

    Args:
        profiles: Stored profiles as JSON dicts
        partial: Partial profile; must contain "id"

    Returns:
        (new profile list, merged profile). The merged profile is None when
        the id is unknown and the partial is not complete enough to insert;
        the list is then returned unchanged.

    Raises:
        ValueError: If the partial has no id, or the merge result is not a
            valid profile
    """
    profile_id = partial.get("id")
    if not profile_id:
        raise ValueError("Partial profile must contain an 'id'")

    for index, stored in enumerate(profiles):
        if stored.get("id") == profile_id:
            merged = deep_merge(stored, partial)
            try:
                profile = AthleteProfile.model_validate(merged)
            except ValidationError as e:
                raise ValueError(f"Merged profile {profile_id} is invalid: {e}") from e
            updated = list(profiles)
            updated[index] = profile.model_dump(mode="json")
            return updated, profile

    if not all(key in partial for key in REQUIRED_NEW_PROFILE_KEYS):
        logger.warning(f"Profile {profile_id} not found and partial is incomplete, ignoring")
        return profiles, None

    try:
        profile = AthleteProfile.model_validate(partial)
    except ValidationError as e:
        logger.warning(f"Profile {profile_id} not found and partial is not a valid profile: {e}")
        return profiles, None

    logger.info(f"Adding new profile {profile_id}")
    return [*profiles, profile.model_dump(mode="json")], profile
