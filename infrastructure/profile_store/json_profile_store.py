"""
JSON file Profile Store Implementation.

Part of HYG-23: Profile persistence

This module implements the ProfileStore protocol on top of a single local
JSON file holding the list of athlete profiles. A missing or corrupt file
reads as an empty store. Writes go to a temporary file that then replaces
the original, so a failed write never truncates existing data.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from application.exceptions import ProfileNotFoundError, ProfileStoreError
from domain.models import AthleteProfile
from infrastructure.profile_store.merge import merge_into_profiles

logger = logging.getLogger(__name__)


class JsonProfileStore:
    """
    JSON file implementation of ProfileStore.

    Usage:
        store = JsonProfileStore("./data/profiles.json")
        profile = store.load("athlete-1")
        store.upsert({"id": "athlete-1", "last_ai_feedback": "Nice work"})
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize with the path of the profiles file.

        Args:
            path: JSON file; created on first write
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> List[Dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read profile store {self._path}: {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"Profile store {self._path} does not hold a list, ignoring it")
            return []
        return [item for item in data if isinstance(item, dict)]

    def _write_all(self, profiles: List[Dict[str, Any]]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(profiles, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise ProfileStoreError(f"Could not write profile store {self._path}: {e}") from e

    def load_all(self) -> List[AthleteProfile]:
        """All stored profiles; entries that fail validation are skipped."""
        profiles = []
        for item in self._read_all():
            try:
                profiles.append(AthleteProfile.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid profile {item.get('id')!r}: {e}")
        return profiles

    def load(self, profile_id: str) -> AthleteProfile:
        """
        Load a profile by id.

        Raises:
            ProfileNotFoundError: If no valid profile has this id
        """
        for item in self._read_all():
            if item.get("id") != profile_id:
                continue
            try:
                return AthleteProfile.model_validate(item)
            except ValidationError as e:
                logger.error(f"Stored profile {profile_id} is invalid: {e}")
                break
        raise ProfileNotFoundError(profile_id)

    def upsert(self, partial_profile: Dict[str, Any]) -> List[AthleteProfile]:
        """
        Merge a partial profile and persist the whole list.

        Raises:
            ProfileStoreError: If the merge is invalid, the id is unknown and
                the partial is not a full profile, or the write fails
        """
        stored = self._read_all()
        try:
            updated, merged = merge_into_profiles(stored, partial_profile)
        except ValueError as e:
            raise ProfileStoreError(str(e)) from e

        if merged is None:
            raise ProfileStoreError(
                f"Profile {partial_profile.get('id')} is not stored and the partial cannot create it"
            )

        self._write_all(updated)
        logger.debug(f"Saved profile {merged.id} to {self._path}")

        return self.load_all()
