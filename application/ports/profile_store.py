"""
Profile Store Interface (Port).

Part of HYG-15: Session engine ports

The session engine loads the athlete profile once at session start and
writes it back once on archive. Implementations live in infrastructure/
(JsonProfileStore) and tests/fakes/ (FakeProfileStore).
"""
from typing import Any, Dict, List, Protocol

from domain.models import AthleteProfile


class ProfileStore(Protocol):
    """
    Abstract interface for athlete profile persistence.

    Merge contract for `upsert`:
    - nested mappings are deep-merged into the stored profile
    - non-empty lists replace the stored list
    - empty lists and None values are ignored (stored value preserved)
    - any other value replaces the stored value
    - an unknown id is inserted only if the partial is a complete profile,
      otherwise nothing is written and ProfileStoreError is raised
    """

    def load(self, profile_id: str) -> AthleteProfile:
        """
        Load a profile by id.

        Args:
            profile_id: Profile id

        Returns:
            The stored AthleteProfile

        Raises:
            ProfileNotFoundError: If no profile has this id
        """
        ...

    def upsert(self, partial_profile: Dict[str, Any]) -> List[AthleteProfile]:
        """
        Merge a partial profile into the store and persist it.

        Args:
            partial_profile: JSON-compatible dict; must contain "id"

        Returns:
            All stored profiles after the write

        Raises:
            ProfileStoreError: If nothing could be stored or the write fails
        """
        ...
