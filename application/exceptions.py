"""
Application-layer exceptions.

These exceptions are used across the session engine, its ports and the
infrastructure adapters.
"""


class SessionEngineError(Exception):
    """Base class for session engine errors."""

    pass


class InvalidTransitionError(SessionEngineError):
    """An event was dispatched in a phase that does not accept it."""

    def __init__(self, event: str, phase: str):
        super().__init__(f"Event {event} is not valid in phase {phase}")
        self.event = event
        self.phase = phase


class ProfileNotFoundError(SessionEngineError):
    """The ProfileStore has no profile with the requested id."""

    def __init__(self, profile_id: str):
        super().__init__(f"Profile not found: {profile_id}")
        self.profile_id = profile_id


class ProfileStoreError(SessionEngineError):
    """The ProfileStore could not read or write its backing storage."""

    pass


class PlanProviderError(SessionEngineError):
    """The plan provider returned an unusable response or failed."""

    pass


class SessionPersistenceError(SessionEngineError):
    """Archiving the session failed; the session stays in DEBRIEF.

    Raised when the ProfileStore write on archive fails. The caller can
    retry `archive()` without re-deriving session data.
    """

    pass
