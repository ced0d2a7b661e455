"""
Exception taxonomy for Asha Journey.

Resolution and storage errors are raised inside the classroom components and
converted into result values (or default snapshots) at the resolver and
progress store boundaries. None of them is fatal.
"""

from typing import Any


class AshaJourneyError(Exception):
    """Base class for all Asha Journey errors."""


class CatalogError(AshaJourneyError, ValueError):
    """Content catalog data is malformed."""


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------

class ResolutionError(AshaJourneyError):
    """A (realm, mission) pair could not be resolved to content."""

    def __init__(self, message: str, realm_id: Any = None, mission_id: Any = None):
        super().__init__(message)
        self.realm_id = realm_id
        self.mission_id = mission_id


class InvalidIdentifier(ResolutionError, ValueError):
    """Realm or mission identifier is malformed or out of range."""

    def __init__(self, message: str, realm_id: Any = None, mission_id: Any = None, field: str = ""):
        super().__init__(message, realm_id, mission_id)
        self.field = field


class MissionNotFound(ResolutionError, LookupError):
    """Every candidate content locator was exhausted."""

    def __init__(self, realm_id: Any, mission_id: Any, attempted: list[str] | None = None):
        super().__init__(
            f"Mission {mission_id} in Realm {realm_id} not found",
            realm_id,
            mission_id,
        )
        self.attempted = attempted or []


class ContentNotFound(AshaJourneyError, LookupError):
    """A content loader has nothing at the requested locator."""

    def __init__(self, locator: str):
        super().__init__(f"No content at locator: {locator}")
        self.locator = locator


# -----------------------------------------------------------------------------
# Storage
# -----------------------------------------------------------------------------

class StorageError(AshaJourneyError):
    """Durable progress storage failed."""


class StorageUnavailable(StorageError):
    """Progress storage could not be read or written."""


class StorageCorrupt(StorageError):
    """Stored progress record could not be parsed or validated."""
