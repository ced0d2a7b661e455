"""
Progress schemas for Asha Journey.

Defines Pydantic models for the persisted learner state:
- Highlights (saved passages, also the legacy backpack items)
- User profile
- Progress snapshot (the unit written to durable storage)

JSON uses camelCase keys so stored records keep the layout of the
`ashaJourneyUserData` record; Python code uses snake_case names.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .catalog import RealmId

SCHEMA_VERSION = 1
DEFAULT_AVATAR_COLOR = "#ffcc00"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Highlight(CamelModel):
    """A learner-saved passage. Only `notes` changes after creation."""
    id: str
    text: str
    mission_id: int
    realm_id: RealmId
    timestamp: datetime = Field(default_factory=utc_now)
    color: Optional[str] = None
    notes: Optional[str] = None


# legacy backpack entries share the highlight layout
HighlightedItem = Highlight


class UserProfile(CamelModel):
    user_id: str                      # write-once
    username: str
    join_date: datetime = Field(default_factory=utc_now)  # write-once
    avatar_color: Optional[str] = DEFAULT_AVATAR_COLOR
    bio: Optional[str] = None
    highlights: list[Highlight] = []


class ProgressSnapshot(CamelModel):
    schema_version: int = SCHEMA_VERSION
    username: str = ""
    user_id: str = ""
    profile: Optional[UserProfile] = None
    completed_missions: set[int] = Field(default_factory=set)
    unlocked_realms: set[RealmId] = Field(default_factory=lambda: {1})
    earned_badges: set[int] = Field(default_factory=set)
    current_realm: RealmId = 1
    backpack: list[HighlightedItem] = []

    def to_json(self) -> str:
        """Serialize for storage (camelCase keys)."""
        return self.model_dump_json(by_alias=True)
