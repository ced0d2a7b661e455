"""
Content catalog schemas for Asha Journey.

Defines Pydantic models for the static catalog:
- Realms (7, fixed)
- Mission descriptors with realm-specific full ids
- Badges
- Available content locators
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# MISSION NUMBERING: realms 1-3 namespace mission numbers as realm*100 + n,
# realms 4-7 use the raw sequence number. Content is keyed by these ids.
# New realms must use the flat convention.
# =============================================================================

MIN_REALM_ID = 1
MAX_REALM_ID = 7
REALM_IDS = range(MIN_REALM_ID, MAX_REALM_ID + 1)
PREFIXED_REALMS = frozenset({1, 2, 3})

RealmId = Annotated[int, Field(ge=MIN_REALM_ID, le=MAX_REALM_ID)]


def is_valid_realm_id(realm_id) -> bool:
    return isinstance(realm_id, int) and not isinstance(realm_id, bool) and realm_id in REALM_IDS


def full_mission_id(realm_id: int, mission_number: int) -> int:
    """Map a per-realm mission number to the id completed missions are keyed by."""
    if realm_id in PREFIXED_REALMS:
        return realm_id * 100 + mission_number
    return mission_number


# -----------------------------------------------------------------------------
# Catalog entries
# -----------------------------------------------------------------------------

class RealmInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: RealmId
    name: str
    focus: str
    description: str = ""
    completion_badge_id: Optional[int] = None


class MissionDescriptor(BaseModel):
    """One mission. `id` is the full id, `number` the position inside the realm."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    realm_id: RealmId
    number: int = Field(..., ge=1)
    title: str
    content_ref: str

    @model_validator(mode="after")
    def id_matches_convention(self):
        expected = full_mission_id(self.realm_id, self.number)
        if self.id != expected:
            raise ValueError(
                f"Mission {self.number} of realm {self.realm_id} must have id {expected}, got {self.id}"
            )
        return self


class BadgeInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    realm_id: RealmId
    name: str
    description: str = ""


class CatalogData(BaseModel):
    """Validated catalog file contents."""
    realms: list[RealmInfo]
    missions: list[MissionDescriptor]
    badges: list[BadgeInfo] = []
    content: list[str] = []  # locators the content layer can load

    @model_validator(mode="after")
    def check_uniqueness(self):
        realm_ids = [realm.id for realm in self.realms]
        if len(realm_ids) != len(set(realm_ids)):
            raise ValueError("Duplicate realm ids in catalog")

        seen: set[tuple[int, int]] = set()
        for mission in self.missions:
            if mission.realm_id not in realm_ids:
                raise ValueError(f"Mission {mission.id} references unknown realm {mission.realm_id}")
            key = (mission.realm_id, mission.id)
            if key in seen:
                raise ValueError(f"Duplicate mission id {mission.id} in realm {mission.realm_id}")
            seen.add(key)

        badge_ids = [badge.id for badge in self.badges]
        if len(badge_ids) != len(set(badge_ids)):
            raise ValueError("Duplicate badge ids in catalog")
        for realm in self.realms:
            if realm.completion_badge_id is not None and realm.completion_badge_id not in badge_ids:
                raise ValueError(
                    f"Realm {realm.id} completion badge {realm.completion_badge_id} is not defined"
                )
        return self
