"""
ContentCatalog - Read-only access to realms, missions and badges.

Provides:
- Realm lookup with "unknown realm" fallbacks
- Ordered mission descriptors per realm
- Badge lookup, including each realm's completion badge
- Existence checks for content locators
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from ashajourney.errors import CatalogError
from ashajourney.schemas import (
    BadgeInfo,
    CatalogData,
    MissionDescriptor,
    RealmInfo,
    full_mission_id,
)
from ashajourney.utils import load_yaml, resolve_data_path

logger = logging.getLogger(__name__)

UNKNOWN_REALM_NAME = "Unknown Realm"
UNKNOWN_REALM_FOCUS = "Unknown Focus"


def default_content_ref(realm_id: int, mission_number: int) -> str:
    return f"realm{realm_id}/mission{mission_number}"


def build_catalog_data(raw: dict[str, Any]) -> CatalogData:
    """
    Build validated catalog data from a parsed catalog document.

    Realm entries list their missions as titles (or mappings with `title`
    and optional `content_ref`); the list position is the mission number.

    Raises:
        CatalogError: If the document is malformed
    """
    realms = []
    missions = []
    try:
        for realm_entry in raw.get("realms", []):
            entry = dict(realm_entry)
            mission_entries = entry.pop("missions", []) or []
            realm = RealmInfo(**entry)
            realms.append(realm)

            for number, mission_entry in enumerate(mission_entries, start=1):
                if isinstance(mission_entry, str):
                    mission_entry = {"title": mission_entry}
                missions.append(MissionDescriptor(
                    id=full_mission_id(realm.id, number),
                    realm_id=realm.id,
                    number=number,
                    title=mission_entry["title"],
                    content_ref=mission_entry.get("content_ref") or default_content_ref(realm.id, number),
                ))

        return CatalogData(
            realms=realms,
            missions=missions,
            badges=raw.get("badges", []),
            content=raw.get("content", []),
        )
    except (ValidationError, KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"Invalid catalog data: {e}") from e


class ContentCatalog:
    """
    Static catalog of realms and missions.

    Never mutated after construction; lookups with unknown ids return
    None, empty lists or the "unknown realm" labels instead of raising.
    """

    def __init__(self, data: CatalogData):
        self.data = data
        self._realms: dict[int, RealmInfo] = {realm.id: realm for realm in data.realms}
        self._missions: dict[int, list[MissionDescriptor]] = {}
        for mission in sorted(data.missions, key=lambda m: (m.realm_id, m.number)):
            self._missions.setdefault(mission.realm_id, []).append(mission)
        self._badges: dict[int, BadgeInfo] = {badge.id: badge for badge in data.badges}
        self._content = frozenset(data.content)

    # -------------------------------------------------------------------------
    # Realms
    # -------------------------------------------------------------------------

    def realms(self) -> list[RealmInfo]:
        """All realms ordered by id."""
        return [self._realms[realm_id] for realm_id in sorted(self._realms)]

    def realm(self, realm_id: int) -> Optional[RealmInfo]:
        return self._realms.get(realm_id)

    def has_realm(self, realm_id: int) -> bool:
        return realm_id in self._realms

    def realm_name(self, realm_id: int) -> str:
        realm = self._realms.get(realm_id)
        return realm.name if realm else UNKNOWN_REALM_NAME

    def realm_focus(self, realm_id: int) -> str:
        realm = self._realms.get(realm_id)
        return realm.focus if realm else UNKNOWN_REALM_FOCUS

    # -------------------------------------------------------------------------
    # Missions
    # -------------------------------------------------------------------------

    def missions_for_realm(self, realm_id: int) -> list[MissionDescriptor]:
        """Missions of a realm ordered by mission number."""
        return list(self._missions.get(realm_id, []))

    def mission(self, realm_id: int, mission_number: int) -> Optional[MissionDescriptor]:
        for mission in self._missions.get(realm_id, []):
            if mission.number == mission_number:
                return mission
        return None

    def mission_by_full_id(self, realm_id: int, mission_id: int) -> Optional[MissionDescriptor]:
        for mission in self._missions.get(realm_id, []):
            if mission.id == mission_id:
                return mission
        return None

    def full_mission_ids(self, realm_id: int) -> set[int]:
        return {mission.id for mission in self._missions.get(realm_id, [])}

    # -------------------------------------------------------------------------
    # Badges
    # -------------------------------------------------------------------------

    def badge(self, badge_id: int) -> Optional[BadgeInfo]:
        return self._badges.get(badge_id)

    def badges_for_realm(self, realm_id: int) -> list[BadgeInfo]:
        return [badge for badge in self._badges.values() if badge.realm_id == realm_id]

    def completion_badge(self, realm_id: int) -> Optional[BadgeInfo]:
        """Badge awarded when every mission of the realm is completed."""
        realm = self._realms.get(realm_id)
        if not realm or realm.completion_badge_id is None:
            return None
        return self._badges.get(realm.completion_badge_id)

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def has_content(self, locator: str) -> bool:
        return locator in self._content

    @property
    def content_locators(self) -> frozenset[str]:
        return self._content


def load_catalog(path: Optional[Path] = None) -> ContentCatalog:
    """
    Load and validate a catalog file.

    Args:
        path: Catalog YAML file (default: bundled data/catalog.yaml)

    Raises:
        FileNotFoundError: If the file doesn't exist
        CatalogError: If the file cannot be parsed or validated
    """
    file_path = Path(path) if path else resolve_data_path("catalog")
    try:
        raw = load_yaml(file_path)
    except yaml.YAMLError as e:
        raise CatalogError(f"Could not parse catalog {file_path}: {e}") from e
    except ValueError as e:
        raise CatalogError(str(e)) from e

    catalog = ContentCatalog(build_catalog_data(raw))
    logger.debug(
        f"Loaded catalog from {file_path}: {len(catalog.realms())} realms, "
        f"{len(catalog.data.missions)} missions"
    )
    return catalog
