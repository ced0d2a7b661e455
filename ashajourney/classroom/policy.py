"""
ProgressPolicy - Access rules and unlocks derived from learner progress.

Provides:
- Mission and realm lock checks
- Realm states (locked -> unlocked -> in progress -> completed)
- Mission completion with next-realm unlock and completion badge
- Merge rules for snapshots loaded from storage
- Navigation tree and progress summary for display
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ashajourney.config import LockPolicy
from ashajourney.schemas import (
    MAX_REALM_ID,
    PREFIXED_REALMS,
    REALM_IDS,
    SCHEMA_VERSION,
    MissionDescriptor,
    ProgressSnapshot,
    RealmInfo,
    is_valid_realm_id,
)

from .catalog import ContentCatalog

if TYPE_CHECKING:
    from .progress import ProgressStore

logger = logging.getLogger(__name__)

ENTRY_REALM = 1


class RealmState(str, Enum):
    """Realm state from the learner's point of view. Never moves backward."""
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    IN_PROGRESS = "in_progress"   # some missions completed
    COMPLETED = "completed"       # every mission completed


class MissionAvailability(str, Enum):
    """Mission availability status for UI display."""
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


@dataclass
class CompletionOutcome:
    """What a mission completion changed."""
    mission_id: Optional[int]             # full id, None for unknown missions
    newly_completed: bool
    realm_completed: bool = False
    unlocked_realm: Optional[int] = None
    earned_badge: Optional[int] = None


@dataclass
class NavigationMission:
    mission: MissionDescriptor
    availability: MissionAvailability
    is_current: bool


@dataclass
class NavigationRealm:
    realm: RealmInfo
    state: RealmState
    missions: list[NavigationMission] = field(default_factory=list)
    completed_count: int = 0
    total_count: int = 0


# -----------------------------------------------------------------------------
# Snapshot merge rules
# -----------------------------------------------------------------------------

def merge_snapshot(loaded: ProgressSnapshot, bypass_mode: bool = False) -> ProgressSnapshot:
    """
    Reconcile a snapshot read from storage with the progress invariants.

    - realm 1 is always unlocked; bypass mode unlocks every realm
    - the current realm must be unlocked (falls back to realm 1)
    - top-level identity and profile identity agree
    - the schema version is brought up to date
    """
    merged = loaded.model_copy(deep=True)
    merged.schema_version = SCHEMA_VERSION

    merged.unlocked_realms = {r for r in merged.unlocked_realms if is_valid_realm_id(r)}
    merged.unlocked_realms.add(ENTRY_REALM)
    if bypass_mode:
        merged.unlocked_realms.update(REALM_IDS)

    if merged.current_realm not in merged.unlocked_realms:
        logger.warning(f"Current realm {merged.current_realm} is not unlocked; using realm {ENTRY_REALM}")
        merged.current_realm = ENTRY_REALM

    if merged.profile is not None:
        if not merged.user_id:
            merged.user_id = merged.profile.user_id
        if not merged.username:
            merged.username = merged.profile.username

    return merged


class ProgressPolicy:
    """
    Answer access and unlock questions from a ProgressStore's state.

    Combines ContentCatalog (missions per realm) with ProgressStore (learner
    state). Mission ids given to the policy are per-realm mission numbers,
    as they appear in navigation; the store is keyed by full ids.
    """

    def __init__(
        self,
        store: "ProgressStore",
        catalog: ContentCatalog,
        lock_policy: LockPolicy = LockPolicy.SEQUENTIAL,
    ):
        """
        Initialize policy.

        Args:
            store: ProgressStore holding the learner's snapshot
            catalog: ContentCatalog for realm mission lists
            lock_policy: SEQUENTIAL gates each mission on the previous one,
                OPEN opens every mission of an unlocked realm
        """
        self.store = store
        self.catalog = catalog
        self.lock_policy = lock_policy

    # -------------------------------------------------------------------------
    # Lock checks
    # -------------------------------------------------------------------------

    def is_realm_locked(self, realm_id: int) -> bool:
        if not is_valid_realm_id(realm_id):
            return True
        return realm_id not in self.store.unlocked_realms

    def is_mission_locked(self, mission_number: int, realm_id: int) -> bool:
        """
        Check whether a mission is locked.

        The first mission of an unlocked realm is always open. Under the
        sequential policy any later mission needs the previous one completed.
        """
        if self.is_realm_locked(realm_id):
            return True
        missions = self.catalog.missions_for_realm(realm_id)
        numbers = [m.number for m in missions]
        if mission_number not in numbers:
            return True

        index = numbers.index(mission_number)
        if index == 0 or self.lock_policy == LockPolicy.OPEN:
            return False
        previous = missions[index - 1]
        return previous.id not in self.store.completed_missions

    def mission_availability(self, mission_number: int, realm_id: int) -> MissionAvailability:
        mission = self.catalog.mission(realm_id, mission_number)
        if mission and mission.id in self.store.completed_missions:
            return MissionAvailability.COMPLETED
        if self.is_mission_locked(mission_number, realm_id):
            return MissionAvailability.LOCKED
        return MissionAvailability.AVAILABLE

    def realm_state(self, realm_id: int) -> RealmState:
        if self.is_realm_locked(realm_id):
            return RealmState.LOCKED
        mission_ids = self.catalog.full_mission_ids(realm_id)
        done = mission_ids & self.store.completed_missions
        if mission_ids and done == mission_ids:
            return RealmState.COMPLETED
        if done:
            return RealmState.IN_PROGRESS
        return RealmState.UNLOCKED

    def is_realm_completed(self, realm_id: int) -> bool:
        mission_ids = self.catalog.full_mission_ids(realm_id)
        return bool(mission_ids) and mission_ids <= self.store.completed_missions

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def on_mission_completed(self, mission_number: int, realm_id: int) -> CompletionOutcome:
        """
        Record a mission completion and apply realm-level consequences.

        When every mission of the realm is completed the next realm is
        unlocked (if there is one) and the realm's completion badge earned.
        Missions outside the catalog change nothing.
        """
        mission = self.catalog.mission(realm_id, mission_number)
        if mission is None:
            logger.warning(f"Ignoring completion of mission {mission_number!r}: not part of realm {realm_id!r}")
            return CompletionOutcome(mission_id=None, newly_completed=False)

        outcome = CompletionOutcome(
            mission_id=mission.id,
            newly_completed=self.store.complete_mission(mission.id),
        )

        if not self.is_realm_completed(realm_id):
            return outcome

        outcome.realm_completed = True
        if not outcome.newly_completed and realm_id not in PREFIXED_REALMS:
            # realms 4-7 share mission ids, so another realm's progress counts here
            logger.info(f"Realm {realm_id} completed by mission ids shared with another realm")
        next_realm = realm_id + 1
        if next_realm <= MAX_REALM_ID and self.store.unlock_realm(next_realm):
            outcome.unlocked_realm = next_realm
            logger.info(f"Realm {realm_id} completed; unlocked realm {next_realm}")

        badge = self.catalog.completion_badge(realm_id)
        if badge and self.store.earn_badge(badge.id):
            outcome.earned_badge = badge.id
            logger.info(f"Earned badge {badge.id} ({badge.name})")

        return outcome

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def get_next_mission(self, realm_id: int) -> Optional[MissionDescriptor]:
        """First mission of the realm that is available and not completed."""
        for mission in self.catalog.missions_for_realm(realm_id):
            if self.mission_availability(mission.number, realm_id) == MissionAvailability.AVAILABLE:
                return mission
        return None

    def get_recommended_mission(self) -> Optional[MissionDescriptor]:
        """
        Get the recommended next mission for the learner.

        Priority:
        1. Next open mission in the current realm
        2. Next open mission in the lowest unlocked realm that has one
        """
        current = self.store.current_realm
        mission = self.get_next_mission(current)
        if mission:
            return mission
        for realm_id in sorted(self.store.unlocked_realms):
            mission = self.get_next_mission(realm_id)
            if mission:
                return mission
        return None

    def navigation_tree(self) -> list[NavigationRealm]:
        """All realms with their missions, availability and counts."""
        current_realm = self.store.current_realm
        recommended = self.get_next_mission(current_realm)

        tree = []
        for realm in self.catalog.realms():
            missions = self.catalog.missions_for_realm(realm.id)
            nav_missions = []
            completed_count = 0
            for mission in missions:
                availability = self.mission_availability(mission.number, realm.id)
                if availability == MissionAvailability.COMPLETED:
                    completed_count += 1
                nav_missions.append(NavigationMission(
                    mission=mission,
                    availability=availability,
                    is_current=recommended is not None and mission.id == recommended.id
                    and realm.id == current_realm,
                ))
            tree.append(NavigationRealm(
                realm=realm,
                state=self.realm_state(realm.id),
                missions=nav_missions,
                completed_count=completed_count,
                total_count=len(missions),
            ))
        return tree

    def progress_summary(self) -> dict:
        """Get progress summary for display."""
        tree = self.navigation_tree()
        total = sum(nav.total_count for nav in tree)
        completed = sum(nav.completed_count for nav in tree)
        recommended = self.get_recommended_mission()

        return {
            "total_missions": total,
            "completed": completed,
            "completion_percent": round(completed / total * 100, 1) if total > 0 else 0,
            "unlocked_realms": sorted(self.store.unlocked_realms),
            "earned_badges": sorted(self.store.earned_badges),
            "current_realm": self.store.current_realm,
            "realms": [
                {
                    "id": nav.realm.id,
                    "name": nav.realm.name,
                    "state": nav.state.value,
                    "completed": nav.completed_count,
                    "total": nav.total_count,
                }
                for nav in tree
            ],
            "recommended": (
                {"realm_id": recommended.realm_id, "mission": recommended.number}
                if recommended else None
            ),
        }
