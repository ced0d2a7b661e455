"""
ProgressStore - The authoritative record of one learner's progress.

Holds the in-memory ProgressSnapshot and persists it to SnapshotStorage:
- load() on session start, degrading to defaults on any failure
- save() after every mutation (failures are logged, state stays in memory)
- idempotent completion, unlock and badge operations
- profile updates with protected identity fields
- highlights and the legacy backpack
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from ashajourney.errors import StorageCorrupt, StorageError
from ashajourney.schemas import (
    DEFAULT_AVATAR_COLOR,
    REALM_IDS,
    SCHEMA_VERSION,
    Highlight,
    HighlightedItem,
    ProgressSnapshot,
    UserProfile,
    is_valid_realm_id,
)

from .policy import merge_snapshot
from .storage import STORAGE_KEY, SnapshotStorage

logger = logging.getLogger(__name__)

BYPASS_USERNAME = "Developer"
BYPASS_BIO = "Bitcoin learning enthusiast exploring the realms of digital currency."

BASIC_PROTECTED_FIELDS = frozenset({"user_id"})
FULL_PROTECTED_FIELDS = frozenset({"user_id", "username", "join_date"})
BACKPACK_EDITABLE_FIELDS = frozenset({"notes"})


def _field_names(model_cls: type[BaseModel], partial: Mapping[str, Any]) -> dict[str, Any]:
    """Map snake_case or camelCase keys of a partial update to field names."""
    by_alias = {
        (info.alias or name): name for name, info in model_cls.model_fields.items()
    }
    result = {}
    for key, value in partial.items():
        name = key if key in model_cls.model_fields else by_alias.get(key)
        if name is None:
            logger.warning(f"Ignoring unknown {model_cls.__name__} field: {key}")
            continue
        result[name] = value
    return result


def _is_positive_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ProgressStore:
    """
    Single-learner progress store with load / mutate / save lifecycle.

    Mutations are applied in call order and each one that changes state is
    persisted immediately, so storage always holds a snapshot at least as
    new as the last applied mutation.
    """

    def __init__(
        self,
        storage: Optional[SnapshotStorage] = None,
        bypass_mode: bool = False,
        storage_key: str = STORAGE_KEY,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize progress store.

        Args:
            storage: SnapshotStorage instance (default: ~/.ashajourney/progress.db)
            bypass_mode: Unlock every realm for demos and testing
            storage_key: Record key inside the storage
            clock: Returns the current time (default: UTC now)
        """
        self.storage = storage or SnapshotStorage()
        self.bypass_mode = bypass_mode
        self.storage_key = storage_key
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._snapshot = self.default_snapshot()
        self._authenticated = bypass_mode

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _new_user_id(self) -> str:
        return f"user_{int(self._clock().timestamp() * 1000)}"

    def _new_item_id(self) -> str:
        return f"highlight_{int(self._clock().timestamp() * 1000)}_{uuid.uuid4().hex[:8]}"

    def default_snapshot(self) -> ProgressSnapshot:
        """
        Snapshot used when nothing usable is stored.

        Without bypass mode only realm 1 is unlocked and there is no profile
        yet. With bypass mode a developer profile gets every realm.
        """
        if not self.bypass_mode:
            return ProgressSnapshot()

        user_id = self._new_user_id()
        return ProgressSnapshot(
            username=BYPASS_USERNAME,
            user_id=user_id,
            profile=UserProfile(
                user_id=user_id,
                username=BYPASS_USERNAME,
                join_date=self._clock(),
                avatar_color=DEFAULT_AVATAR_COLOR,
                bio=BYPASS_BIO,
            ),
            unlocked_realms=set(REALM_IDS),
        )

    def _read_snapshot(self) -> Optional[ProgressSnapshot]:
        """
        Read and validate the stored snapshot.

        Raises:
            StorageUnavailable: If storage cannot be read
            StorageCorrupt: If the record cannot be parsed or validated
        """
        payload = self.storage.read(self.storage_key)
        if payload is None:
            return None

        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as e:
            raise StorageCorrupt(f"Stored progress is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise StorageCorrupt("Stored progress is not a JSON object")

        version = raw.get("schemaVersion", 0)
        if not isinstance(version, int) or version > SCHEMA_VERSION:
            raise StorageCorrupt(f"Unsupported progress schema version: {version!r}")

        # missing or null fields fall back to defaults
        raw = {key: value for key, value in raw.items() if value is not None}
        try:
            return ProgressSnapshot.model_validate(raw)
        except ValidationError as e:
            raise StorageCorrupt(f"Stored progress failed validation: {e}") from e

    def load(self) -> ProgressSnapshot:
        """
        Load the learner's snapshot from storage.

        Absent, unreadable or corrupt records yield the default snapshot;
        failures are logged, never raised. Loading never writes.
        """
        try:
            stored = self._read_snapshot()
        except StorageCorrupt as e:
            logger.error(f"Discarding stored progress: {e}")
            stored = None
        except StorageError as e:
            logger.error(f"Progress storage unavailable, using defaults: {e}")
            stored = None

        if stored is None:
            self._snapshot = self.default_snapshot()
        else:
            self._snapshot = merge_snapshot(stored, bypass_mode=self.bypass_mode)
            logger.info(
                f"Loaded progress for {self._snapshot.username or 'anonymous learner'}: "
                f"{len(self._snapshot.completed_missions)} missions, "
                f"realms {sorted(self._snapshot.unlocked_realms)}"
            )

        self._authenticated = self.bypass_mode or bool(self._snapshot.username)
        return self.snapshot

    def save(self, snapshot: Optional[ProgressSnapshot] = None) -> bool:
        """
        Persist the current snapshot (or replace it with `snapshot` first).

        A replacement snapshot is merged like a loaded one, and completed
        missions, unlocked realms and earned badges already held are kept.

        Returns False if the write failed; the in-memory state stays
        authoritative for the rest of the session.
        """
        if snapshot is not None:
            replacement = snapshot.model_copy(deep=True)
            replacement.completed_missions |= self._snapshot.completed_missions
            replacement.unlocked_realms |= self._snapshot.unlocked_realms
            replacement.earned_badges |= self._snapshot.earned_badges
            self._snapshot = merge_snapshot(replacement, bypass_mode=self.bypass_mode)
        try:
            self.storage.write(self.storage_key, self._snapshot.to_json())
        except StorageError as e:
            logger.error(f"Failed to save progress: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> ProgressSnapshot:
        """Copy of the current snapshot."""
        return self._snapshot.model_copy(deep=True)

    @property
    def completed_missions(self) -> frozenset[int]:
        return frozenset(self._snapshot.completed_missions)

    @property
    def unlocked_realms(self) -> frozenset[int]:
        return frozenset(self._snapshot.unlocked_realms)

    @property
    def earned_badges(self) -> frozenset[int]:
        return frozenset(self._snapshot.earned_badges)

    @property
    def current_realm(self) -> int:
        return self._snapshot.current_realm

    @property
    def profile(self) -> Optional[UserProfile]:
        profile = self._snapshot.profile
        return profile.model_copy(deep=True) if profile else None

    @property
    def backpack(self) -> list[HighlightedItem]:
        return [item.model_copy() for item in self._snapshot.backpack]

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def complete_mission(self, mission_id: int) -> bool:
        """Mark a mission (full id) completed. Returns True if it was new."""
        if not _is_positive_id(mission_id):
            logger.warning(f"Ignoring completion of invalid mission id {mission_id!r}")
            return False
        if mission_id in self._snapshot.completed_missions:
            return False
        self._snapshot.completed_missions.add(mission_id)
        self.save()
        return True

    def unlock_realm(self, realm_id: int) -> bool:
        """Unlock a realm. Returns True if it was locked before."""
        if not is_valid_realm_id(realm_id):
            logger.warning(f"Ignoring unlock of unknown realm {realm_id!r}")
            return False
        if realm_id in self._snapshot.unlocked_realms:
            return False
        self._snapshot.unlocked_realms.add(realm_id)
        self.save()
        return True

    def earn_badge(self, badge_id: int) -> bool:
        """Award a badge. Returns True if it was new."""
        if not _is_positive_id(badge_id):
            logger.warning(f"Ignoring invalid badge id {badge_id!r}")
            return False
        if badge_id in self._snapshot.earned_badges:
            return False
        self._snapshot.earned_badges.add(badge_id)
        self.save()
        return True

    def set_current_realm(self, realm_id: int) -> bool:
        """Move the learner to an unlocked realm."""
        if realm_id not in self._snapshot.unlocked_realms:
            logger.warning(f"Cannot enter locked realm {realm_id!r}")
            return False
        if realm_id == self._snapshot.current_realm:
            return False
        self._snapshot.current_realm = realm_id
        self.save()
        return True

    # -------------------------------------------------------------------------
    # Identity and profile
    # -------------------------------------------------------------------------

    def register(self, username: str, email: Optional[str] = None) -> UserProfile:
        """
        Create the learner profile if none exists yet.

        Existing progress is kept; an existing profile is returned unchanged.
        """
        if self._snapshot.profile is not None:
            logger.info(f"Profile already exists for {self._snapshot.profile.username}")
            self._authenticated = True
            return self.profile

        user_id = self._new_user_id()
        self._snapshot.profile = UserProfile(
            user_id=user_id,
            username=username,
            join_date=self._clock(),
            avatar_color=DEFAULT_AVATAR_COLOR,
            bio=f"Contact: {email}" if email else None,
        )
        self._snapshot.user_id = user_id
        self._snapshot.username = username
        self._authenticated = True
        self.save()
        return self.profile

    def sign_out(self):
        """End the session without clearing stored progress."""
        self._authenticated = False

    def _merge_profile(self, partial: Mapping[str, Any], protected: frozenset[str]) -> bool:
        current = self._snapshot.profile
        if current is None:
            return False

        updates = _field_names(UserProfile, partial)
        merged = current.model_dump()
        merged.update(updates)
        for name in protected:
            merged[name] = getattr(current, name)

        self._snapshot.profile = UserProfile.model_validate(merged)
        self._snapshot.username = self._snapshot.profile.username
        self.save()
        return True

    def update_profile(self, partial: Mapping[str, Any]) -> bool:
        """Merge profile fields; `user_id` can never change."""
        return self._merge_profile(partial, BASIC_PROTECTED_FIELDS)

    def update_user_profile(self, partial: Mapping[str, Any]) -> bool:
        """Merge profile fields; `user_id`, `username` and `join_date` can never change."""
        return self._merge_profile(partial, FULL_PROTECTED_FIELDS)

    # -------------------------------------------------------------------------
    # Highlights (stored on the profile)
    # -------------------------------------------------------------------------

    def get_highlights(self) -> list[Highlight]:
        profile = self._snapshot.profile
        if profile is None:
            return []
        return [h.model_copy() for h in profile.highlights]

    def add_highlight(self, highlight: Union[Highlight, Mapping[str, Any]]) -> bool:
        if self._snapshot.profile is None:
            return False
        if not isinstance(highlight, Highlight):
            highlight = Highlight.model_validate(highlight)
        highlights = self.get_highlights() + [highlight]
        return self.update_user_profile({"highlights": highlights})

    def remove_highlight(self, highlight_id: str) -> bool:
        if self._snapshot.profile is None:
            return False
        current = self.get_highlights()
        highlights = [h for h in current if h.id != highlight_id]
        if len(highlights) == len(current):
            return False
        return self.update_user_profile({"highlights": highlights})

    def update_highlight(self, highlight_id: str, updates: Mapping[str, Any]) -> bool:
        if self._snapshot.profile is None:
            return False
        if not any(h.id == highlight_id for h in self._snapshot.profile.highlights):
            return False
        changes = _field_names(Highlight, updates)
        changes.pop("id", None)
        highlights = [
            Highlight.model_validate({**h.model_dump(), **changes}) if h.id == highlight_id else h
            for h in self.get_highlights()
        ]
        return self.update_user_profile({"highlights": highlights})

    # -------------------------------------------------------------------------
    # Backpack (legacy highlight list)
    # -------------------------------------------------------------------------

    def add_to_backpack(
        self,
        text: str,
        mission_id: int,
        realm_id: int,
        color: Optional[str] = None,
    ) -> HighlightedItem:
        """Save a passage to the backpack with a generated unique id."""
        existing = {item.id for item in self._snapshot.backpack}
        item_id = self._new_item_id()
        while item_id in existing:
            item_id = self._new_item_id()

        item = HighlightedItem(
            id=item_id,
            text=text,
            mission_id=mission_id,
            realm_id=realm_id,
            timestamp=self._clock(),
            color=color or DEFAULT_AVATAR_COLOR,
        )
        self._snapshot.backpack.append(item)
        self.save()
        return item.model_copy()

    def remove_from_backpack(self, item_id: str) -> bool:
        before = len(self._snapshot.backpack)
        self._snapshot.backpack = [item for item in self._snapshot.backpack if item.id != item_id]
        if len(self._snapshot.backpack) == before:
            return False
        self.save()
        return True

    def update_backpack_item(self, item_id: str, updates: Mapping[str, Any]) -> bool:
        """
        Edit a backpack item's notes.

        Items are immutable apart from `notes`; other keys are ignored. An
        empty note clears it.
        """
        changes = _field_names(HighlightedItem, updates)
        ignored = set(changes) - BACKPACK_EDITABLE_FIELDS
        if ignored:
            logger.warning(f"Backpack items only allow note edits; ignoring {sorted(ignored)}")
        if "notes" not in changes:
            return False

        notes = changes["notes"] or None
        for index, item in enumerate(self._snapshot.backpack):
            if item.id == item_id:
                self._snapshot.backpack[index] = item.model_copy(update={"notes": notes})
                self.save()
                return True
        return False

    def find_backpack_items(self, realm_id: Optional[int] = None, mission_id: Optional[int] = None) -> list[HighlightedItem]:
        """Backpack items filtered by realm and/or mission."""
        items: Iterable[HighlightedItem] = self._snapshot.backpack
        if realm_id is not None:
            items = [item for item in items if item.realm_id == realm_id]
        if mission_id is not None:
            items = [item for item in items if item.mission_id == mission_id]
        return [item.model_copy() for item in items]
