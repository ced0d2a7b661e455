"""
Progress store tests.

Covers the load/save lifecycle, idempotent mutations, degraded storage,
protected profile fields, highlights and the backpack.
"""

import json

import pytest

from ashajourney.classroom import STORAGE_KEY, ProgressStore, SnapshotStorage
from ashajourney.errors import StorageUnavailable
from ashajourney.schemas import SCHEMA_VERSION, ProgressSnapshot


class BrokenStorage(SnapshotStorage):
    """Storage whose reads and writes always fail."""

    def read(self, key=STORAGE_KEY):
        raise StorageUnavailable("disk on fire")

    def write(self, key, payload):
        raise StorageUnavailable("disk on fire")


def stored_json(storage):
    return json.loads(storage.read(STORAGE_KEY))


class TestLoad:

    def test_defaults_when_nothing_stored(self, store, storage):
        assert store.unlocked_realms == {1}
        assert store.completed_missions == frozenset()
        assert store.earned_badges == frozenset()
        assert store.current_realm == 1
        assert store.profile is None
        assert not store.is_authenticated
        assert storage.writes == 0

    def test_bypass_defaults(self, storage, clock):
        store = ProgressStore(storage, bypass_mode=True, clock=clock)
        store.load()
        assert store.unlocked_realms == {1, 2, 3, 4, 5, 6, 7}
        assert store.profile.username == "Developer"
        assert store.snapshot.user_id == store.profile.user_id
        assert store.is_authenticated
        assert storage.writes == 0

    def test_bypass_keeps_stored_progress(self, storage, clock):
        first = ProgressStore(storage, clock=clock)
        first.load()
        first.complete_mission(101)

        store = ProgressStore(storage, bypass_mode=True, clock=clock)
        store.load()
        assert store.completed_missions == {101}
        assert store.unlocked_realms == {1, 2, 3, 4, 5, 6, 7}

    def test_round_trip_across_sessions(self, store, db_path, clock):
        store.register("asha")
        store.complete_mission(103)
        store.unlock_realm(2)
        store.earn_badge(1)
        store.set_current_realm(2)

        reloaded = ProgressStore(SnapshotStorage(db_path), clock=clock)
        reloaded.load()
        assert reloaded.completed_missions == {103}
        assert reloaded.unlocked_realms == {1, 2}
        assert reloaded.earned_badges == {1}
        assert reloaded.current_realm == 2
        assert reloaded.profile.username == "asha"
        assert reloaded.is_authenticated

    def test_legacy_record(self, storage, clock):
        storage.write(STORAGE_KEY, json.dumps({
            "username": "asha",
            "completedMissions": [101, 102],
            "unlockedRealms": [2],
            "profile": None,
            "currentRealm": 5,
        }))
        store = ProgressStore(storage, clock=clock)
        store.load()
        assert store.completed_missions == {101, 102}
        assert store.unlocked_realms == {1, 2}
        assert store.current_realm == 1
        assert store.snapshot.schema_version == SCHEMA_VERSION
        assert store.is_authenticated

    @pytest.mark.parametrize("payload", [
        "{not json",
        "[1, 2, 3]",
        json.dumps({"schemaVersion": SCHEMA_VERSION + 1, "completedMissions": [101]}),
        json.dumps({"schemaVersion": "one"}),
        json.dumps({"completedMissions": "lots"}),
    ])
    def test_corrupt_record_falls_back_to_defaults(self, storage, clock, payload):
        storage.write(STORAGE_KEY, payload)
        writes = storage.writes
        store = ProgressStore(storage, clock=clock)
        store.load()
        assert store.unlocked_realms == {1}
        assert store.completed_missions == frozenset()
        # loading never overwrites the stored record
        assert storage.writes == writes
        assert storage.read(STORAGE_KEY) == payload

    def test_unavailable_storage(self, tmp_path, clock):
        store = ProgressStore(BrokenStorage(tmp_path / "p.db"), clock=clock)
        snapshot = store.load()
        assert snapshot.unlocked_realms == {1}
        assert store.complete_mission(101)
        assert store.completed_missions == {101}
        assert store.save() is False

    def test_unopenable_database(self, tmp_path, clock):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = ProgressStore(SnapshotStorage(blocker / "progress.db"), clock=clock)
        assert store.load().unlocked_realms == {1}
        assert store.save() is False


class TestMutations:

    def test_complete_mission_is_idempotent(self, store, storage):
        assert store.complete_mission(103) is True
        assert store.complete_mission(103) is False
        assert store.completed_missions == {103}
        assert storage.writes == 1
        assert stored_json(storage)["completedMissions"] == [103]

    def test_unlock_realm(self, store, storage):
        assert store.unlock_realm(2) is True
        assert store.unlock_realm(2) is False
        assert store.unlock_realm(1) is False
        assert store.unlock_realm(8) is False
        assert store.unlock_realm(0) is False
        assert store.unlocked_realms == {1, 2}
        assert storage.writes == 1

    def test_earn_badge(self, store):
        assert store.earn_badge(1) is True
        assert store.earn_badge(1) is False
        assert store.earned_badges == {1}

    def test_set_current_realm(self, store):
        assert store.set_current_realm(3) is False
        assert store.current_realm == 1
        store.unlock_realm(3)
        assert store.set_current_realm(3) is True
        assert store.current_realm == 3

    def test_snapshot_is_a_copy(self, store):
        snapshot = store.snapshot
        snapshot.completed_missions.add(999)
        snapshot.unlocked_realms.add(7)
        assert store.completed_missions == frozenset()
        assert store.unlocked_realms == {1}

    def test_save_replaces_snapshot(self, store, storage):
        snapshot = store.snapshot
        snapshot.completed_missions = {1, 2}
        assert store.save(snapshot) is True
        assert store.completed_missions == {1, 2}
        assert sorted(stored_json(storage)["completedMissions"]) == [1, 2]

    def test_save_never_shrinks_progress(self, store, storage):
        store.complete_mission(101)
        store.unlock_realm(2)
        store.earn_badge(1)
        assert store.save(ProgressSnapshot(unlocked_realms={3}, current_realm=3)) is True
        assert store.unlocked_realms == {1, 2, 3}
        assert store.completed_missions == {101}
        assert store.earned_badges == {1}
        assert store.current_realm == 3
        assert sorted(stored_json(storage)["unlockedRealms"]) == [1, 2, 3]

    def test_save_resets_current_realm_outside_unlocked(self, store):
        assert store.save(ProgressSnapshot(unlocked_realms={1}, current_realm=5)) is True
        assert store.current_realm == 1

    @pytest.mark.parametrize("bad_id", [None, True, 0, -3, "101", 1.5])
    def test_invalid_ids_are_ignored(self, store, storage, bad_id):
        store.complete_mission(101)
        writes = storage.writes
        assert store.complete_mission(bad_id) is False
        assert store.earn_badge(bad_id) is False
        assert storage.writes == writes
        assert store.completed_missions == {101}
        assert store.earned_badges == frozenset()

    def test_progress_survives_invalid_completion(self, store, db_path, clock):
        store.complete_mission(101)
        store.complete_mission(102)
        store.complete_mission(None)
        reloaded = ProgressStore(SnapshotStorage(db_path), clock=clock)
        reloaded.load()
        assert reloaded.completed_missions == {101, 102}


class TestProfile:

    def test_register(self, store):
        profile = store.register("asha", email="asha@example.com")
        assert profile.username == "asha"
        assert profile.user_id.startswith("user_")
        assert profile.bio == "Contact: asha@example.com"
        assert profile.avatar_color == "#ffcc00"
        assert store.snapshot.username == "asha"
        assert store.snapshot.user_id == profile.user_id
        assert store.is_authenticated

    def test_register_keeps_existing_profile_and_progress(self, store):
        first = store.register("asha")
        store.complete_mission(101)
        second = store.register("someone-else")
        assert second.user_id == first.user_id
        assert second.username == "asha"
        assert store.completed_missions == {101}

    def test_sign_out_keeps_progress(self, store):
        store.register("asha")
        store.complete_mission(101)
        store.sign_out()
        assert not store.is_authenticated
        assert store.completed_missions == {101}

    def test_update_profile_protects_user_id(self, store):
        original = store.register("asha")
        assert store.update_profile({"userId": "hijack", "username": "kofi", "bio": "hello"})
        profile = store.profile
        assert profile.user_id == original.user_id
        assert profile.username == "kofi"
        assert profile.bio == "hello"
        assert store.snapshot.username == "kofi"

    def test_update_user_profile_protects_identity(self, store):
        original = store.register("asha")
        assert store.update_user_profile({
            "user_id": "hijack",
            "username": "kofi",
            "joinDate": "2001-01-01T00:00:00Z",
            "avatarColor": "#000000",
            "favouriteColor": "ignored",
        })
        profile = store.profile
        assert profile.user_id == original.user_id
        assert profile.username == "asha"
        assert profile.join_date == original.join_date
        assert profile.avatar_color == "#000000"

    def test_update_without_profile(self, store, storage):
        assert store.update_profile({"bio": "x"}) is False
        assert storage.writes == 0


class TestHighlights:

    def test_no_profile_is_a_no_op(self, store, storage):
        assert store.get_highlights() == []
        assert store.add_highlight({"id": "h1", "text": "t", "missionId": 101, "realmId": 1}) is False
        assert store.remove_highlight("h1") is False
        assert store.update_highlight("h1", {"notes": "n"}) is False
        assert storage.writes == 0

    def test_highlight_lifecycle(self, store):
        store.register("asha")
        assert store.add_highlight({"id": "h1", "text": "Cowries", "missionId": 101, "realmId": 1})
        assert [h.id for h in store.get_highlights()] == ["h1"]

        assert store.update_highlight("h1", {"notes": "first money", "id": "h2"})
        highlight = store.get_highlights()[0]
        assert highlight.id == "h1"
        assert highlight.notes == "first money"

        assert store.update_highlight("missing", {"notes": "x"}) is False
        assert store.remove_highlight("missing") is False
        assert store.remove_highlight("h1") is True
        assert store.get_highlights() == []


class TestBackpack:

    def test_add_items_get_unique_ids(self, store):
        first = store.add_to_backpack("Barter needs a coincidence of wants", 101, 1)
        second = store.add_to_backpack("Barter needs a coincidence of wants", 101, 1)
        assert first.id != second.id
        assert first.id.startswith("highlight_")
        assert first.color == "#ffcc00"
        assert len(store.backpack) == 2

    def test_notes_are_the_only_editable_field(self, store):
        item = store.add_to_backpack("Halving every 210,000 blocks", 5, 4, color="#00ff00")
        assert store.update_backpack_item(item.id, {"notes": "remember", "text": "changed"})
        updated = store.backpack[0]
        assert updated.text == "Halving every 210,000 blocks"
        assert updated.color == "#00ff00"
        assert updated.notes == "remember"

        assert store.update_backpack_item(item.id, {"text": "changed"}) is False
        assert store.update_backpack_item(item.id, {"notes": ""})
        assert store.backpack[0].notes is None
        assert store.update_backpack_item("missing", {"notes": "x"}) is False

    def test_find_and_remove(self, store):
        a = store.add_to_backpack("a", 101, 1)
        store.add_to_backpack("b", 102, 1)
        store.add_to_backpack("c", 1, 4)
        assert [i.text for i in store.find_backpack_items(realm_id=1)] == ["a", "b"]
        assert [i.text for i in store.find_backpack_items(realm_id=1, mission_id=102)] == ["b"]
        assert store.remove_from_backpack(a.id) is True
        assert store.remove_from_backpack(a.id) is False
        assert [i.text for i in store.backpack] == ["b", "c"]

    def test_backpack_persists(self, store, db_path, clock):
        item = store.add_to_backpack("Proof of work", 3, 4)
        reloaded = ProgressStore(SnapshotStorage(db_path), clock=clock)
        reloaded.load()
        assert [i.id for i in reloaded.backpack] == [item.id]
        assert reloaded.backpack[0].timestamp == item.timestamp
