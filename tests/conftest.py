"""Shared fixtures for Asha Journey tests."""

from datetime import datetime, timedelta, timezone

import pytest

from ashajourney.classroom import (
    ContentCatalog,
    ProgressPolicy,
    ProgressStore,
    SnapshotStorage,
    load_catalog,
)


class FakeClock:
    """Deterministic clock advancing one millisecond per call."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(milliseconds=1)
        return self.now


class RecordingStorage(SnapshotStorage):
    """SnapshotStorage that counts writes."""

    def __init__(self, db_path):
        super().__init__(db_path)
        self.writes = 0

    def write(self, key, payload):
        self.writes += 1
        super().write(key, payload)


@pytest.fixture(scope="session")
def catalog() -> ContentCatalog:
    return load_catalog()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "progress.db"


@pytest.fixture
def storage(db_path):
    return RecordingStorage(db_path)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(storage, clock):
    store = ProgressStore(storage, clock=clock)
    store.load()
    return store


@pytest.fixture
def policy(store, catalog):
    return ProgressPolicy(store, catalog)
